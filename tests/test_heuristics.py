import pytest
from tara.qa import heuristics as h
from tara.qa.markers import MarkerTables, default_markers, load_markers


def test_relevance_speed_of_light():
    score = h.relevance("What is the speed of light", "The speed of light is constant")
    assert score == pytest.approx(0.667, abs=1e-3)


@pytest.mark.parametrize("question,answer", [("", "anything at all"), ("What is gravity", ""), (None, "x"), ("abc", None)])
def test_relevance_empty_inputs_are_zero(question, answer):
    assert h.relevance(question, answer) == 0.0


def test_relevance_only_short_tokens_is_zero():
    assert h.relevance("is it ok", "is it ok") == 0.0


def test_relevance_is_case_insensitive_and_literal():
    assert h.relevance("Newton Laws", "newton gave three laws") == 1.0
    # punctuation stays attached to the token
    assert h.relevance("newton laws", "newton's laws.") == 0.0


def test_language_quality_markers():
    assert h.language_quality("यह एक अच्छा उत्तर है", "hi") == 0.8
    assert h.language_quality("no markers here", "hi") == 0.4
    assert h.language_quality("", "hi") == 0.0
    assert h.language_quality(None, "en") == 0.0


def test_language_quality_unknown_code_uses_english_markers():
    assert h.language_quality("the cat sat", "xx") == 0.8
    assert h.language_quality("cat sat", "xx") == 0.4


def test_cultural_relevance_saturates_at_two_markers():
    assert h.cultural_relevance("Diwali is a festival celebrated across India", "en") == 1.0
    assert h.cultural_relevance("We played CRICKET after school", "en") == 0.5
    assert h.cultural_relevance("nothing cultural", "en") == 0.0


def test_cultural_relevance_unknown_language_is_zero():
    assert h.cultural_relevance("India festival cricket", "ta") == 0.0
    assert h.cultural_relevance("India festival cricket", "zz") == 0.0


def test_completeness():
    assert h.completeness("Short.") == 0.5
    assert h.completeness("") == 0.0
    assert h.completeness("Short") == 0.0
    assert h.completeness("x" * 60) == 0.5
    assert h.completeness("x" * 51 + "।") == 1.0
    assert h.completeness("Great question!   ") == 0.5


def test_clarity_step_function():
    assert h.clarity("") == 0.0
    assert h.clarity("...!!!") == 0.0
    assert h.clarity("Short one. Another one.") == 0.7
    assert h.clarity("a" * 80) == 0.9
    assert h.clarity("a" * 120) == 0.6
    assert h.clarity("a" * 160) == 0.3


def test_clamp01():
    assert h.clamp01(1.7) == 1.0
    assert h.clamp01(-3) == 0.0
    assert h.clamp01(float("nan")) == 0.0
    assert h.clamp01("not a number") == 0.0
    assert h.clamp01(None) == 0.0


def test_default_markers_are_immutable():
    m = default_markers()
    assert "है" in m.language_markers("hi")
    with pytest.raises(TypeError):
        m.language["xx"] = ("foo",)


def test_injected_markers_extend_languages():
    base = default_markers()
    bn = base.with_language("bn", language=["এবং"], cultural=["কলকাতা", "দুর্গা"])
    assert h.language_quality("আমি এবং তুমি", "bn", bn) == 0.8
    assert h.cultural_relevance("কলকাতা শহরে দুর্গা পূজা", "bn", bn) == 1.0
    # the base tables are untouched
    assert base.cultural_markers("bn") == ()


def test_load_markers_from_yaml_text():
    m = load_markers("language:\n  fr: [le, la]\nfallback_language: fr\n")
    assert isinstance(m, MarkerTables)
    assert m.language_markers("de") == ("le", "la")
    assert h.relevance("the quick fox", "the quick fox", m) == 1.0


def test_relevance_only_skips_the_article():
    assert h.relevance("cats and dogs", "cats dogs") == pytest.approx(2 / 3)
    assert h.relevance("cats and dogs", "cats and dogs") == 1.0
    assert default_markers().relevance_stopwords == frozenset({"the"})
