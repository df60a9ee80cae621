import pytest
from conftest import NOW, make_record
from tara.analytics import feedback as fa
from tara.models.interaction import FeedbackAggregate, SegmentKey, RetrainCriteria


def test_aggregate_sorted_worst_rating_first():
    records = [
        make_record(language="hi", subject="math", grade=6, user_rating=4.5),
        make_record(language="ta", subject="physics", grade=9, user_rating=2.1),
        make_record(language="en", subject="chemistry", grade=12, user_rating=3.3),
    ]
    rows = fa.analyze_user_feedback(records, now=NOW)
    assert [r.avg_rating for r in rows] == [2.1, 3.3, 4.5]
    assert rows[0].segment == SegmentKey(language="ta", subject="physics", grade=9)


def test_segment_statistics():
    ratings = [5, 4, 3, 2, 1, None]
    records = [
        make_record(user_rating=r, response_time=1000.0 * (i + 1), tokens_used=100 if i % 2 else None,
                    user_feedback="too long" if r == 1 else None)
        for i, r in enumerate(ratings)
    ]
    [row] = fa.analyze_user_feedback(records, now=NOW)
    assert row.total_interactions == 6
    assert row.avg_rating == pytest.approx(3.0)
    assert row.positive_count == 2
    assert row.negative_count == 2
    assert row.positive_count + row.negative_count <= row.total_interactions
    assert row.avg_response_time == pytest.approx(3500.0)
    assert row.avg_tokens_used == pytest.approx(100.0)
    assert row.common_issues == ["too long"]


def test_time_window_filters_old_records():
    records = [make_record(days_ago=1, user_rating=5), make_record(days_ago=40, user_rating=1)]
    [recent] = fa.analyze_user_feedback(records, time_range_days=30, now=NOW)
    assert recent.total_interactions == 1
    [both] = fa.analyze_user_feedback(records, time_range_days=60, now=NOW)
    assert both.total_interactions == 2


def test_unrated_segments_sort_last():
    records = [
        make_record(subject="math", user_rating=None),
        make_record(subject="physics", user_rating=4),
        make_record(subject="chemistry", user_rating=1),
    ]
    rows = fa.analyze_user_feedback(records, now=NOW)
    assert [r.segment.subject for r in rows] == ["chemistry", "physics", "math"]
    assert rows[-1].avg_rating is None


def test_knowledge_gaps_grouped_and_sorted_by_count():
    records = [
        make_record(subject="math", language="hi", concept_difficulty="hard", user_rating=1, question="q1"),
        make_record(subject="math", language="hi", concept_difficulty="hard", retry_count=3, question="q2"),
        make_record(subject="physics", language="en", flagged_for_review=True, question="q3"),
        make_record(subject="physics", language="en", user_rating=5, question="fine"),
        make_record(subject="physics", language="en", user_rating=3, retry_count=1, question="fine too"),
    ]
    gaps = fa.identify_knowledge_gaps(records)
    assert [g.count for g in gaps] == [2, 1]
    top = gaps[0]
    assert (top.segment.subject, top.segment.language, top.segment.concept_difficulty) == ("math", "hi", "hard")
    assert top.questions == ["q1", "q2"]
    assert top.avg_retries == pytest.approx(1.5)
    assert gaps[1].questions == ["q3"]


def _segment(total, negative):
    return FeedbackAggregate(
        segment=SegmentKey(language="hi", subject="math", grade=8),
        avg_rating=2.0, total_interactions=total, negative_count=negative,
    )


def test_decide_retrain_trips_on_ratio_and_volume():
    decision = fa.decide_retrain([_segment(1500, 600)])
    assert decision.should_tune is True
    [reason] = decision.reasons
    assert reason.category == "math-hi"
    assert reason.ratio == pytest.approx(0.4)
    assert reason.interactions == 1500


def test_decide_retrain_needs_volume():
    decision = fa.decide_retrain([_segment(500, 400)])
    assert decision.should_tune is False
    assert decision.reasons == []


def test_decide_retrain_thresholds_are_strict():
    assert fa.decide_retrain([_segment(2000, 600)]).should_tune is False   # ratio exactly 0.3
    assert fa.decide_retrain([_segment(1000, 900)]).should_tune is False   # volume exactly 1000
    assert fa.decide_retrain([_segment(0, 0)]).should_tune is False


def test_decide_retrain_custom_criteria():
    strict = RetrainCriteria(low_rating_threshold=0.1, volume_threshold=10)
    decision = fa.decide_retrain([_segment(50, 10)], strict)
    assert decision.should_tune is True
    assert decision.criteria == strict


def test_should_retrain_uses_last_seven_days():
    recent = [make_record(days_ago=1, user_rating=1 if i < 400 else 5) for i in range(1200)]
    assert fa.should_retrain(recent, now=NOW).should_tune is True
    stale = [make_record(days_ago=10, user_rating=1 if i < 400 else 5) for i in range(1200)]
    assert fa.should_retrain(stale, now=NOW).should_tune is False


def test_generate_training_data_filters():
    good = make_record(user_rating=5, tokens_used=300, response_quality=0.9, subject="math", language="hi")
    records = [
        good,
        make_record(user_rating=3, tokens_used=300, response_quality=0.9),
        make_record(user_rating=5, tokens_used=800, response_quality=0.9),
        make_record(user_rating=5, tokens_used=300, response_quality=0.5),
        make_record(user_rating=5, tokens_used=None, response_quality=0.9),
    ]
    [ex] = fa.generate_training_data(records)
    assert [m.role for m in ex.messages] == ["system", "user", "assistant"]
    assert "math" in ex.messages[0].content and "hi" in ex.messages[0].content
    assert ex.messages[1].content == good.question
    assert ex.metadata == {"rating": 5, "subject": "math", "language": "hi", "grade": 8}
