from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Tuple
import yaml

def _freeze(table: Mapping[str, Iterable[str]] | None) -> Mapping[str, Tuple[str, ...]]:
    return MappingProxyType({str(k): tuple(str(w) for w in (v or [])) for k, v in (table or {}).items()})

@dataclass(frozen=True)
class MarkerTables:
    """
    Immutable language -> marker-word mapping consumed by the heuristics.

    `language` feeds the language-quality check (unknown codes fall back to
    `fallback_language`); `cultural` feeds cultural relevance (unknown codes
    get no markers).
    """
    language: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))
    cultural: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))
    relevance_stopwords: frozenset = frozenset()
    fallback_language: str = "en"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarkerTables":
        return cls(
            language=_freeze(data.get("language")),
            cultural=_freeze(data.get("cultural")),
            relevance_stopwords=frozenset(w.lower() for w in data.get("relevance_stopwords") or []),
            fallback_language=str(data.get("fallback_language") or "en"),
        )

    def language_markers(self, language: str) -> Tuple[str, ...]:
        found = self.language.get(language)
        if found is None:
            found = self.language.get(self.fallback_language, ())
        return found

    def cultural_markers(self, language: str) -> Tuple[str, ...]:
        return self.cultural.get(language, ())

    def with_language(self, code: str, *, language: Iterable[str] = (), cultural: Iterable[str] = ()) -> "MarkerTables":
        """Return a copy with marker lists added (or replaced) for `code`."""
        lang = dict(self.language)
        cult = dict(self.cultural)
        if language:
            lang[code] = list(language)
        if cultural:
            cult[code] = list(cultural)
        return MarkerTables(
            language=_freeze(lang),
            cultural=_freeze(cult),
            relevance_stopwords=self.relevance_stopwords,
            fallback_language=self.fallback_language,
        )

def load_markers(text: str) -> MarkerTables:
    return MarkerTables.from_dict(yaml.safe_load(text) or {})

@lru_cache()
def default_markers() -> MarkerTables:
    src = resources.files("tara.qa").joinpath("markers.yaml").read_text(encoding="utf-8")
    return load_markers(src)
