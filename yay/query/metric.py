"""Ranking of search results by similarity, popularity and source."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

_MIN_VOTES = 30
_SOURCE_AUR = "aur"
_SOURCE_SCORES = {"core": 40.0, "extra": 30.0, "community": 20.0, "multilib": 10.0}

_FNV_OFFSET = 2166136261
_FNV_PRIME = 16777619


def hamming_similarity(first: str, second: str) -> float:
    """Case-insensitive Hamming similarity in [0, 1]; length gaps count as misses."""
    a, b = first.lower(), second.lower()
    if not a and not b:
        return 1.0
    shorter, longer = sorted((a, b), key=len)
    distance = len(longer) - len(shorter)
    distance += sum(1 for x, y in zip(shorter, longer) if x != y)
    return 1 - distance / len(longer)


def _fnv32a(data: bytes) -> int:
    value = _FNV_OFFSET
    for byte in data:
        value ^= byte
        value = (value * _FNV_PRIME) & 0xFFFFFFFF
    return value


@dataclass
class SearchResult:
    """One package found by a search, from the AUR or a repository."""

    source: str
    name: str
    description: str = ""
    votes: int = 0
    provides: list[str] = field(default_factory=list)


@dataclass
class SearchRanking:
    """Orders search results against a search string."""

    results: list[SearchResult] = field(default_factory=list)
    search: str = ""
    bottom_up: bool = False
    separate_sources: bool = False
    sort_by: str = ""
    metric: Callable[[str, str], float] = field(default=hamming_similarity)
    _distance_cache: dict[str, float] = field(default_factory=dict, init=False, repr=False)
    _source_cache: dict[str, float] = field(default_factory=dict, init=False, repr=False)

    def _aur_popularity(self, result: SearchResult) -> float:
        return 1 - (_MIN_VOTES / (_MIN_VOTES + float(result.votes)))

    def get_metric(self, result: SearchResult) -> float:
        """Weighted similarity of a result's name, provides and description."""
        cached = self._distance_cache.get(result.name)
        if cached is not None:
            return cached

        if result.name.casefold() == self.search.casefold():
            return 1.0

        sim = self.metric(result.name, self.search)
        for provided in result.provides:
            sim = max(sim, self.metric(provided, self.search) * 0.80)

        sim_desc = self.metric(result.description, self.search)

        # Repository packages always get full popularity.
        popularity = 1.0
        if result.source == _SOURCE_AUR:
            popularity = self._aur_popularity(result)

        sim = sim * 0.5 + sim_desc * 0.2 + popularity * 0.3
        self._distance_cache[result.name] = sim
        return sim

    def separate_source_score(self, source: str, score: float) -> float:
        """Bonus grouping results by source when sources are kept apart."""
        if not self.separate_sources:
            return 0.0
        if score == 1.0:
            return 50.0
        if source == _SOURCE_AUR:
            return 0.0
        if source in _SOURCE_SCORES:
            return _SOURCE_SCORES[source]

        cached = self._source_cache.get(source)
        if cached is not None:
            return cached
        source_score = float(_fnv32a(source.encode()) % 9 + 2)
        self._source_cache[source] = source_score
        return source_score

    def calculate_metric(self, result: SearchResult) -> float:
        score = self.get_metric(result)
        return self.separate_source_score(result.source, score) + score

    def sort(self) -> None:
        """Sort results best first, or best last when bottom_up is set."""
        self.results.sort(key=self.calculate_metric, reverse=not self.bottom_up)