"""Helpers for sets of strings and maps of string sets."""

from __future__ import annotations

from typing import AbstractSet, Optional


class MapStringSet(dict):
    """A mapping from a string to a set of strings."""

    def add(self, key: str, value: str) -> None:
        """Add value to the set stored under key, creating the set if needed."""
        self.setdefault(key, set()).add(value)


def equal(first: Optional[AbstractSet[str]], second: Optional[AbstractSet[str]]) -> bool:
    """Compare two string sets; a missing set only equals another missing set."""
    if first is None and second is None:
        return True
    if first is None or second is None:
        return False
    return len(first) == len(second) and all(item in second for item in first)