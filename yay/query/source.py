"""Searching the AUR."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Iterable

from yay.query.types import AURPackage, AURQuery, get_search_by


class SearchVerbosity(IntEnum):
    NUMBER_MENU = 0
    DETAILED = 1
    MINIMAL = 2


class AURQueryError(Exception):
    """Every AUR search attempt failed."""

    def __init__(self, errors: list[BaseException]) -> None:
        self.errors = list(errors)
        points = "\n\t".join(f"* {error}" for error in self.errors)
        noun = "error" if len(self.errors) == 1 else "errors"
        super().__init__(f"{len(self.errors)} {noun} occurred:\n\t{points}\n\n")


def query_aur(aur_client: Any, terms: Iterable[str], search_by: str) -> list[AURPackage]:
    """Search the AUR term by term, returning the first successful result.

    aur_client must offer ``get(query)``; raises AURQueryError when all fail.
    """
    by = get_search_by(search_by)
    errors: list[BaseException] = []

    for word in terms:
        try:
            return aur_client.get(AURQuery(needles=[word], by=by, contains=True))
        except Exception as exc:
            errors.append(exc)

    if errors:
        raise AURQueryError(errors)
    return []