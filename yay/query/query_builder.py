"""Searching AUR and repositories together and presenting ranked results."""

from __future__ import annotations

import unicodedata
from typing import Any, Container, Iterable, Sequence, Sized

from yay import text
from yay.query.errors import AURSearchError
from yay.query.filter import remove_invalid_targets
from yay.query.metric import SearchRanking, SearchResult
from yay.query.source import SearchVerbosity, query_aur
from yay.query.types import (
    AURPackage,
    SearchBy,
    aur_pkg_search_string,
    get_search_by,
    sync_pkg_search_string,
)
from yay.settings.target_mode import TargetMode
from yay.text import Logger, tr

SOURCE_AUR = "aur"


def _has_symbol(term: str) -> bool:
    return any(unicodedata.category(char).startswith("S") for char in term)


def matches_search(pkg: AURPackage, terms: Sequence[str]) -> bool:
    """Return whether every term occurs in the package name or description."""
    if len(terms) <= 1:
        return True

    name = pkg.name.lower()
    desc = pkg.description.lower()
    for term in terms:
        if _has_symbol(term):
            return True
        target = term.lower()
        if target not in name and target not in desc:
            return False
    return True


class SourceQueryBuilder:
    """Runs a search over the AUR and sync databases and ranks the results.

    aur_client must offer ``get(query)``. db_executor must offer
    ``sync_packages(*terms)``, ``local_package(name)`` and
    ``package_groups(pkg)``; repository packages need ``name``, ``version``,
    ``description``, ``size``, ``isize``, ``db.name`` and ``provides``
    (items with a ``name``).
    """

    def __init__(
        self,
        aur_client: Any,
        logger: Logger,
        sort_by: str,
        target_mode: TargetMode,
        search_by: str,
        bottom_up: bool,
        single_line_results: bool,
        separate_sources: bool,
    ) -> None:
        self.aur_client = aur_client
        self.logger = logger
        self.sort_by = sort_by
        self.target_mode = target_mode
        self.search_by = search_by
        self.bottom_up = bottom_up
        self.single_line_results = single_line_results
        self.separate_sources = separate_sources
        self._results: list[SearchResult] = []
        self._query_map: dict[str, dict[str, Any]] = {}

    def execute(self, db_executor: Any, terms: Iterable[str]) -> None:
        """Search for terms and store the ranked results."""
        terms = remove_invalid_targets(terms, self.target_mode)
        ranking = SearchRanking(
            search="".join(terms),
            bottom_up=self.bottom_up,
            separate_sources=self.separate_sources,
            sort_by=self.sort_by,
        )

        aur_error: Exception | None = None
        if self.target_mode.at_least_aur():
            try:
                aur_results = query_aur(self.aur_client, terms, self.search_by)
            except Exception as exc:
                aur_error = exc
                aur_results = []

            by = get_search_by(self.search_by)
            filter_by_terms = by in (SearchBy.NAME_DESC, SearchBy.NONE, SearchBy.NAME)
            for pkg in aur_results:
                if filter_by_terms and not matches_search(pkg, terms):
                    continue
                self._query_map.setdefault(SOURCE_AUR, {})[pkg.name] = pkg
                ranking.results.append(
                    SearchResult(
                        source=SOURCE_AUR,
                        name=pkg.name,
                        description=pkg.description,
                        votes=pkg.num_votes,
                        provides=list(pkg.provides),
                    )
                )

        repo_results: list[Any] = []
        if self.target_mode.at_least_repo():
            repo_results = list(db_executor.sync_packages(*terms))
            for pkg in repo_results:
                db_name = pkg.db.name
                self._query_map.setdefault(db_name, {})[pkg.name] = pkg
                ranking.results.append(
                    SearchResult(
                        source=db_name,
                        name=pkg.name,
                        description=pkg.description,
                        votes=-1,
                        provides=[dep.name for dep in pkg.provides],
                    )
                )

        ranking.sort()
        self._results = ranking.results

        if aur_error is not None:
            self.logger.errorln(str(AURSearchError(aur_error)))
            if repo_results:
                self.logger.warnln(tr("Showing repo packages only"))

    def results(self, db_executor: Any, verbosity: SearchVerbosity) -> None:
        """Print the stored results at the given verbosity."""
        total = len(self._results)
        for position, result in enumerate(self._results):
            if verbosity == SearchVerbosity.MINIMAL:
                self.logger.println(result.name)
                continue

            line = ""
            if verbosity == SearchVerbosity.NUMBER_MENU:
                number = total - position if self.bottom_up else position + 1
                line += text.magenta(str(number)) + " "

            pkg = self._query_map[result.source][result.name]
            if isinstance(pkg, AURPackage):
                line += aur_pkg_search_string(pkg, db_executor, self.single_line_results)
            else:
                line += sync_pkg_search_string(pkg, db_executor, self.single_line_results)

            self.logger.println(line)

    def __len__(self) -> int:
        return len(self._results)

    def get_targets(
        self,
        include: Container[int],
        exclude: Any,
        other_exclude: Sized,
    ) -> list[str]:
        """Return "source/name" targets selected by menu numbers.

        Numbers are 1-based as shown in the menu. When exclude and
        other_exclude are empty, numbers in include are taken; otherwise
        every number not in exclude is taken.
        """
        is_include = len(exclude) == 0 and len(other_exclude) == 0
        total = len(self._results)
        targets: list[str] = []

        for number in range(1, total + 1):
            index = total - number if self.bottom_up else number - 1
            if (is_include and number in include) or (not is_include and number not in exclude):
                result = self._results[index]
                targets.append(f"{result.source}/{result.name}")

        return targets