"""AUR package records, search fields and search result formatting."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from yay import text
from yay.text import tr


class SearchBy(Enum):
    """Field an AUR search matches against."""

    NONE = ""
    NAME = "name"
    NAME_DESC = "name-desc"
    MAINTAINER = "maintainer"
    SUBMITTER = "submitter"
    DEPENDS = "depends"
    MAKE_DEPENDS = "makedepends"
    OPT_DEPENDS = "optdepends"
    CHECK_DEPENDS = "checkdepends"
    PROVIDES = "provides"
    CONFLICTS = "conflicts"
    REPLACES = "replaces"
    GROUPS = "groups"
    KEYWORDS = "keywords"
    CO_MAINTAINERS = "comaintainers"


@dataclass
class AURPackage:
    """A package as described by the AUR."""

    name: str = ""
    version: str = ""
    description: str = ""
    id: int = 0
    package_base_id: int = 0
    package_base: str = ""
    url: str = ""
    url_path: str = ""
    num_votes: int = 0
    popularity: float = 0.0
    out_of_date: int = 0
    maintainer: str = ""
    submitter: str = ""
    first_submitted: int = 0
    last_modified: int = 0
    depends: list[str] = field(default_factory=list)
    make_depends: list[str] = field(default_factory=list)
    check_depends: list[str] = field(default_factory=list)
    opt_depends: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)
    provides: list[str] = field(default_factory=list)
    replaces: list[str] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    license: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    co_maintainers: list[str] = field(default_factory=list)


@dataclass
class AURQuery:
    """A search request to an AUR client."""

    needles: list[str]
    by: SearchBy = SearchBy.NAME_DESC
    contains: bool = True


_SEARCH_BY = {
    "name": SearchBy.NAME,
    "maintainer": SearchBy.MAINTAINER,
    "submitter": SearchBy.SUBMITTER,
    "depends": SearchBy.DEPENDS,
    "makedepends": SearchBy.MAKE_DEPENDS,
    "optdepends": SearchBy.OPT_DEPENDS,
    "checkdepends": SearchBy.CHECK_DEPENDS,
    "provides": SearchBy.PROVIDES,
    "conflicts": SearchBy.CONFLICTS,
    "replaces": SearchBy.REPLACES,
    "groups": SearchBy.GROUPS,
    "keywords": SearchBy.KEYWORDS,
    "comaintainers": SearchBy.CO_MAINTAINERS,
}

_SINGLE_LINE_SEPARATOR = "\t"
_DOUBLE_LINE_SEPARATOR = "\n    "


def get_search_by(value: str) -> SearchBy:
    """Map a --searchby value to a search field, defaulting to name-desc."""
    return _SEARCH_BY.get(value, SearchBy.NAME_DESC)


def _installed_marker(local_pkg: Any, version: str) -> str:
    if local_pkg is None:
        return ""
    if local_pkg.version != version:
        return text.bold(text.green(tr("(Installed: %s)", local_pkg.version)))
    return text.bold(text.green(tr("(Installed)")))


def aur_pkg_search_string(pkg: AURPackage, db_executor: Any, single_line_results: bool) -> str:
    """Format an AUR package as a search result.

    db_executor must offer ``local_package(name)`` returning an object with a
    ``version`` attribute, or None.
    """
    line = (
        text.bold(text.color_hash("aur"))
        + "/"
        + text.bold(pkg.name)
        + " "
        + text.cyan(pkg.version)
        + text.bold(f" (+{pkg.num_votes}")
        + " "
        + text.bold(f"{pkg.popularity:.2f}) ")
    )

    if pkg.maintainer == "":
        line += text.bold(text.red(tr("(Orphaned)"))) + " "

    if pkg.out_of_date != 0:
        line += text.bold(text.red(tr("(Out-of-date: %s)", text.format_time(pkg.out_of_date)))) + " "

    line += _installed_marker(db_executor.local_package(pkg.name), pkg.version)
    line += _SINGLE_LINE_SEPARATOR if single_line_results else _DOUBLE_LINE_SEPARATOR
    return line + pkg.description


def sync_pkg_search_string(pkg: Any, db_executor: Any, single_line_results: bool) -> str:
    """Format a repository package as a search result.

    pkg needs ``name``, ``version``, ``description``, ``size``, ``isize`` and
    ``db.name``; db_executor needs ``package_groups(pkg)`` and
    ``local_package(name)``.
    """
    line = (
        text.bold(text.color_hash(pkg.db.name))
        + "/"
        + text.bold(pkg.name)
        + " "
        + text.cyan(pkg.version)
        + text.bold(" (" + text.human(pkg.size) + " " + text.human(pkg.isize) + ") ")
    )

    groups = db_executor.package_groups(pkg)
    if groups:
        line += "[" + " ".join(groups) + "] "

    line += _installed_marker(db_executor.local_package(pkg.name), pkg.version)
    line += _SINGLE_LINE_SEPARATOR if single_line_results else _DOUBLE_LINE_SEPARATOR
    return line + pkg.description