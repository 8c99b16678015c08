"""Warnings collected about AUR packages: missing, orphaned, outdated, older."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from yay import text
from yay.query.version_diff import get_version_diff, is_devel_package, vercmp
from yay.text import Logger, tr


def _filter_debug_pkgs(names: Iterable[str]) -> tuple[list[str], list[str]]:
    normal: list[str] = []
    debug: list[str] = []
    for name in names:
        (debug if name.endswith("-debug") else normal).append(name)
    return normal, debug


def _format_names(names: Iterable[str]) -> str:
    return " " + text.cyan("  ".join(names))


class AURWarnings:
    """Collects problems found with AUR packages and prints them together."""

    def __init__(self, logger: Optional[Logger] = None) -> None:
        self.orphans: list[str] = []
        self.out_of_date: list[str] = []
        self.missing: list[str] = []
        self.local_newer: list[str] = []
        self.ignore: set[str] = set()
        self.log = logger if logger is not None else text.global_logger

    def add_to_warnings(self, remote: Mapping[str, Any], aur_pkg: Any) -> None:
        """Record warnings for an AUR package that is installed locally.

        Local packages need ``name``, ``base``, ``version`` and ``should_ignore()``.
        """
        name = aur_pkg.name
        pkg = remote.get(name)
        if pkg is None:
            return

        ignored = pkg.should_ignore()

        if aur_pkg.maintainer == "" and not ignored:
            self.orphans.append(name)

        if aur_pkg.out_of_date != 0 and not ignored:
            self.out_of_date.append(name)

        if not ignored and not is_devel_package(pkg) and vercmp(pkg.version, aur_pkg.version) > 0:
            left, right = get_version_diff(pkg.version, aur_pkg.version)
            self.local_newer.append(
                tr("%s: local (%s) is newer than AUR (%s)", text.cyan(name), left, right)
            )

    def calculate_missing(
        self,
        remote_names: Iterable[str],
        remote: Mapping[str, Any],
        aur_data: Mapping[str, Any],
    ) -> None:
        """Record installed packages that the AUR does not know about."""
        for name in remote_names:
            if name not in aur_data and not remote[name].should_ignore():
                self.missing.append(name)

    def print(self) -> None:
        """Write every collected warning to the logger."""
        normal_missing, debug_missing = _filter_debug_pkgs(self.missing)

        if normal_missing:
            self.log.warnln(tr("Packages not in AUR:") + _format_names(normal_missing))

        if debug_missing:
            self.log.warnln(tr("Missing AUR Debug Packages:") + _format_names(debug_missing))

        if self.orphans:
            self.log.warnln(
                tr("Orphan (unmaintained) AUR Packages:") + _format_names(self.orphans)
            )

        if self.out_of_date:
            self.log.warnln(
                tr("Flagged Out Of Date AUR Packages:") + _format_names(self.out_of_date)
            )

        for newer in self.local_newer:
            self.log.warnln(newer)