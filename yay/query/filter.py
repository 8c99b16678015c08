"""Filtering of targets that the current target mode cannot handle."""

from __future__ import annotations

from typing import Iterable

from yay import text
from yay.settings.target_mode import TargetMode


def remove_invalid_targets(targets: Iterable[str], mode: TargetMode) -> list[str]:
    """Drop targets whose database the mode excludes, warning about each."""
    kept: list[str] = []
    for target in targets:
        db_name, _ = text.split_db_from_name(target)

        if db_name == "aur" and not mode.at_least_aur():
            text.warnln(
                text.tr("%s: can't use target with option --repo -- skipping", text.cyan(target))
            )
            continue

        if db_name not in ("aur", "") and not mode.at_least_repo():
            text.warnln(
                text.tr("%s: can't use target with option --aur -- skipping", text.cyan(target))
            )
            continue

        kept.append(target)
    return kept