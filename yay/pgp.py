"""Checking and importing the PGP keys that PKGBUILDs require."""

from __future__ import annotations

import sys
from typing import Any, Mapping

from yay import text
from yay.settings.exe import CommandError
from yay.text import tr


class KeyImportError(Exception):
    """PGP keys could not be imported."""

    def __init__(self, message: str, keys: list[str] | None = None) -> None:
        super().__init__(message)
        self.keys = keys or []


class _KeySet(dict):
    """Maps an upper-cased key to the package bases that require it."""

    def add(self, key: str, base: str) -> None:
        self.setdefault(key.upper(), []).append(base)

    def has(self, key: str) -> bool:
        return key.upper() in self


def check_pgp_keys(
    pkgbuild_dirs_by_base: Mapping[str, str],
    srcinfos: Mapping[str, Any],
    cmd_builder: Any,
    no_confirm: bool,
) -> list[str]:
    """Find keys missing from the keyring and offer to import them.

    Each srcinfo must carry a ``valid_pgp_keys`` sequence. Returns the
    problematic keys; raises KeyImportError if importing them fails.
    """
    problematic = _KeySet()

    for base in pkgbuild_dirs_by_base:
        for key in srcinfos[base].valid_pgp_keys:
            if problematic.has(key):
                problematic.add(key, base)
                continue
            try:
                cmd_builder.show(cmd_builder.build_gpg_cmd("--list-keys", key))
            except CommandError:
                problematic.add(key, base)

    if not problematic:
        return []

    print()
    print(_format_keys_to_import(problematic))

    keys = list(problematic)
    if text.continue_task(sys.stdin, tr("Import?"), True, no_confirm):
        _import_keys(cmd_builder, keys)
    return keys


def _import_keys(cmd_builder: Any, keys: list[str]) -> None:
    text.operation_infoln(tr("Importing keys with gpg..."))
    try:
        cmd_builder.show(cmd_builder.build_gpg_cmd("--recv-keys", *keys))
    except CommandError as exc:
        raise KeyImportError(tr("problem importing keys"), keys) from exc


def _format_keys_to_import(keys: Mapping[str, list[str]]) -> str:
    if not keys:
        raise KeyImportError(tr("no keys to import"))

    lines = [text.sprint_operation_info(tr("PGP keys need importing:"))]
    for key, bases in keys.items():
        pkglist = "  ".join(bases)
        lines.append(
            text.sprint_warn(tr("%s, required by: %s", text.cyan(key), text.cyan(pkglist)))
        )
    return "\n".join(lines)