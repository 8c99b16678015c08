"""Version comparison and highlighting of where two versions differ."""

from __future__ import annotations

from typing import Any, Optional

from yay import text

_DEVEL_SUFFIXES = ("git", "svn", "hg", "bzr", "nightly", "insiders-bin")


def _check_words(value: str, index: int, *words: str) -> bool:
    if value[index].isalpha():
        return False
    for word in words:
        start = index + 1
        if index < len(value) - len(word) and value[start:start + len(word)] == word:
            return True
    return False


def get_version_diff(old_version: str, new_version: str) -> tuple[str, str]:
    """Return both versions with the differing tail coloured red and green."""
    if old_version == new_version:
        return old_version + text.red(""), new_version + text.green("")

    diff_position = 0
    for index, char in enumerate(old_version):
        special = not (char.isalpha() or char.isnumeric())

        if index >= len(new_version) or char != new_version[index]:
            if special:
                diff_position = index
            break

        at_end = index == len(old_version) - 1 or index == len(new_version) - 1
        if (
            special
            or (
                at_end
                and (
                    len(old_version) != len(new_version)
                    or old_version[index] == new_version[index]
                )
            )
            or _check_words(old_version, index, "rc", "pre", "alpha", "beta")
        ):
            diff_position = index + 1

    same = old_version[:diff_position]
    return (
        same + text.red(old_version[diff_position:]),
        same + text.green(new_version[diff_position:]),
    )


def is_devel_name(name: str) -> bool:
    """Return whether the name looks like a VCS/development package."""
    if any(name.endswith("-" + suffix) for suffix in _DEVEL_SUFFIXES):
        return True
    return "-always-" in name


def is_devel_package(pkg: Any) -> bool:
    """Return whether a package (with ``name`` and ``base``) is a devel package."""
    return is_devel_name(pkg.name) or is_devel_name(pkg.base)


def _isdigit(char: str) -> bool:
    return "0" <= char <= "9"


def _isalpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def _isalnum(char: str) -> bool:
    return _isdigit(char) or _isalpha(char)


def _segment_compare(a: str, b: str) -> int:
    if a == b:
        return 0

    i = j = 0
    len_a, len_b = len(a), len(b)
    while i < len_a and j < len_b:
        start_a, start_b = i, j
        while i < len_a and not _isalnum(a[i]):
            i += 1
        while j < len_b and not _isalnum(b[j]):
            j += 1
        if i >= len_a or j >= len_b:
            break

        if i - start_a != j - start_b:
            return -1 if i - start_a < j - start_b else 1

        start_a, start_b = i, j
        if _isdigit(a[i]):
            while i < len_a and _isdigit(a[i]):
                i += 1
            while j < len_b and _isdigit(b[j]):
                j += 1
            numeric = True
        else:
            while i < len_a and _isalpha(a[i]):
                i += 1
            while j < len_b and _isalpha(b[j]):
                j += 1
            numeric = False

        part_a, part_b = a[start_a:i], b[start_b:j]
        if not part_b:
            return 1 if numeric else -1

        if numeric:
            part_a, part_b = part_a.lstrip("0"), part_b.lstrip("0")
            if len(part_a) != len(part_b):
                return 1 if len(part_a) > len(part_b) else -1

        if part_a != part_b:
            return -1 if part_a < part_b else 1

    a_done, b_done = i >= len_a, j >= len_b
    if a_done and b_done:
        return 0
    if (a_done and not _isalpha(b[j])) or (not a_done and _isalpha(a[i])):
        return -1
    return 1


def _parse_evr(evr: str) -> tuple[str, str, Optional[str]]:
    end = 0
    while end < len(evr) and _isdigit(evr[end]):
        end += 1
    dash = evr.rfind("-", end)

    if end < len(evr) and evr[end] == ":":
        epoch = evr[:end] or "0"
        start = end + 1
    else:
        epoch = "0"
        start = 0

    if dash != -1:
        return epoch, evr[start:dash], evr[dash + 1:]
    return epoch, evr[start:], None


def vercmp(first: str, second: str) -> int:
    """Compare two pacman versions; negative, zero or positive like cmp."""
    if first == second:
        return 0

    epoch_a, version_a, release_a = _parse_evr(first)
    epoch_b, version_b, release_b = _parse_evr(second)

    result = _segment_compare(epoch_a, epoch_b)
    if result == 0:
        result = _segment_compare(version_a, version_b)
        if result == 0 and release_a is not None and release_b is not None:
            result = _segment_compare(release_a, release_b)
    return result