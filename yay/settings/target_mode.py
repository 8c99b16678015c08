"""Which package sources an operation may target."""

from enum import IntEnum


class TargetMode(IntEnum):
    ANY = 0
    AUR = 1
    REPO = 2

    def at_least_aur(self) -> bool:
        return self in (TargetMode.ANY, TargetMode.AUR)

    def at_least_repo(self) -> bool:
        return self in (TargetMode.ANY, TargetMode.REPO)