"""Errors raised while querying packages."""

from __future__ import annotations

from yay.text import tr


class AURSearchError(Exception):
    """The AUR could not be searched."""

    def __init__(self, inner: BaseException) -> None:
        self.inner = inner
        super().__init__(tr("Error during AUR search: %s\n", str(inner)))


class NoQueryError(Exception):
    """No query was executed."""

    def __init__(self) -> None:
        super().__init__(tr("no query was executed"))