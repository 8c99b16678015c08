"""Errors raised while setting up the configuration."""

from __future__ import annotations

from yay.text import tr


class PrivilegeElevatorNotFoundError(Exception):
    """No sudo-like program could be found."""

    def __init__(self, conf_value: str) -> None:
        self.conf_value = conf_value
        super().__init__(
            f"unable to find a privilege elevator, config value: {conf_value}"
        )


class RuntimeDirError(Exception):
    """A directory needed at run time could not be created."""

    def __init__(self, inner: BaseException, directory: str) -> None:
        self.inner = inner
        self.directory = directory
        super().__init__(tr("failed to create directory '%s': %s", directory, str(inner)))


class UserAbortError(Exception):
    """The user chose to stop."""

    def __init__(self) -> None:
        super().__init__(tr("aborting due to user"))