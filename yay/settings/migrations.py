"""Upgrades applied to stored configurations written by older versions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from yay import text
from yay.query.version_diff import vercmp
from yay.settings.config import Configuration
from yay.text import tr


class ConfigMigration(ABC):
    """A change made once to configurations older than target_version()."""

    @abstractmethod
    def do(self, config: Configuration) -> bool:
        """Apply the change; return whether anything changed."""

    @abstractmethod
    def target_version(self) -> str:
        """Version of the release that introduced this migration."""


class ProviderMigration(ConfigMigration):
    """Turns off the 'provides' setting."""

    def do(self, config: Configuration) -> bool:
        if config.provides:
            config.provides = False
            return True
        return False

    def target_version(self) -> str:
        return "11.2.1"

    def __str__(self) -> str:
        return tr("Disable 'provides' setting by default")


def default_migrations() -> list[ConfigMigration]:
    return [ProviderMigration()]


def run_migrations(
    config: Configuration,
    migrations: Iterable[ConfigMigration],
    config_path: str,
    new_version: str,
) -> None:
    """Apply migrations newer than the config's version and save if any changed."""
    changed = False
    for migration in migrations:
        if vercmp(migration.target_version(), config.version) > 0 and migration.do(config):
            text.infoln(
                "Config migration executed (", migration.target_version(), "):", str(migration)
            )
            changed = True

    if changed:
        config.save(config_path, new_version)