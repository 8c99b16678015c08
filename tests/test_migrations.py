import json

import pytest

from yay.settings.config import Configuration
from yay.settings.migrations import (
    ProviderMigration,
    default_migrations,
    run_migrations,
)


def test_nothing_to_do(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("")
    config = Configuration(version="99.0.0")

    run_migrations(config, default_migrations(), str(path), "20.0.0")

    assert path.read_text() == ""
    assert config.version == "99.0.0"


def test_provides_migration_do():
    config = Configuration(provides=True)
    assert ProviderMigration().do(config) is True
    assert config.provides is False

    assert ProviderMigration().do(Configuration(provides=False)) is False


def test_provides_migration_metadata():
    migration = ProviderMigration()
    assert migration.target_version() == "11.2.1"
    assert str(migration) == "Disable 'provides' setting by default"


@pytest.mark.parametrize(
    "version, provides, new_version, want_save",
    [
        ("11.0.1", True, "11.2.1", True),
        ("11.2.0.r7.g6f60892", True, "11.2.1", True),
        ("11.2.0", False, "11.2.1", False),
        ("11.2.1", True, "11.2.1", False),
        ("11.3.0", True, "11.3.0", False),
    ],
)
def test_provides_migration(tmp_path, version, provides, new_version, want_save):
    path = tmp_path / "config.json"
    path.write_text("")
    config = Configuration(version=version, provides=provides)

    run_migrations(config, [ProviderMigration()], str(path), new_version)

    content = path.read_text()
    if want_save:
        data = json.loads(content)
        assert data["version"] == new_version
        assert data["provides"] is False
    else:
        assert content == ""