"""Locations of the configuration file and the cache directory."""

from __future__ import annotations

import os

from yay.settings.errors import RuntimeDirError

CONFIG_FILE_NAME = "config.json"
VCS_FILE_NAME = "vcs.json"
COMPLETION_FILE_NAME = "completion.cache"
# systemd-run creates this directory itself.
SYSTEMD_CACHE = "/var/cache/yay"


def init_dir(directory: str) -> None:
    """Create directory if it does not exist.

    Raises RuntimeDirError if creation fails; other stat errors propagate.
    """
    try:
        os.stat(directory)
    except FileNotFoundError:
        try:
            os.makedirs(directory, mode=0o755, exist_ok=True)
        except OSError as exc:
            raise RuntimeDirError(exc, directory) from exc


def get_config_path() -> str:
    """Return the config file path, creating its directory; "" if none works."""
    config_home = os.environ.get("XDG_CONFIG_HOME", "")
    if config_home:
        config_dir = os.path.join(config_home, "yay")
        try:
            init_dir(config_dir)
        except OSError:
            pass
        else:
            return os.path.join(config_dir, CONFIG_FILE_NAME)

    home = os.environ.get("HOME", "")
    if home:
        config_dir = os.path.join(home, ".config", "yay")
        try:
            init_dir(config_dir)
        except OSError:
            pass
        else:
            return os.path.join(config_dir, CONFIG_FILE_NAME)

    return ""


def get_cache_home() -> str:
    """Return the cache directory, creating it where needed."""
    uid = os.geteuid()

    cache_home = os.environ.get("XDG_CACHE_HOME", "")
    if cache_home and uid != 0:
        cache_dir = os.path.join(cache_home, "yay")
        try:
            init_dir(cache_dir)
        except OSError:
            pass
        else:
            return cache_dir

    home = os.environ.get("HOME", "")
    if home and uid != 0:
        cache_dir = os.path.join(home, ".cache", "yay")
        try:
            init_dir(cache_dir)
        except OSError:
            pass
        else:
            return cache_dir

    if uid == 0 and not os.environ.get("SUDO_USER") and not os.environ.get("DOAS_USER"):
        return SYSTEMD_CACHE

    tmp_dir = os.path.join(os.environ.get("TMPDIR") or "/tmp", "yay")
    init_dir(tmp_dir)
    return tmp_dir