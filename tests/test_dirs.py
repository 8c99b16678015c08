import os
from unittest import mock

import pytest

from yay.settings.dirs import get_cache_home, get_config_path, init_dir
from yay.settings.errors import RuntimeDirError


def test_get_cache_home_falls_back_to_tmp(monkeypatch, tmp_path):
    monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
    monkeypatch.delenv("HOME", raising=False)
    monkeypatch.setenv("SUDO_USER", "test")
    monkeypatch.setenv("TMPDIR", str(tmp_path))

    got = get_cache_home()
    assert got == os.path.join(str(tmp_path), "yay")
    assert os.path.isdir(got)


def test_get_cache_home_uses_xdg(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
    with mock.patch("os.geteuid", return_value=1000):
        got = get_cache_home()
    assert got == os.path.join(str(tmp_path), "yay")
    assert os.path.isdir(got)


def test_get_cache_home_uses_home(monkeypatch, tmp_path):
    monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    with mock.patch("os.geteuid", return_value=1000):
        got = get_cache_home()
    assert got == os.path.join(str(tmp_path), ".cache", "yay")
    assert os.path.isdir(got)


def test_get_cache_home_root_uses_systemd_cache(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
    monkeypatch.delenv("SUDO_USER", raising=False)
    monkeypatch.delenv("DOAS_USER", raising=False)
    with mock.patch("os.geteuid", return_value=0):
        assert get_cache_home() == "/var/cache/yay"
    assert not (tmp_path / "yay").exists()


def test_get_config_path_xdg(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert get_config_path() == os.path.join(str(tmp_path), "yay", "config.json")
    assert (tmp_path / "yay").is_dir()


def test_get_config_path_home(monkeypatch, tmp_path):
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert get_config_path() == os.path.join(str(tmp_path), ".config", "yay", "config.json")


def test_get_config_path_nothing(monkeypatch):
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("HOME", raising=False)
    assert get_config_path() == ""


def test_init_dir_creates_nested(tmp_path):
    target = tmp_path / "a" / "b"
    init_dir(str(target))
    assert target.is_dir()
    init_dir(str(target))
    assert target.is_dir()


def test_init_dir_wraps_creation_failure(tmp_path):
    target = str(tmp_path / "cannot")
    with mock.patch("os.makedirs", side_effect=PermissionError("denied")):
        with pytest.raises(RuntimeDirError) as info:
            init_dir(target)
    assert info.value.directory == target


def test_init_dir_under_file_propagates(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(OSError):
        init_dir(str(blocker / "sub"))