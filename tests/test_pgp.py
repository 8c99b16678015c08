import io
import os
import sys
from dataclasses import dataclass, field

import pytest

from yay.pgp import KeyImportError, check_pgp_keys
from yay.settings.exe import CmdBuilder, CommandError, MockRunner


@dataclass
class _Srcinfo:
    pkgbase: str
    valid_pgp_keys: list = field(default_factory=list)


def _make_srcinfo(pkgbase, *keys):
    return _Srcinfo(pkgbase, list(keys))


@pytest.fixture(autouse=True)
def non_root(monkeypatch):
    monkeypatch.setattr(os, "geteuid", lambda: 1000)


def _missing_keys(cmd):
    if "--list-keys" in str(cmd):
        raise CommandError("key not found")


def _missing_and_invalid(cmd):
    s = str(cmd)
    if "--list-keys" in s:
        raise CommandError("key not found")
    if "--recv-keys" in s:
        raise CommandError("invalid key")


def _one_in_keyring(cmd):
    s = str(cmd)
    if "--list-keys" in s and "11E521D646982372EB577A1F8F0871F202119294" not in s:
        raise CommandError("key not found")


CASES = [
    (
        {"cower": ""},
        {"cower": _make_srcinfo("cower", "487EACC08557AD082088DABA1EB2638FF56C0C53")},
        False,
        [
            "gpg --homedir /tmp --list-keys 487EACC08557AD082088DABA1EB2638FF56C0C53",
            "gpg --homedir /tmp --recv-keys 487EACC08557AD082088DABA1EB2638FF56C0C53",
        ],
        _missing_keys,
        ["487EACC08557AD082088DABA1EB2638FF56C0C53"],
    ),
    (
        {"libc++": ""},
        {
            "libc++": _make_srcinfo(
                "libc++",
                "11E521D646982372EB577A1F8F0871F202119294",
                "B6C8F98282B944E3B0D5C2530FC3042E345AD05D",
            )
        },
        False,
        [
            "gpg --homedir /tmp --list-keys 11E521D646982372EB577A1F8F0871F202119294",
            "gpg --homedir /tmp --list-keys B6C8F98282B944E3B0D5C2530FC3042E345AD05D",
            "gpg --homedir /tmp --recv-keys 11E521D646982372EB577A1F8F0871F202119294 "
            "B6C8F98282B944E3B0D5C2530FC3042E345AD05D",
        ],
        _missing_keys,
        ["11E521D646982372EB577A1F8F0871F202119294", "B6C8F98282B944E3B0D5C2530FC3042E345AD05D"],
    ),
    (
        {"dummy-1": "", "dummy-2": ""},
        {
            "dummy-1": _make_srcinfo("dummy-1", "ABAF11C65A2970B130ABE3C479BE3E4300411886"),
            "dummy-2": _make_srcinfo("dummy-2", "ABAF11C65A2970B130ABE3C479BE3E4300411886"),
        },
        False,
        [
            "gpg --homedir /tmp --list-keys ABAF11C65A2970B130ABE3C479BE3E4300411886",
            "gpg --homedir /tmp --recv-keys ABAF11C65A2970B130ABE3C479BE3E4300411886",
        ],
        _missing_keys,
        ["ABAF11C65A2970B130ABE3C479BE3E4300411886"],
    ),
    (
        {"dummy-3": ""},
        {
            "dummy-3": _make_srcinfo(
                "dummy-3",
                "11E521D646982372EB577A1F8F0871F202119294",
                "C52048C0C0748FEE227D47A2702353E0F7E48EDB",
            )
        },
        False,
        [
            "gpg --homedir /tmp --list-keys 11E521D646982372EB577A1F8F0871F202119294",
            "gpg --homedir /tmp --list-keys C52048C0C0748FEE227D47A2702353E0F7E48EDB",
            "gpg --homedir /tmp --recv-keys C52048C0C0748FEE227D47A2702353E0F7E48EDB",
        ],
        _one_in_keyring,
        ["C52048C0C0748FEE227D47A2702353E0F7E48EDB"],
    ),
    (
        {"dummy-4": "", "dummy-5": ""},
        {
            "dummy-4": _make_srcinfo("dummy-4", "11E521D646982372EB577A1F8F0871F202119294"),
            "dummy-5": _make_srcinfo("dummy-5", "C52048C0C0748FEE227D47A2702353E0F7E48EDB"),
        },
        False,
        [
            "gpg --homedir /tmp --list-keys 11E521D646982372EB577A1F8F0871F202119294",
            "gpg --homedir /tmp --list-keys C52048C0C0748FEE227D47A2702353E0F7E48EDB",
        ],
        lambda cmd: None,
        [],
    ),
    (
        {"dummy-7": ""},
        {"dummy-7": _make_srcinfo("dummy-7", "THIS-SHOULD-FAIL")},
        True,
        [
            "gpg --homedir /tmp --list-keys THIS-SHOULD-FAIL",
            "gpg --homedir /tmp --recv-keys THIS-SHOULD-FAIL",
        ],
        _missing_and_invalid,
        None,
    ),
    (
        {"dummy-8": ""},
        {
            "dummy-8": _make_srcinfo(
                "dummy-8", "A314827C4E4250A204CE6E13284FC34C8E4B1A25", "THIS-SHOULD-FAIL"
            )
        },
        True,
        [
            "gpg --homedir /tmp --list-keys A314827C4E4250A204CE6E13284FC34C8E4B1A25",
            "gpg --homedir /tmp --list-keys THIS-SHOULD-FAIL",
            "gpg --homedir /tmp --recv-keys A314827C4E4250A204CE6E13284FC34C8E4B1A25 "
            "THIS-SHOULD-FAIL",
        ],
        _missing_and_invalid,
        None,
    ),
]


@pytest.mark.parametrize("pkgs,srcinfos,want_error,want_show,show_fn,expected", CASES)
def test_check_pgp_keys(pkgs, srcinfos, want_error, want_show, show_fn, expected):
    runner = MockRunner(show_fn=show_fn)
    builder = CmdBuilder(gpg_bin="gpg", gpg_flags=["--homedir /tmp"], runner=runner)

    if want_error:
        with pytest.raises(KeyImportError):
            check_pgp_keys(pkgs, srcinfos, builder, True)
    else:
        problematic = check_pgp_keys(pkgs, srcinfos, builder, True)
        assert sorted(problematic) == sorted(expected)

    shown = sorted(str(call.args[0]) for call in runner.show_calls)
    assert shown == sorted(want_show)
    assert runner.capture_calls == []


def test_declined_import_skips_recv(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("n\n"))
    runner = MockRunner(show_fn=_missing_keys)
    builder = CmdBuilder(gpg_bin="gpg", runner=runner)
    srcinfos = {"pkg": _make_srcinfo("pkg", "abc123")}
    problematic = check_pgp_keys({"pkg": ""}, srcinfos, builder, False)
    assert problematic == ["ABC123"]
    assert [str(c.args[0]) for c in runner.show_calls] == ["gpg --list-keys abc123"]


def test_import_error_carries_keys():
    runner = MockRunner(show_fn=_missing_and_invalid)
    builder = CmdBuilder(gpg_bin="gpg", runner=runner)
    with pytest.raises(KeyImportError) as info:
        check_pgp_keys({"p": ""}, {"p": _make_srcinfo("p", "THIS-SHOULD-FAIL")}, builder, True)
    assert info.value.keys == ["THIS-SHOULD-FAIL"]