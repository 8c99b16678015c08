import io

import pytest

from yay import text


@pytest.mark.parametrize(
    "first, second, want",
    [
        (None, None, False),
        ([], [], False),
        (["a"], ["b"], True),
        (["b"], ["a"], False),
        (["a", "a", "a"], ["a", "a", "a"], False),
        (["a"], ["A"], False),
        (["a", "b"], ["a"], False),
        (["a"], ["a", "b"], True),
        (["世", "2", "0"], ["世", "界", "3"], True),
    ],
)
def test_less_runes(first, second, want):
    assert text.less_runes(first, second) is want


@pytest.mark.parametrize(
    "user_input, preset, no_confirm, want",
    [
        ("", True, True, True),
        ("", False, True, False),
        ("", False, False, False),
        ("", True, False, True),
        ("n", True, False, False),
        ("y", False, False, True),
        ("no", True, False, False),
        ("yes", False, False, True),
    ],
)
def test_continue_task(user_input, preset, no_confirm, want):
    stream = io.StringIO(user_input)
    assert text.continue_task(stream, "", preset, no_confirm) is want


@pytest.mark.parametrize(
    "user_input, preset, want",
    [("n", True, False), ("y", False, True)],
)
def test_continue_task_ru(monkeypatch, user_input, preset, want):
    monkeypatch.setitem(text.messages, "yes", "да")
    assert text.tr("yes") == "да"
    assert text.continue_task(io.StringIO(user_input), "", preset, False) is want


@pytest.mark.parametrize(
    "user_input, preset, want",
    [("n", True, False), ("y", False, True), ("j", False, True)],
)
def test_continue_task_de(monkeypatch, user_input, preset, want):
    monkeypatch.setitem(text.messages, "yes", "ja")
    assert text.tr("yes") == "ja"
    assert text.continue_task(io.StringIO(user_input), "", preset, False) is want


def test_continue_task_two_words_uses_preset():
    assert text.continue_task(io.StringIO("y y\n"), "", False, False) is False


def test_colors_enabled(monkeypatch):
    monkeypatch.setattr(text, "use_color", True)
    assert text.red("x") == "\x1b[31mx\x1b[0m"
    assert text.green("x") == "\x1b[32mx\x1b[0m"
    assert text.cyan("5.16.0") == "\x1b[36m5.16.0\x1b[0m"
    assert text.bold("linux") == "\x1b[1mlinux\x1b[0m"


def test_colors_disabled(monkeypatch):
    monkeypatch.setattr(text, "use_color", False)
    assert text.red("x") == "x"
    assert text.bold("y") == "y"
    assert text.color_hash("core") == "core"


def test_color_hash_known_values(monkeypatch):
    monkeypatch.setattr(text, "use_color", True)
    assert text.color_hash("aur") == "\x1b[34maur\x1b[0m"
    assert text.color_hash("core") == "\x1b[33mcore\x1b[0m"


def test_human():
    assert text.human(1) == "1.0 B"
    assert text.human(1024) == "1.0 KiB"


def test_split_db_from_name():
    assert text.split_db_from_name("core/linux") == ("core", "linux")
    assert text.split_db_from_name("linux") == ("", "linux")
    assert text.split_db_from_name("a/b/c") == ("a", "b/c")


def test_format_time():
    assert text.format_time(1_600_000_000) == "2020-09-13"


def test_format_time_query_contains_year():
    assert "2020" in text.format_time_query(1_600_000_000)


def _logger(debug=False):
    out, err = io.StringIO(), io.StringIO()
    return text.Logger(out, err, io.StringIO(""), debug, "test"), out, err


def test_logger_println_and_print():
    logger, out, _ = _logger()
    logger.println("a", 1)
    logger.print("a", 1, 2)
    assert out.getvalue() == "a 1\na1 2"


def test_logger_sprint_warn(monkeypatch):
    monkeypatch.setattr(text, "use_color", True)
    logger, _, _ = _logger()
    assert logger.sprint_warn("hello") == "\x1b[1m\x1b[33m -> \x1b[0m\x1b[0mhello"


def test_logger_errorln_goes_to_stderr(monkeypatch):
    monkeypatch.setattr(text, "use_color", False)
    logger, out, err = _logger()
    logger.errorln("boom")
    assert out.getvalue() == ""
    assert err.getvalue() == " -> boom\n"


def test_logger_debug_off_and_on(monkeypatch):
    monkeypatch.setattr(text, "use_color", False)
    quiet, quiet_out, _ = _logger(debug=False)
    quiet.debugln("x")
    assert quiet_out.getvalue() == ""

    loud, loud_out, _ = _logger(debug=True)
    loud.debugln("x")
    assert loud_out.getvalue() == "[DEBUG:test] x\n"


def test_logger_child_shares_streams(monkeypatch):
    monkeypatch.setattr(text, "use_color", False)
    logger, out, _ = _logger(debug=True)
    child = logger.child("runner")
    child.debugln("hi")
    assert child.debug is True
    assert out.getvalue() == "[DEBUG:runner] hi\n"


def test_logger_printf():
    logger, out, _ = _logger()
    logger.printf("%s-%d", "a", 3)
    assert out.getvalue() == "a-3"


def test_get_input_default_value():
    logger, out, _ = _logger()
    assert logger.get_input("abc", False) == "abc"
    assert out.getvalue().endswith("abc\n")


def test_get_input_reads_line():
    out = io.StringIO()
    logger = text.Logger(out, io.StringIO(), io.StringIO("hello\nmore\n"), False, "t")
    assert logger.get_input("", False) == "hello"


def test_get_input_eof():
    logger, _, _ = _logger()
    with pytest.raises(EOFError):
        logger.get_input("", False)


def test_get_input_overflow():
    stdin = io.StringIO("x" * 5000 + "\n")
    logger = text.Logger(io.StringIO(), io.StringIO(), stdin, False, "t")
    with pytest.raises(text.InputOverflowError):
        logger.get_input("", False)


def test_module_get_input_uses_stream():
    assert text.get_input(io.StringIO("value\n"), "", False) == "value"


def test_print_info_value_none(monkeypatch, capsys):
    monkeypatch.setattr(text, "use_color", False)
    text.print_info_value("Name")
    assert capsys.readouterr().out == "Name" + " " * 26 + ": None\n"


def test_print_info_value_single(monkeypatch, capsys):
    monkeypatch.setattr(text, "use_color", False)
    text.print_info_value("Name", "yay")
    assert capsys.readouterr().out == "Name" + " " * 26 + ": yay\n"