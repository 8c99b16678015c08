"""Terminal output helpers: colours, logging, prompts and formatting."""

from __future__ import annotations

import os
import struct
import sys
import unicodedata
from datetime import datetime
from functools import lru_cache
from typing import IO, Any, Iterable, Optional, Sequence

RED_CODE = "\x1b[31m"
GREEN_CODE = "\x1b[32m"
YELLOW_CODE = "\x1b[33m"
BLUE_CODE = "\x1b[34m"
MAGENTA_CODE = "\x1b[35m"
CYAN_CODE = "\x1b[36m"
BOLD_CODE = "\x1b[1m"
RESET_CODE = "\x1b[0m"

ARROW = "==>"
SMALL_ARROW = " ->"
OP_SYMBOL = "::"

_Y_DEFAULT = "y"
_N_DEFAULT = "n"

_KEY_LENGTH = 32
_DELIM_COUNT = 2
_READ_BUFFER_SIZE = 4096

# Whether colour escape codes are emitted.
use_color = True

# Message catalogue used by tr(); maps an untranslated message to its translation.
messages: dict[str, str] = {}


def tr(message: str, *args: Any) -> str:
    """Translate a message through the catalogue and apply %-formatting."""
    translated = messages.get(message, message)
    return translated % args if args else translated


class InputOverflowError(Exception):
    """Raised when a line of user input is longer than the read buffer."""

    def __init__(self) -> None:
        super().__init__(tr("input too long"))


def _stylize(start_code: str, text: str) -> str:
    if use_color:
        return start_code + text + RESET_CODE
    return text


def red(text: str) -> str:
    return _stylize(RED_CODE, text)


def green(text: str) -> str:
    return _stylize(GREEN_CODE, text)


def yellow(text: str) -> str:
    return _stylize(YELLOW_CODE, text)


def cyan(text: str) -> str:
    return _stylize(CYAN_CODE, text)


def magenta(text: str) -> str:
    return _stylize(MAGENTA_CODE, text)


def blue(text: str) -> str:
    return _stylize(BLUE_CODE, text)


def bold(text: str) -> str:
    return _stylize(BOLD_CODE, text)


def color_hash(name: str) -> str:
    """Colour text by hashing it, so the same text always gets the same colour."""
    if not use_color:
        return name
    value = 5381
    for byte in name.encode():
        value = (byte + (value << 5) + value) & 0xFFFFFFFFFFFFFFFF
    return f"\x1b[{value % 6 + 31}m{name}\x1b[0m"


def _float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def human(size: int) -> str:
    """Return a byte count in human readable binary units."""
    float_size = _float32(float(size))
    for unit in ("", "Ki", "Mi", "Gi", "Ti", "Pi", "Ei", "Zi", "Yi"):
        if float_size < 1024:
            return f"{float_size:.1f} {unit}B"
        float_size = _float32(float_size / 1024)
    return f"{size}B"


def _go_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "<nil>"
    if isinstance(value, float):
        rendered = repr(value)
        return rendered[:-2] if rendered.endswith(".0") else rendered
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_go_value(item) for item in value) + "]"
    return str(value)


def _sprint(*args: Any) -> str:
    """Concatenate operands, adding spaces only between two non-string operands."""
    parts: list[str] = []
    previous_is_str = True
    for index, arg in enumerate(args):
        is_str = isinstance(arg, str)
        if index > 0 and not is_str and not previous_is_str:
            parts.append(" ")
        parts.append(_go_value(arg))
        previous_is_str = is_str
    return "".join(parts)


def _sprintln(*args: Any) -> str:
    return " ".join(_go_value(arg) for arg in args) + "\n"


class Logger:
    """Named logger writing to configurable output, error and input streams.

    A stream given as None resolves to the matching sys stream at use time.
    """

    def __init__(
        self,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
        stdin: Optional[IO[str]] = None,
        debug: bool = False,
        name: str = "global",
    ) -> None:
        self._stdout = stdout
        self._stderr = stderr
        self._stdin = stdin
        self.debug = debug
        self.name = name

    @property
    def stdout(self) -> IO[str]:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stderr(self) -> IO[str]:
        return self._stderr if self._stderr is not None else sys.stderr

    @property
    def stdin(self) -> IO[str]:
        return self._stdin if self._stdin is not None else sys.stdin

    def child(self, name: str) -> "Logger":
        return Logger(self._stdout, self._stderr, self._stdin, self.debug, name)

    def debugln(self, *args: Any) -> None:
        if not self.debug:
            return
        self.println(bold(yellow(f"[DEBUG:{self.name}]")), *args)

    def operation_infoln(self, *args: Any) -> None:
        self.println(self.sprint_operation_info(*args))

    def operation_info(self, *args: Any) -> None:
        self.print(self.sprint_operation_info(*args))

    def sprint_operation_info(self, *args: Any) -> str:
        return _sprint(bold(cyan(OP_SYMBOL + " ")), BOLD_CODE, *args) + RESET_CODE

    def info(self, *args: Any) -> None:
        self.print(bold(green(ARROW + " ")), *args)

    def infoln(self, *args: Any) -> None:
        self.println(bold(green(ARROW)), *args)

    def warn(self, *args: Any) -> None:
        self.print(self.sprint_warn(*args))

    def warnln(self, *args: Any) -> None:
        self.println(self.sprint_warn(*args))

    def sprint_warn(self, *args: Any) -> str:
        return _sprint(bold(yellow(SMALL_ARROW + " ")), *args)

    def error(self, *args: Any) -> None:
        self.stderr.write(self.sprint_error(*args))

    def errorln(self, *args: Any) -> None:
        self.stderr.write(_sprintln(self.sprint_error(*args)))

    def sprint_error(self, *args: Any) -> str:
        return _sprint(bold(red(SMALL_ARROW + " ")), *args)

    def printf(self, fmt: str, *args: Any) -> None:
        self.stdout.write(fmt % args if args else fmt)

    def println(self, *args: Any) -> None:
        self.stdout.write(_sprintln(*args))

    def print(self, *args: Any) -> None:
        self.stdout.write(_sprint(*args))

    def get_input(self, default_value: str, no_confirm: bool) -> str:
        """Read one line of input, or return the default without reading."""
        self.info()
        if default_value or no_confirm:
            self.println(default_value)
            return default_value

        line = self.stdin.readline()
        if line == "":
            raise EOFError("no input available")
        if len(line.encode()) > _READ_BUFFER_SIZE:
            raise InputOverflowError()
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        return line


global_logger = Logger(None, None, None, False, "global")


def debugln(*args: Any) -> None:
    global_logger.debugln(*args)


def operation_infoln(*args: Any) -> None:
    global_logger.operation_infoln(*args)


def operation_info(*args: Any) -> None:
    global_logger.operation_info(*args)


def sprint_operation_info(*args: Any) -> str:
    return global_logger.sprint_operation_info(*args)


def info(*args: Any) -> None:
    global_logger.info(*args)


def infoln(*args: Any) -> None:
    global_logger.infoln(*args)


def sprint_warn(*args: Any) -> str:
    return global_logger.sprint_warn(*args)


def warn(*args: Any) -> None:
    global_logger.warn(*args)


def warnln(*args: Any) -> None:
    global_logger.warnln(*args)


def sprint_error(*args: Any) -> str:
    return global_logger.sprint_error(*args)


def error(*args: Any) -> None:
    global_logger.error(*args)


def errorln(*args: Any) -> None:
    global_logger.errorln(*args)


def get_input(stream: Optional[IO[str]], default_value: str, no_confirm: bool) -> str:
    """Read input through the global logger, optionally from another stream."""
    logger = global_logger
    if stream is not None:
        logger = Logger(
            global_logger._stdout,
            global_logger._stderr,
            stream,
            global_logger.debug,
            global_logger.name,
        )
    return logger.get_input(default_value, no_confirm)


def split_db_from_name(pkg: str) -> tuple[str, str]:
    """Split "db/package" into its database and package parts."""
    parts = pkg.split("/", 1)
    if len(parts) == 2:
        return parts[0], parts[1]
    return "", parts[0]


def less_runes(first: Optional[Sequence[str]], second: Optional[Sequence[str]]) -> bool:
    """Case-insensitive lexicographic comparison, falling back to exact case."""
    first = first or ""
    second = second or ""
    for left, right in zip(first, second):
        lower_left, lower_right = left.lower(), right.lower()
        if lower_left != lower_right:
            return lower_left < lower_right
        if left != right:
            return left < right
    return len(first) < len(second)


def _latin_initial(word: str, fallback: str) -> str:
    if word and unicodedata.name(word[0], "").startswith("LATIN"):
        return word[0]
    return fallback


def continue_task(stream: IO[str], prompt: str, preset: bool, no_confirm: bool) -> bool:
    """Ask a yes/no question; answer with the preset if no usable reply comes."""
    if no_confirm:
        return preset

    yes = tr("yes")
    no = tr("no")
    n = _latin_initial(no, _N_DEFAULT)
    y = _latin_initial(yes, _Y_DEFAULT)

    if preset:
        postfix = f" [{y.upper()}/{n}] "
    else:
        postfix = f" [{y}/{n.upper()}] "

    operation_info(bold(prompt), bold(postfix))

    line = stream.readline()
    tokens = line.split()
    if len(tokens) != 1:
        return preset
    response = tokens[0].casefold()

    return (
        response == yes.casefold()
        or response == y.casefold()
        or (_Y_DEFAULT.casefold() != n.casefold() and response == _Y_DEFAULT.casefold())
    )


def format_time(timestamp: int) -> str:
    """Format a unix timestamp as a local yyyy-mm-dd date."""
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d")


def format_time_query(timestamp: int) -> str:
    """Format a unix timestamp as a long local date and time with zone."""
    moment = datetime.fromtimestamp(timestamp).astimezone()
    return moment.strftime("%a %d %b %Y %I:%M:%S %p %Z")


@lru_cache(maxsize=1)
def _column_count() -> int:
    try:
        return int(os.environ.get("COLUMNS", ""))
    except ValueError:
        pass
    try:
        columns = os.get_terminal_size(sys.__stdout__.fileno()).columns
    except (OSError, AttributeError, ValueError):
        return 80
    return columns if columns > 0 else 80


def _is_wide(char: str) -> bool:
    if char == "ー":
        return True
    name = unicodedata.name(char, "")
    return (
        name.startswith("CJK UNIFIED IDEOGRAPH")
        or name.startswith("CJK COMPATIBILITY IDEOGRAPH")
        or "HIRAGANA" in name
        or "KATAKANA" in name
        or name.startswith("HANGUL")
    )


def print_info_value(key: str, *args: str) -> None:
    """Print a "key: values" line, wrapping values at the terminal width."""
    values: Iterable[str] = args
    special = sum(1 for char in key if _is_wide(char))
    width = _KEY_LENGTH - _DELIM_COUNT - special
    line = bold(key.ljust(width) + ": ")

    if not args or (len(args) == 1 and args[0] == ""):
        sys.stdout.write(f"{line}{tr('None')}\n")
        return

    max_cols = _column_count()
    first, *rest = values
    cols = _KEY_LENGTH + len(first.encode())
    line += first

    for value in rest:
        size = len(value.encode())
        if max_cols > _KEY_LENGTH and cols + size + _DELIM_COUNT >= max_cols:
            cols = _KEY_LENGTH
            line += "\n" + " " * _KEY_LENGTH
        elif cols != _KEY_LENGTH:
            line += " " * _DELIM_COUNT
            cols += _DELIM_COUNT
        line += value
        cols += size

    sys.stdout.write(line + "\n")