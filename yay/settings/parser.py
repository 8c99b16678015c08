"""Command line argument parsing compatible with pacman's option syntax."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import IO, Optional, Sequence

from yay.settings.target_mode import TargetMode
from yay.text import tr


class ArgumentError(Exception):
    """Raised when the command line cannot be parsed."""


_ARGS = frozenset(
    {
        "-", "--",
        "ask",
        "D", "database",
        "Q", "query",
        "R", "remove",
        "S", "sync",
        "T", "deptest",
        "U", "upgrade",
        "F", "files",
        "V", "version",
        "h", "help",
        "Y", "yay",
        "W", "web",
        "P", "show",
        "B", "build",
        "G", "getpkgbuild",
        "b", "dbpath",
        "r", "root",
        "v", "verbose",
        "arch", "cachedir", "color", "config", "debug", "gpgdir", "hookdir",
        "logfile", "noconfirm", "confirm", "disable-download-timeout", "sysroot",
        "d", "nodeps",
        "assume-installed", "dbonly", "noprogressbar", "numberupgrades",
        "noscriptlet",
        "p", "print",
        "print-format", "asdeps", "asexplicit", "ignore", "ignoregroup",
        "needed", "overwrite",
        "f", "force",
        "c", "changelog",
        "deps",
        "e", "explicit",
        "g", "groups",
        "i", "info",
        "k", "check",
        "l", "list",
        "m", "foreign",
        "n", "native",
        "o", "owns",
        "file",
        "q", "quiet",
        "s", "search",
        "t", "unrequired",
        "u", "upgrades",
        "cascade", "nosave", "recursive", "unneeded", "clean", "sysupgrade",
        "w", "downloadonly",
        "y", "refresh",
        "x", "regex",
        "machinereadable",
        # yay options
        "aururl", "aurrpcurl", "save",
        "afterclean", "cleanafter",
        "noafterclean", "nocleanafter",
        "devel", "nodevel", "timeupdate", "notimeupdate", "topdown", "bottomup",
        "completioninterval", "sortby", "searchby",
        "redownload", "redownloadall", "noredownload",
        "rebuild", "rebuildall", "rebuildtree", "norebuild",
        "batchinstall", "nobatchinstall",
        "answerclean", "noanswerclean", "answerdiff", "noanswerdiff",
        "answeredit", "noansweredit", "answerupgrade", "noanswerupgrade",
        "gpgflags", "mflags", "gitflags", "builddir", "editor", "editorflags",
        "makepkg", "makepkgconf", "nomakepkgconf", "pacman", "git", "gpg",
        "sudo", "sudoflags", "requestsplitn", "sudoloop", "nosudoloop",
        "provides", "noprovides", "pgpfetch", "nopgpfetch",
        "upgrademenu", "noupgrademenu", "cleanmenu", "nocleanmenu",
        "diffmenu", "nodiffmenu", "editmenu", "noeditmenu",
        "useask", "nouseask", "combinedupgrade", "nocombinedupgrade",
        "a", "aur",
        "repo", "removemake", "noremovemake", "askremovemake",
        "complete", "stats", "news", "gendb", "currentconfig", "defaultconfig",
        "singlelineresults", "doublelineresults",
        "separatesources", "noseparatesources",
    }
)

_OPS = frozenset(
    {
        "V", "version",
        "D", "database",
        "F", "files",
        "Q", "query",
        "R", "remove",
        "S", "sync",
        "T", "deptest",
        "U", "upgrade",
        "Y", "yay",
        "W", "web",
        "B", "build",
        "P", "show",
        "G", "getpkgbuild",
    }
)

_GLOBALS = frozenset(
    {
        "b", "dbpath",
        "r", "root",
        "v", "verbose",
        "arch", "cachedir", "color", "config", "debug", "gpgdir", "hookdir",
        "logfile", "noconfirm", "confirm",
    }
)

_WITH_PARAM = frozenset(
    {
        "dbpath", "b",
        "root", "r",
        "sysroot", "config", "ignore", "assume-installed", "overwrite", "ask",
        "cachedir", "hookdir", "logfile", "ignoregroup", "arch", "print-format",
        "gpgdir", "color",
        # yay params
        "aururl", "aurrpcurl", "mflags", "gpgflags", "gitflags", "builddir",
        "editor", "editorflags", "makepkg", "makepkgconf", "pacman", "git",
        "gpg", "sudo", "sudoflags", "requestsplitn", "answerclean",
        "answerdiff", "answeredit", "answerupgrade", "completioninterval",
        "sortby", "searchby",
    }
)


def is_arg(arg: str) -> bool:
    """Return whether arg is a known option or operation name."""
    return arg in _ARGS


def is_op(op: str) -> bool:
    """Return whether op names an operation."""
    return op in _OPS


def is_global(option: str) -> bool:
    """Return whether option applies to every pacman invocation."""
    return option in _GLOBALS


def has_param(arg: str) -> bool:
    """Return whether option arg takes a value."""
    return arg in _WITH_PARAM


def _format_arg(arg: str) -> str:
    return ("--" if len(arg) > 1 else "-") + arg


@dataclass
class Option:
    """Values given for one option, and whether it is global."""

    is_global: bool = False
    args: list[str] = field(default_factory=list)

    def add(self, *args: str) -> None:
        self.args.extend(args)

    def first(self) -> str:
        return self.args[0] if self.args else ""

    def set(self, arg: str) -> None:
        self.args = [arg]


@dataclass
class Arguments:
    """Parsed command line: one operation, its options and its targets."""

    op: str = ""
    options: dict[str, Option] = field(default_factory=dict)
    targets: list[str] = field(default_factory=list)

    def create_or_append_option(self, option: str, *args: str) -> None:
        existing = self.options.get(option)
        if existing is None:
            self.options[option] = Option(args=list(args))
        else:
            existing.add(*args)

    def copy_global(self) -> "Arguments":
        """Return new arguments holding only the global options."""
        return Arguments(
            options={key: value for key, value in self.options.items() if value.is_global}
        )

    def copy(self) -> "Arguments":
        return Arguments(op=self.op, options=dict(self.options), targets=list(self.targets))

    def del_arg(self, *args: str) -> None:
        for option in args:
            self.options.pop(option, None)

    def need_root(self, mode: TargetMode) -> bool:
        """Return whether the pacman call these arguments make needs root."""
        if self.exists_arg("h", "help"):
            return False

        op = self.op
        if op in ("D", "database"):
            return not self.exists_arg("k", "check")
        if op in ("F", "files"):
            return self.exists_arg("y", "refresh")
        if op in ("Q", "query"):
            return self.exists_arg("k", "check")
        if op in ("R", "remove"):
            return not self.exists_arg("p", "print", "print-format")
        if op in ("S", "sync"):
            if self.exists_arg("y", "refresh"):
                return True
            if (
                self.exists_arg("p", "print", "print-format")
                or self.exists_arg("s", "search")
                or self.exists_arg("l", "list")
                or self.exists_arg("g", "groups")
                or self.exists_arg("i", "info")
                or (self.exists_arg("c", "clean") and mode == TargetMode.AUR)
            ):
                return False
            return True
        return op in ("U", "upgrade")

    def _add_op(self, op: str) -> None:
        if self.op:
            raise ArgumentError(tr("only one operation may be used at a time"))
        self.op = op

    def _add_param(self, option: str, arg: str) -> None:
        if not is_arg(option):
            raise ArgumentError(tr("invalid option '%s'", option))
        if is_op(option):
            self._add_op(option)
            return
        self.create_or_append_option(option, *arg.split(","))
        if is_global(option):
            self.options[option].is_global = True

    def add_arg(self, *args: str) -> None:
        for option in args:
            self._add_param(option, "")

    def exists_arg(self, *args: str) -> bool:
        """Return whether any of the given options is present."""
        return any(option in self.options for option in args)

    def get_arg(self, *args: str) -> tuple[str, bool, bool]:
        """Return (first value, given twice, given) for the first present option."""
        for option in args:
            value = self.options.get(option)
            if value is not None:
                return value.first(), len(value.args) >= 2, len(value.args) >= 1
        return "", False, False

    def get_args(self, option: str) -> Optional[list[str]]:
        value = self.options.get(option)
        return value.args if value is not None else None

    def add_target(self, *args: str) -> None:
        self.targets.extend(args)

    def clear_targets(self) -> None:
        self.targets = []

    def exists_double(self, *args: str) -> bool:
        for option in args:
            value = self.options.get(option)
            if value is not None:
                return len(value.args) >= 2
        return False

    def _format_options(self, want_global: bool) -> list[str]:
        formatted: list[str] = []
        for option, value in self.options.items():
            if value.is_global != want_global or option == "--":
                continue
            flag = _format_arg(option)
            for arg in value.args:
                formatted.append(flag)
                if has_param(option):
                    formatted.append(arg)
        return formatted

    def format_args(self) -> list[str]:
        """Format the operation and non-global options for pacman."""
        formatted = [_format_arg(self.op)] if self.op else []
        return formatted + self._format_options(False)

    def format_globals(self) -> list[str]:
        """Format the global options for pacman."""
        return self._format_options(True)

    def _parse_short_option(self, arg: str, param: str) -> bool:
        if arg == "-":
            self.add_arg("-")
            return False

        body = arg[1:]
        for index, char in enumerate(body):
            if has_param(char):
                if index < len(body) - 1:
                    self._add_param(char, body[index + 1:])
                    return False
                self._add_param(char, param)
                return True
            self.add_arg(char)
        return False

    def _parse_long_option(self, arg: str, param: str) -> bool:
        if arg == "--":
            self.add_arg(arg)
            return False

        body = arg[2:]
        name, sep, value = body.partition("=")
        if sep:
            self._add_param(name, value)
            return False
        if has_param(body):
            self._add_param(body, param)
            return True
        self.add_arg(body)
        return False

    def parse_stdin(self, stream: IO[str]) -> None:
        """Read targets, one per line, from piped input and close it."""
        try:
            interactive = stream.isatty()
        except (ValueError, OSError) as exc:
            raise ArgumentError(str(exc)) from exc
        if interactive:
            raise ArgumentError(tr("argument '-' specified without input on stdin"))

        try:
            for line in stream:
                line = line.rstrip("\n")
                if line.endswith("\r"):
                    line = line[:-1]
                self.add_target(line)
        except (ValueError, OSError) as exc:
            raise ArgumentError(str(exc)) from exc
        stream.close()

    def parse(
        self,
        argv: Optional[Sequence[str]] = None,
        stdin: Optional[IO[str]] = None,
    ) -> None:
        """Parse command line arguments (without the program name)."""
        args = list(sys.argv[1:] if argv is None else argv)
        used_next = False

        for index, arg in enumerate(args):
            if used_next:
                used_next = False
                continue
            next_arg = args[index + 1] if index + 1 < len(args) else ""

            if self.exists_arg("--"):
                self.add_target(arg)
            elif arg.startswith("--"):
                used_next = self._parse_long_option(arg, next_arg)
            elif arg.startswith("-"):
                used_next = self._parse_short_option(arg, next_arg)
            else:
                self.add_target(arg)

        if not self.op:
            if self.targets:
                self.op = "Y"
            else:
                self._parse_short_option("-Syu", "")

        if self.exists_arg("-"):
            self.parse_stdin(sys.stdin if stdin is None else stdin)
            self.del_arg("-")
            if stdin is None:
                try:
                    sys.stdin = open("/dev/tty", encoding="utf-8")
                except OSError as exc:
                    raise ArgumentError(str(exc)) from exc