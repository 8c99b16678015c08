"""Building and running the external commands: git, gpg, makepkg, pacman, sudo."""

from __future__ import annotations

import os
import pwd
import shutil
import subprocess
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

from yay import text
from yay.settings.parser import Arguments
from yay.settings.target_mode import TargetMode
from yay.text import Logger, tr

SUDO_LOOP_DURATION = 241

_GIT_DENY_LIST = frozenset({"GIT_WORK_TREE", "GIT_DIR"})
_LOCK_POLL_SECONDS = 3


@dataclass
class Command:
    """An external command ready to be run."""

    args: list[str]
    cwd: str = ""
    env: Optional[dict[str, str]] = None
    credentials: Optional[tuple[int, int]] = None

    def __str__(self) -> str:
        return " ".join(self.args)


class CommandError(Exception):
    """An external command could not be started or exited with an error."""

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class Runner(Protocol):
    def show(self, cmd: Command) -> None: ...

    def capture(self, cmd: Command) -> tuple[str, str]: ...


def _run_kwargs(cmd: Command) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"cwd": cmd.cwd or None, "env": cmd.env}
    if cmd.credentials is not None:
        kwargs["user"], kwargs["group"] = cmd.credentials
    return kwargs


@dataclass
class OSRunner:
    """Runs commands on the host system."""

    log: Logger = field(default_factory=lambda: text.global_logger)

    def show(self, cmd: Command) -> None:
        """Run cmd attached to the terminal; raise CommandError on failure."""
        self.log.debugln("running", str(cmd))
        try:
            completed = subprocess.run(cmd.args, check=False, **_run_kwargs(cmd))
        except OSError as exc:
            raise CommandError(str(exc)) from exc
        if completed.returncode != 0:
            raise CommandError(
                f"exit status {completed.returncode}", returncode=completed.returncode
            )

    def capture(self, cmd: Command) -> tuple[str, str]:
        """Run cmd and return its trimmed output as (stdout, stderr)."""
        self.log.debugln("capturing", str(cmd))
        try:
            completed = subprocess.run(
                cmd.args, check=False, capture_output=True, text=True, **_run_kwargs(cmd)
            )
        except OSError as exc:
            raise CommandError(str(exc)) from exc
        stdout = completed.stdout.strip()
        if completed.returncode != 0:
            raise CommandError(
                f"exit status {completed.returncode}",
                returncode=completed.returncode,
                stdout=stdout,
                stderr=completed.stderr.strip(),
            )
        return stdout, ""


def _git_filtered_env() -> dict[str, str]:
    env = {key: value for key, value in os.environ.items() if key not in _GIT_DENY_LIST}
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


@dataclass
class CmdBuilder:
    """Builds the commands for the configured tools and runs them."""

    git_bin: str = "git"
    git_flags: list[str] = field(default_factory=list)
    gpg_bin: str = "gpg"
    gpg_flags: list[str] = field(default_factory=list)
    makepkg_flags: list[str] = field(default_factory=list)
    makepkg_conf_path: str = ""
    makepkg_bin: str = "makepkg"
    sudo_bin: str = "sudo"
    sudo_flags: list[str] = field(default_factory=list)
    sudo_loop_enabled: bool = False
    pacman_bin: str = "pacman"
    pacman_config_path: str = ""
    pacman_db_path: str = ""
    runner: Any = field(default_factory=OSRunner)
    log: Logger = field(default_factory=lambda: text.global_logger)

    def build_gpg_cmd(self, *args: str) -> Command:
        cmd = Command([self.gpg_bin, *self.gpg_flags, *args])
        return self._de_elevate_command(cmd)

    def build_git_cmd(self, directory: str, *args: str) -> Command:
        arguments = [self.git_bin, *self.git_flags]
        if directory:
            arguments += ["-C", directory]
        arguments += args
        cmd = Command(arguments, env=_git_filtered_env())
        return self._de_elevate_command(cmd)

    def add_makepkg_flag(self, flag: str) -> None:
        self.makepkg_flags.append(flag)

    def build_makepkg_cmd(self, directory: str, *args: str) -> Command:
        arguments = [self.makepkg_bin, *self.makepkg_flags]
        if self.makepkg_conf_path:
            arguments += ["--config", self.makepkg_conf_path]
        arguments += args
        cmd = Command(arguments, cwd=directory)
        return self._de_elevate_command(cmd)

    def set_pacman_db_path(self, db_path: str) -> None:
        self.pacman_db_path = db_path

    def _de_elevate_command(self, cmd: Command) -> Command:
        """When running as root, drop to the calling user or run through systemd-run."""
        if os.geteuid() != 0:
            return cmd

        caller = os.environ.get("SUDO_USER") or os.environ.get("DOAS_USER") or ""
        try:
            entry = pwd.getpwnam(caller)
        except KeyError:
            entry = None
        if entry is not None:
            cmd.credentials = (entry.pw_uid, entry.pw_gid)
            return cmd

        systemd_args = [
            "--service-type=oneshot",
            "--pipe", "--wait", "--pty", "--quiet",
            "-p", "DynamicUser=yes",
            "-p", "CacheDirectory=yay",
            "-E", "HOME=/tmp",
        ]
        if cmd.cwd:
            systemd_args += ["-p", f"WorkingDirectory={cmd.cwd}"]
        for name in ("http_proxy", "https_proxy", "ftp_proxy"):
            value = os.environ.get(name)
            if value:
                systemd_args += ["-E", f"{name}={value}"]

        path = shutil.which(cmd.args[0]) or ""
        systemd_args.append(path)
        systemd_args += cmd.args[1:]
        return Command(["systemd-run", *systemd_args], cwd=cmd.cwd)

    def _build_privilege_elevator_command(self, arguments: list[str]) -> Command:
        if self.sudo_bin == "su":
            return Command([self.sudo_bin, "-c", " ".join(arguments)])
        return Command([self.sudo_bin, *self.sudo_flags, *arguments])

    def build_pacman_cmd(self, args: Arguments, mode: TargetMode, no_confirm: bool) -> Command:
        needs_root = args.need_root(mode)
        arguments = [self.pacman_bin, *args.format_globals(), *args.format_args()]
        if no_confirm:
            arguments.append("--noconfirm")
        arguments += ["--config", self.pacman_config_path, "--", *args.targets]

        if needs_root:
            self._wait_lock(self.pacman_db_path)
            if os.geteuid() != 0:
                return self._build_privilege_elevator_command(arguments)

        return Command(arguments)

    def _wait_lock(self, db_path: str) -> None:
        """Block while pacman's database lock file exists."""
        lock_path = os.path.join(db_path, "db.lck")
        if not os.path.exists(lock_path):
            return

        self.log.warnln(tr("%s is present.", lock_path))
        self.log.warn(tr("There may be another Pacman instance running. Waiting..."))
        while True:
            time.sleep(_LOCK_POLL_SECONDS)
            if not os.path.exists(lock_path):
                print()
                return

    def sudo_loop(self) -> None:
        """Refresh sudo credentials now and keep them fresh in the background."""
        self._update_sudo()
        threading.Thread(target=self._sudo_loop_background, daemon=True).start()

    def _sudo_loop_background(self) -> None:
        while True:
            self._update_sudo()
            time.sleep(SUDO_LOOP_DURATION)

    def _update_sudo(self) -> None:
        while True:
            try:
                self.show(Command([self.sudo_bin, "-v"]))
            except CommandError as exc:
                self.log.errorln(exc)
            else:
                return

    def show(self, cmd: Command) -> None:
        self.runner.show(cmd)

    def capture(self, cmd: Command) -> tuple[str, str]:
        return self.runner.capture(cmd)


@dataclass
class Call:
    """One recorded call to a mock."""

    res: list[Any] = field(default_factory=list)
    args: list[Any] = field(default_factory=list)
    dir: str = ""

    def __str__(self) -> str:
        return str(self.args)


@dataclass
class MockRunner:
    """Runner that records commands instead of running them."""

    show_calls: list[Call] = field(default_factory=list)
    capture_calls: list[Call] = field(default_factory=list)
    show_fn: Optional[Callable[[Command], None]] = None
    capture_fn: Optional[Callable[[Command], tuple[str, str]]] = None

    def show(self, cmd: Command) -> None:
        try:
            if self.show_fn is not None:
                self.show_fn(cmd)
        finally:
            self.show_calls.append(Call(args=[cmd], dir=cmd.cwd))

    def capture(self, cmd: Command) -> tuple[str, str]:
        self.capture_calls.append(Call(args=[cmd], dir=cmd.cwd))
        if self.capture_fn is not None:
            return self.capture_fn(cmd)
        return "", ""


@dataclass
class MockBuilder:
    """Command builder that builds plain commands and records what it is asked."""

    runner: Any = None
    build_makepkg_cmd_calls: list[Call] = field(default_factory=list)
    build_makepkg_cmd_fn: Optional[Callable[..., Command]] = None
    build_pacman_cmd_fn: Optional[Callable[..., Command]] = None
    makepkg_flags: list[str] = field(default_factory=list)
    pacman_db_path: str = ""
    sudo_loop_calls: int = 0

    def build_makepkg_cmd(self, directory: str, *args: str) -> Command:
        if self.build_makepkg_cmd_fn is not None:
            res = self.build_makepkg_cmd_fn(directory, *args)
        else:
            res = Command(["makepkg", *args])
        self.build_makepkg_cmd_calls.append(Call(res=[res], args=[directory, list(args)]))
        return res

    def add_makepkg_flag(self, flag: str) -> None:
        """Record the flag; built commands do not use it."""
        self.makepkg_flags.append(flag)

    def build_git_cmd(self, directory: str, *args: str) -> Command:
        return Command(["git", *args])

    def build_pacman_cmd(self, args: Arguments, mode: TargetMode, no_confirm: bool) -> Command:
        if self.build_pacman_cmd_fn is not None:
            return self.build_pacman_cmd_fn(args, mode, no_confirm)
        return Command(["pacman"])

    def set_pacman_db_path(self, path: str) -> None:
        """Record the database path; built commands do not use it."""
        self.pacman_db_path = path

    def sudo_loop(self) -> None:
        """Count the request without running sudo."""
        self.sudo_loop_calls += 1

    def show(self, cmd: Command) -> None:
        self.runner.show(cmd)

    def capture(self, cmd: Command) -> tuple[str, str]:
        return self.runner.capture(cmd)