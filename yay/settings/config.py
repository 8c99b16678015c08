"""The user's configuration: defaults, JSON storage and command-line overrides."""

from __future__ import annotations

import dataclasses
import json
import os
import re
import shutil
import sys
from dataclasses import dataclass, field
from typing import Any, Optional

from yay import text
from yay.settings import dirs
from yay.settings.errors import PrivilegeElevatorNotFoundError
from yay.settings.exe import CmdBuilder, OSRunner
from yay.settings.parser import Arguments
from yay.settings.target_mode import TargetMode
from yay.text import Logger, tr

# Whether pacman's provider menus must be hidden.
hide_menus = False
# Whether user input should be skipped.
no_confirm = False

_ENV_PATTERN = re.compile(
    r"\$(?:\{([^}]*)\}|(\{)|([*#$@!?\-0-9])|([A-Za-z_][A-Za-z0-9_]*))"
)
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def _expand_env(value: str) -> str:
    """Replace $VAR and ${VAR} with their values; unset variables become empty."""

    def replace(match: re.Match[str]) -> str:
        if match.group(2) is not None:
            return ""
        name = next((group for group in (match.group(1), match.group(3), match.group(4))
                     if group is not None), "")
        if not name:
            return ""
        return os.environ.get(name, "")

    return _ENV_PATTERN.sub(replace, value)


def expand_env_or_home(path: str) -> str:
    """Expand environment variables, then a leading "~/" to $HOME."""
    path = _expand_env(path)
    if path.startswith("~/"):
        joined = os.path.join(os.environ.get("HOME", ""), path[2:])
        path = os.path.normpath(joined) if joined else "."
    return path


def _parse_int(value: str) -> Optional[int]:
    if _INT_PATTERN.fullmatch(value):
        return int(value)
    return None


def _json(key: str, default: Any) -> Any:
    return field(default=default, metadata={"json": key})


@dataclass
class Configuration:
    """Settings for building and installing packages."""

    aur_url: str = _json("aururl", "")
    aur_rpc_url: str = _json("aurrpcurl", "")
    build_dir: str = _json("buildDir", "")
    editor: str = _json("editor", "")
    editor_flags: str = _json("editorflags", "")
    makepkg_bin: str = _json("makepkgbin", "")
    makepkg_conf: str = _json("makepkgconf", "")
    pacman_bin: str = _json("pacmanbin", "")
    pacman_conf: str = _json("pacmanconf", "")
    re_download: str = _json("redownload", "")
    re_build: str = _json("rebuild", "")
    answer_clean: str = _json("answerclean", "")
    answer_diff: str = _json("answerdiff", "")
    answer_edit: str = _json("answeredit", "")
    answer_upgrade: str = _json("answerupgrade", "")
    git_bin: str = _json("gitbin", "")
    gpg_bin: str = _json("gpgbin", "")
    gpg_flags: str = _json("gpgflags", "")
    m_flags: str = _json("mflags", "")
    sort_by: str = _json("sortby", "")
    search_by: str = _json("searchby", "")
    git_flags: str = _json("gitflags", "")
    remove_make: str = _json("removemake", "")
    sudo_bin: str = _json("sudobin", "")
    sudo_flags: str = _json("sudoflags", "")
    version: str = _json("version", "")
    request_split_n: int = _json("requestsplitn", 0)
    completion_interval: int = _json("completionrefreshtime", 0)
    max_concurrent_downloads: int = _json("maxconcurrentdownloads", 0)
    bottom_up: bool = _json("bottomup", False)
    sudo_loop: bool = _json("sudoloop", False)
    time_update: bool = _json("timeupdate", False)
    devel: bool = _json("devel", False)
    clean_after: bool = _json("cleanAfter", False)
    provides: bool = _json("provides", False)
    pgp_fetch: bool = _json("pgpfetch", False)
    upgrade_menu: bool = _json("upgrademenu", False)
    clean_menu: bool = _json("cleanmenu", False)
    diff_menu: bool = _json("diffmenu", False)
    edit_menu: bool = _json("editmenu", False)
    combined_upgrade: bool = _json("combinedupgrade", False)
    use_ask: bool = _json("useask", False)
    batch_install: bool = _json("batchinstall", False)
    single_line_results: bool = _json("singlelineresults", False)
    separate_sources: bool = _json("separatesources", False)
    new_install_engine: bool = _json("newinstallengine", False)
    debug: bool = _json("debug", False)
    use_rpc: bool = _json("rpc", False)
    # Confirm the install both before and after building.
    double_confirm: bool = _json("doubleconfirm", False)

    completion_path: str = ""
    vcs_file_path: str = ""
    save_config: bool = False
    mode: TargetMode = TargetMode.ANY
    logger: Logger = field(
        default_factory=lambda: text.global_logger, compare=False, repr=False
    )
    runtime_cmd_builder: Any = field(default=None, compare=False, repr=False)

    def _json_fields(self) -> list[tuple[str, str]]:
        return [
            (item.name, item.metadata["json"])
            for item in dataclasses.fields(self)
            if "json" in item.metadata
        ]

    def _to_json(self) -> str:
        data = {key: getattr(self, name) for name, key in self._json_fields()}
        encoded = json.dumps(data, indent="\t", ensure_ascii=False)
        for char, escape in (("&", "\\u0026"), ("<", "\\u003c"), (">", "\\u003e"),
                             ("\u2028", "\\u2028"), ("\u2029", "\\u2029")):
            encoded = encoded.replace(char, escape)
        return encoded + "\n"

    def save(self, config_path: str, version: str) -> None:
        """Write the configuration to config_path, stamped with version."""
        self.version = version
        content = self._to_json()

        parent = os.path.dirname(config_path)
        if parent and not os.path.exists(parent):
            os.makedirs(parent, mode=0o755, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())

    def expand_env(self) -> None:
        """Expand environment variables, and ~ in paths, in every setting."""
        for name in ("aur_url", "aur_rpc_url", "editor_flags", "gpg_flags", "m_flags",
                     "git_flags", "sort_by", "search_by", "sudo_flags", "re_download",
                     "re_build", "answer_clean", "answer_diff", "answer_edit",
                     "answer_upgrade", "remove_make"):
            setattr(self, name, _expand_env(getattr(self, name)))
        for name in ("build_dir", "editor", "makepkg_bin", "makepkg_conf", "pacman_bin",
                     "pacman_conf", "git_bin", "gpg_bin", "sudo_bin"):
            setattr(self, name, expand_env_or_home(getattr(self, name)))

    def __str__(self) -> str:
        return self._to_json()

    def set_privilege_elevator(self) -> None:
        """Pick an available sudo-like program; raise if none is found."""
        auth = os.environ.get("PACMAN_AUTH", "")
        if auth:
            self.sudo_bin = auth
            if auth != "sudo":
                self.sudo_flags = ""
                self.sudo_loop = False

        for candidate in (self.sudo_bin, "sudo"):
            if candidate and shutil.which(candidate):
                self.sudo_bin = candidate
                return

        self.sudo_flags = ""
        self.sudo_loop = False

        for candidate in ("doas", "pkexec", "su"):
            if shutil.which(candidate):
                self.sudo_bin = candidate
                return

        raise PrivilegeElevatorNotFoundError(self.sudo_bin)

    def load(self, config_path: str) -> None:
        """Read settings from a JSON file; problems are reported on stderr."""
        try:
            with open(config_path, encoding="utf-8") as handle:
                content = handle.read()
        except FileNotFoundError:
            return
        except OSError as exc:
            print(tr("failed to open config file '%s': %s", config_path, str(exc)),
                  file=sys.stderr)
            return

        try:
            self._apply_json(content)
        except ValueError as exc:
            print(tr("failed to read config file '%s': %s", config_path, str(exc)),
                  file=sys.stderr)

    def _apply_json(self, content: str) -> None:
        stripped = content.lstrip()
        if not stripped:
            raise ValueError("unexpected end of JSON input")
        data, _ = json.JSONDecoder().raw_decode(stripped)
        if data is None:
            return
        if not isinstance(data, dict):
            raise ValueError("cannot load a non-object JSON value into the configuration")

        by_key = {key.lower(): name for name, key in self._json_fields()}
        first_error: Optional[str] = None
        for key, value in data.items():
            name = by_key.get(key.lower())
            if name is None or value is None:
                continue
            current = getattr(self, name)
            if isinstance(current, bool):
                accepted = isinstance(value, bool)
            elif isinstance(current, int):
                accepted = isinstance(value, int) and not isinstance(value, bool)
            else:
                accepted = isinstance(value, str)
            if accepted:
                setattr(self, name, value)
            elif first_error is None:
                first_error = (
                    f"cannot load {type(value).__name__} into field {key} "
                    f"of type {type(current).__name__}"
                )
        if first_error is not None:
            raise ValueError(first_error)

    def cmd_builder(self, runner: Any = None) -> CmdBuilder:
        """Build a command builder from the current settings."""
        if runner is None:
            runner = OSRunner(log=self.logger.child("runner"))
        return CmdBuilder(
            git_bin=self.git_bin,
            git_flags=self.git_flags.split(),
            gpg_bin=self.gpg_bin,
            gpg_flags=self.gpg_flags.split(),
            makepkg_flags=self.m_flags.split(),
            makepkg_conf_path=self.makepkg_conf,
            makepkg_bin=self.makepkg_bin,
            sudo_bin=self.sudo_bin,
            sudo_flags=self.sudo_flags.split(),
            sudo_loop_enabled=self.sudo_loop,
            pacman_bin=self.pacman_bin,
            pacman_config_path=self.pacman_conf,
            pacman_db_path="",
            runner=runner,
            log=self.logger.child("cmd_builder"),
        )

    def parse_command_line(self, args: Arguments, argv: Any) -> None:
        """Parse argv into args, then take the options meant for this program."""
        args.parse(argv, sys.stdin)
        self.extract_yay_options(args)
        self.runtime_cmd_builder = self.cmd_builder(None)

    def extract_yay_options(self, args: Arguments) -> None:
        """Apply and remove the options handled here, then settle the AUR URLs."""
        for option, value in list(args.options.items()):
            if self.handle_option(option, value.first()):
                args.del_arg(option)

        self.aur_url = self.aur_url.rstrip("/")

        if self.aur_rpc_url == "":
            self.aur_rpc_url = self.aur_url + "/rpc?"
            return

        if not self.aur_rpc_url.endswith("?"):
            if self.aur_rpc_url.endswith("/rpc"):
                self.aur_rpc_url += "?"
            else:
                self.aur_rpc_url = self.aur_rpc_url.rstrip("/") + "/rpc?"

    def handle_option(self, option: str, value: str) -> bool:
        """Apply one command-line option; return whether it was consumed."""
        global no_confirm

        if option in _CONSTANT_OPTIONS:
            name, setting = _CONSTANT_OPTIONS[option]
            setattr(self, name, setting)
            return True
        if option in _VALUE_OPTIONS:
            setattr(self, _VALUE_OPTIONS[option], value)
            return True

        if option == "debug":
            self.debug = True
            text.global_logger.debug = True
            return False
        if option == "completioninterval":
            number = _parse_int(value)
            if number is not None:
                self.completion_interval = number
            return True
        if option == "requestsplitn":
            number = _parse_int(value)
            if number is not None and number > 0:
                self.request_split_n = number
            return True
        if option == "noconfirm":
            no_confirm = True
            return True
        return False


_CONSTANT_OPTIONS: dict[str, tuple[str, Any]] = {
    "save": ("save_config", True),
    "afterclean": ("clean_after", True),
    "cleanafter": ("clean_after", True),
    "noafterclean": ("clean_after", False),
    "nocleanafter": ("clean_after", False),
    "devel": ("devel", True),
    "nodevel": ("devel", False),
    "timeupdate": ("time_update", True),
    "notimeupdate": ("time_update", False),
    "topdown": ("bottom_up", False),
    "bottomup": ("bottom_up", True),
    "singlelineresults": ("single_line_results", True),
    "doublelineresults": ("single_line_results", False),
    "redownload": ("re_download", "yes"),
    "redownloadall": ("re_download", "all"),
    "noredownload": ("re_download", "no"),
    "rebuild": ("re_build", "yes"),
    "rebuildall": ("re_build", "all"),
    "rebuildtree": ("re_build", "tree"),
    "norebuild": ("re_build", "no"),
    "batchinstall": ("batch_install", True),
    "nobatchinstall": ("batch_install", False),
    "noanswerclean": ("answer_clean", ""),
    "noanswerdiff": ("answer_diff", ""),
    "noansweredit": ("answer_edit", ""),
    "noanswerupgrade": ("answer_upgrade", ""),
    "nomakepkgconf": ("makepkg_conf", ""),
    "sudoloop": ("sudo_loop", True),
    "nosudoloop": ("sudo_loop", False),
    "provides": ("provides", True),
    "noprovides": ("provides", False),
    "pgpfetch": ("pgp_fetch", True),
    "nopgpfetch": ("pgp_fetch", False),
    "upgrademenu": ("upgrade_menu", True),
    "noupgrademenu": ("upgrade_menu", False),
    "cleanmenu": ("clean_menu", True),
    "nocleanmenu": ("clean_menu", False),
    "diffmenu": ("diff_menu", True),
    "nodiffmenu": ("diff_menu", False),
    "editmenu": ("edit_menu", True),
    "noeditmenu": ("edit_menu", False),
    "useask": ("use_ask", True),
    "nouseask": ("use_ask", False),
    "combinedupgrade": ("combined_upgrade", True),
    "nocombinedupgrade": ("combined_upgrade", False),
    "a": ("mode", TargetMode.AUR),
    "aur": ("mode", TargetMode.AUR),
    "repo": ("mode", TargetMode.REPO),
    "removemake": ("remove_make", "yes"),
    "noremovemake": ("remove_make", "no"),
    "askremovemake": ("remove_make", "ask"),
    "separatesources": ("separate_sources", True),
    "noseparatesources": ("separate_sources", False),
}

_VALUE_OPTIONS: dict[str, str] = {
    "aururl": "aur_url",
    "aurrpcurl": "aur_rpc_url",
    "sortby": "sort_by",
    "searchby": "search_by",
    "config": "pacman_conf",
    "answerclean": "answer_clean",
    "answerdiff": "answer_diff",
    "answeredit": "answer_edit",
    "answerupgrade": "answer_upgrade",
    "gpgflags": "gpg_flags",
    "mflags": "m_flags",
    "gitflags": "git_flags",
    "builddir": "build_dir",
    "editor": "editor",
    "editorflags": "editor_flags",
    "makepkg": "makepkg_bin",
    "makepkgconf": "makepkg_conf",
    "pacman": "pacman_bin",
    "git": "git_bin",
    "gpg": "gpg_bin",
    "sudo": "sudo_bin",
    "sudoflags": "sudo_flags",
}


def default_config(version: str) -> Configuration:
    """Return the configuration used when nothing else is set."""
    return Configuration(
        aur_url="https://aur.archlinux.org",
        build_dir=_expand_env("$HOME/.cache/yay"),
        clean_after=False,
        editor="",
        editor_flags="",
        devel=False,
        makepkg_bin="makepkg",
        makepkg_conf="",
        pacman_bin="pacman",
        pgp_fetch=True,
        pacman_conf="/etc/pacman.conf",
        gpg_flags="",
        m_flags="",
        git_flags="",
        bottom_up=True,
        completion_interval=7,
        max_concurrent_downloads=0,
        sort_by="votes",
        search_by="name-desc",
        sudo_loop=False,
        git_bin="git",
        gpg_bin="gpg",
        sudo_bin="sudo",
        sudo_flags="",
        time_update=False,
        request_split_n=150,
        re_download="no",
        re_build="no",
        batch_install=False,
        answer_clean="",
        answer_diff="",
        answer_edit="",
        answer_upgrade="",
        remove_make="ask",
        provides=True,
        upgrade_menu=True,
        clean_menu=True,
        diff_menu=True,
        edit_menu=False,
        use_ask=False,
        combined_upgrade=True,
        separate_sources=True,
        new_install_engine=True,
        version=version,
        debug=False,
        use_rpc=True,
        double_confirm=True,
        logger=text.global_logger,
        mode=TargetMode.ANY,
    )


def new_config(config_path: str, version: str) -> Configuration:
    """Load the configuration from config_path over the defaults and prepare it.

    Raises RuntimeDirError if the build directory cannot be created and
    PrivilegeElevatorNotFoundError if no sudo-like program exists.
    """
    config = default_config(version)

    try:
        cache_home = dirs.get_cache_home()
    except OSError as exc:
        text.errorln(exc)
        cache_home = os.path.join(os.environ.get("TMPDIR") or "/tmp", "yay")

    config.build_dir = cache_home
    config.completion_path = os.path.join(cache_home, dirs.COMPLETION_FILE_NAME)
    config.vcs_file_path = os.path.join(cache_home, dirs.VCS_FILE_NAME)
    config.load(config_path)

    aurdest = os.environ.get("AURDEST", "")
    if aurdest:
        config.build_dir = aurdest

    config.expand_env()

    if config.build_dir != dirs.SYSTEMD_CACHE:
        dirs.init_dir(config.build_dir)

    config.set_privilege_elevator()
    return config