# yay

Python building blocks for an AUR helper on Arch Linux: a pacman-compatible
command-line parser, the helper's JSON configuration with its migrations,
search ranking across the AUR and the sync databases, a dependency graph with
layered topological ordering, PGP key checks for PKGBUILDs, and the coloured
terminal output used throughout.

The package has no runtime dependencies beyond the standard library.

## What is inside

| Module | Purpose |
| --- | --- |
| `yay.text` | Colours (`red`, `green`, `cyan`, `bold`, `color_hash`, ...), `Logger`, prompts (`continue_task`, `get_input`), `human` sizes, `format_time`, `print_info_value` |
| `yay.stringset` | `MapStringSet` and the `equal` set comparison |
| `yay.settings.target_mode` | `TargetMode`: `ANY`, `AUR` or `REPO` |
| `yay.settings.parser` | `Arguments` and `Option`: pacman-style argument parsing, `need_root`, `format_args`, `format_globals` |
| `yay.settings.exe` | `CmdBuilder` for git, gpg, makepkg, pacman and sudo commands; `Command`, `OSRunner`, and `MockRunner` / `MockBuilder` for tests |
| `yay.settings.config` | `Configuration` (JSON `load`/`save`, `handle_option`, `set_privilege_elevator`), `default_config`, `new_config` |
| `yay.settings.migrations` | `run_migrations`, `default_migrations`, `ProviderMigration` |
| `yay.settings.dirs` | `get_config_path`, `get_cache_home`, `init_dir` |
| `yay.settings.errors` | `PrivilegeElevatorNotFoundError`, `RuntimeDirError`, `UserAbortError` |
| `yay.pgp` | `check_pgp_keys` for keys listed in parsed `.SRCINFO` data |
| `yay.topo` | `Graph`: dependency graph with pruning and layered ordering |
| `yay.query.query_builder` | `SourceQueryBuilder`: searches the AUR and sync databases and ranks the results |
| `yay.query.metric` | `SearchRanking`, `SearchResult`, `hamming_similarity` |
| `yay.query.aur_info` | `aur_info`, `aur_info_print`: batched, concurrent AUR info requests |
| `yay.query.aur_warnings` | `AURWarnings`: missing, orphaned, out-of-date and locally newer packages |
| `yay.query.version_diff` | `get_version_diff`, `vercmp`, `is_devel_name`, `is_devel_package` |
| `yay.query.types` | `AURPackage`, `AURQuery`, `SearchBy`, search result formatting |
| `yay.query.source` | `query_aur`, `SearchVerbosity`, `AURQueryError` |

Colour output is controlled by `yay.text.use_color`; messages pass through
the `yay.text.messages` catalogue, which maps a message to its translation.

## Examples

Split a `db/package` target:

```python
from yay.text import split_db_from_name

split_db_from_name("core/linux")   # ("core", "linux")
split_db_from_name("linux")        # ("", "linux")
```

Parse a command line:

```python
from yay.settings.parser import Arguments

args = Arguments()
args.parse(["-Syu", "--needed", "firefox"])
args.op                 # "S"
args.targets            # ["firefox"]
args.exists_arg("y")    # True
```

Order packages so that dependencies come first:

```python
from yay.topo import Graph

graph = Graph()
graph.depend_on("app", "lib")
graph.depend_on("lib", "base")

for layer in graph.topo_sorted_layer_map(None):
    print(sorted(layer))
# ['base']
# ['lib']
# ['app']
```

A dependency on itself raises `SelfReferentialError`, and a cycle raises
`CircularDependencyError`.

Compare versions and highlight where they part ways:

```python
from yay.query.version_diff import get_version_diff, vercmp

vercmp("1.0.1-1", "1.0.0-1")   # positive
left, right = get_version_diff("1.0.0-1", "1.0.0-2")
```

Start from the default configuration and write it out:

```python
from yay.settings.config import default_config

config = default_config("12.0.0")
config.save("/tmp/yay/config.json", "12.0.0")
```

## What it does not do

There is no command to run: the package offers no `yay` executable and no
install, upgrade or build workflow. It has no AUR HTTP client, does not read
the pacman databases, does not parse `.SRCINFO` files and does not read
`pacman.conf`. Functions that need these take caller-supplied objects instead:
an AUR client with `get(query)` and `info(names)`, a database executor with
`sync_packages(...)`, `local_package(name)` and `package_groups(pkg)`, and
srcinfo objects carrying `valid_pgp_keys`. Commands are only run through a
runner such as `OSRunner`.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.