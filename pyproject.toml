[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "yay"
version = "12.0.0"
description = "Building blocks of an AUR helper: argument parsing, configuration, search ranking, dependency graphs and PGP key checks"
requires-python = ">=3.10"
dependencies = []
keywords = ["aur", "pacman", "arch", "package-manager", "makepkg", "pkgbuild"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["yay"]

[tool.hatch.build.targets.sdist]
include = ["yay", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
