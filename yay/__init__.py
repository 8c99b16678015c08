"""Building blocks of an AUR helper: text output, parsing, configuration, queries and graphs."""

__version__ = "12.0.0"