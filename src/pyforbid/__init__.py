"""
pyforbid - forbidden identifier linter for Python

Reports uses of identifiers that match configured regular expressions,
optionally restricted to the package an identifier was imported from.
"""

__version__ = "0.1.0"
__author__ = "pyforbid contributors"

from pyforbid.patterns import (
    ConfigError,
    Pattern,
    PatternSyntaxError,
    default_patterns,
    parse_pattern,
    pattern_from_config,
)
from pyforbid.linter import Issue, Linter, Position, RunConfig, RunContextError
