"""
flake8 Plugin

Registered under the ``flake8.extension`` entry point with code prefix FBD.
Options (command line or the [flake8] section of a config file):

    --forbid-patterns           one pattern per line; structured patterns
                                as single-line JSON or YAML flow mappings
    --forbid-exclude-examples   skip example functions in test modules
    --forbid-ignore-permit      report matches on "# permit:" lines, too
    --forbid-analyze-types      match import-resolved names instead of source text
"""

from __future__ import annotations

import ast
import logging
from typing import Iterator, List, Optional, Tuple

from . import __version__
from .imports import TypeInfo
from .linter import Linter, RunConfig
from .source import source_from_tree

logger = logging.getLogger(__name__)


class ForbiddenChecker:
    name = "pyforbid"
    version = __version__
    code = "FBD001"

    _linter: Optional[Linter] = None

    def __init__(self, tree: ast.Module, filename: str = "stdin", lines: Optional[List[str]] = None):
        self.tree = tree
        self.filename = filename
        self.lines = lines or []

    @classmethod
    def add_options(cls, option_manager) -> None:
        option_manager.add_option(
            "--forbid-patterns", default="", parse_from_config=True,
            help="Forbidden patterns, one per line (default: print calls). "
                 "Structured patterns must fit on one line, as JSON or a YAML "
                 "flow mapping such as {pattern: ^system$, package: ^os$}",
        )
        option_manager.add_option(
            "--forbid-exclude-examples", action="store_true", default=False, parse_from_config=True,
            help="Skip example functions in test modules",
        )
        option_manager.add_option(
            "--forbid-ignore-permit", action="store_true", default=False, parse_from_config=True,
            help='Report matches on lines with "# permit:" directives',
        )
        option_manager.add_option(
            "--forbid-analyze-types", action="store_true", default=False, parse_from_config=True,
            help="Match import-resolved names instead of the literal source code",
        )

    @classmethod
    def parse_options(cls, options) -> None:
        patterns = [line.strip() for line in (options.forbid_patterns or "").splitlines() if line.strip()]
        cls._linter = Linter(
            patterns,
            ignore_permit_directives=options.forbid_ignore_permit,
            exclude_godoc_examples=options.forbid_exclude_examples,
            analyze_types=options.forbid_analyze_types,
        )

    def run(self) -> Iterator[Tuple[int, int, str, type]]:
        linter = self._linter if self._linter is not None else Linter()
        src = source_from_tree(self.tree, "".join(self.lines), self.filename)
        config = RunConfig(debug_log=logger.debug)
        if linter.analyze_types:
            config = RunConfig(type_info=TypeInfo(), debug_log=logger.debug)
        for issue in linter.run_with_config(config, src):
            yield issue.position.line, issue.position.col, f"{self.code} {issue.details()}", type(self)
