"""
Analyzer Adapter

Connects the Linter to a host that hands over parsed files and collects
diagnostics through a callback. The analyzer owns the flag surface:

    -p PATTERN          add a pattern (repeatable)
    --examples          check example functions in test modules (default)
    --no-examples       skip them
    --permit            honour "# permit:<identifier>" directives (default)
    --no-permit         report matches on permitted lines, too
    --analyze-types     match import-resolved names instead of source text
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .config import LinterConfig
from .imports import TypeInfo
from .linter import DebugLog, Issue, Linter, Position, RunConfig
from .patterns import ConfigError, PatternSyntaxError, default_patterns
from .source import SourceFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    position: Position
    message: str
    category: str = "restriction"


@dataclass
class Pass:
    """One analysis pass: the files to check and where diagnostics go."""
    files: Sequence[SourceFile]
    report: Callable[[Diagnostic], None]
    type_info: Optional[TypeInfo] = None


def _pattern_arg(value: str) -> str:
    if value == "":
        raise argparse.ArgumentTypeError("value cannot be empty")
    return value


class Analyzer:
    """
    Forbid identifiers.

    Usage:
        analyzer = Analyzer()
        parser = argparse.ArgumentParser()
        analyzer.add_arguments(parser)
        analyzer.apply_arguments(parser.parse_args(argv))
        analyzer.run(Pass(files, report=diagnostics.append))
    """

    name = "pyforbid"
    doc = "forbid identifiers"

    def __init__(self, debug_log: Optional[DebugLog] = None):
        self.patterns: List[str] = []
        self.use_permit_directive = True
        self.include_examples = True
        self.expand = False
        self.debug_log = debug_log

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "-p", "--pattern", dest="patterns", action="append", type=_pattern_arg,
            metavar="PATTERN", help="forbidden pattern (repeatable)",
        )
        parser.add_argument(
            "--examples", action=argparse.BooleanOptionalAction, default=None,
            help="check example functions in test modules",
        )
        parser.add_argument(
            "--permit", action=argparse.BooleanOptionalAction, default=None,
            help='when set, lines with "# permit" directives will be ignored',
        )
        parser.add_argument(
            "--analyze-types", action=argparse.BooleanOptionalAction, default=None,
            help="when set, expressions get expanded instead of matching the literal source code",
        )

    def apply_arguments(self, args: argparse.Namespace, config: Optional[LinterConfig] = None) -> None:
        """Take options from parsed flags; unset flags fall back to *config*."""
        if config is not None:
            self.patterns = config.patterns
            self.include_examples = not config.exclude_godoc_examples
            self.use_permit_directive = not config.ignore_permit_directives
            self.expand = config.analyze_types
        if args.patterns:
            self.patterns = list(args.patterns)
        if args.examples is not None:
            self.include_examples = args.examples
        if args.permit is not None:
            self.use_permit_directive = args.permit
        if args.analyze_types is not None:
            self.expand = args.analyze_types

    def build_linter(self) -> Linter:
        """Raises ConfigError or PatternSyntaxError for a bad configuration."""
        patterns = self.patterns or default_patterns()
        try:
            return Linter(
                patterns,
                ignore_permit_directives=not self.use_permit_directive,
                exclude_godoc_examples=not self.include_examples,
                analyze_types=self.expand,
            )
        except (ConfigError, PatternSyntaxError) as e:
            logger.debug(f"Failed to configure linter: {e}")
            raise

    def run(self, pass_: Pass) -> List[Issue]:
        linter = self.build_linter()
        config = RunConfig(debug_log=self.debug_log)
        if self.expand:
            config = RunConfig(type_info=pass_.type_info or TypeInfo(), debug_log=self.debug_log)
        issues = linter.run_with_config(config, *pass_.files)
        report_issues(pass_, issues)
        return issues


def report_issues(pass_: Pass, issues: Sequence[Issue]) -> None:
    for issue in issues:
        pass_.report(Diagnostic(
            position=issue.position,
            message=issue.details(),
            category="restriction",
        ))
