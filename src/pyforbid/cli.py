"""
CLI entry point for pyforbid.

Usage:
    pyforbid [paths ...]                       Check files with the default patterns
    pyforbid src -p '^print$' -p '^eval$'      Check against your own patterns
    pyforbid src --config lint/forbid.yaml     Load patterns and options from YAML
    pyforbid src --analyze-types               Match import-resolved names
    pyforbid src --json                        Output findings as JSONL

Exit codes:
    0 - No forbidden identifiers found
    1 - Forbidden identifiers found
    2 - Invalid configuration
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from . import __version__
from .analyzer import Analyzer, Diagnostic, Pass
from .config import LinterConfig
from .imports import TypeInfo
from .patterns import ConfigError, PatternSyntaxError
from .reporting import Reporter, finding_from_diagnostic
from .source import SourceFile, iter_python_files, load_source

logger = logging.getLogger(__name__)


def build_parser(analyzer: Analyzer) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyforbid",
        description="Report uses of forbidden identifiers in Python code",
    )
    parser.add_argument("paths", nargs="*", type=Path, default=[Path(".")],
                        help="Files or directories to check (default: current directory)")
    parser.add_argument("--config", type=Path, default=None,
                        help="YAML configuration file (default: ./.pyforbid.yaml if present)")
    parser.add_argument("--json", action="store_true", dest="json_output",
                        help="Output findings as JSONL")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log matching decisions")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    analyzer.add_arguments(parser)
    return parser


def load_files(paths: List[Path]) -> List[SourceFile]:
    files: List[SourceFile] = []
    for path in iter_python_files(paths):
        try:
            files.append(load_source(path))
        except (SyntaxError, ValueError, OSError) as e:
            logger.warning(f"Skipping {path}: {e}")
    return files


def main(argv: Optional[List[str]] = None) -> int:
    analyzer = Analyzer()
    args = build_parser(analyzer).parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.verbose:
        analyzer.debug_log = logger.debug

    try:
        config = LinterConfig(args.config)
        analyzer.apply_arguments(args, config)
        analyzer.build_linter()
    except (ConfigError, PatternSyntaxError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    files = load_files(args.paths)
    by_path: Dict[str, SourceFile] = {str(src.path): src for src in files}

    reporter = Reporter()
    reporter.files_checked = len(files)

    def report(diag: Diagnostic) -> None:
        reporter.add(finding_from_diagnostic(diag, by_path.get(diag.position.path)))

    analyzer.run(Pass(files, report=report, type_info=TypeInfo()))

    if args.json_output:
        if reporter.findings:
            print(reporter.to_jsonl())
    else:
        print(reporter.render_human())

    return 1 if reporter.findings else 0


if __name__ == "__main__":
    sys.exit(main())
