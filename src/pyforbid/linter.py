"""
Forbidden Identifier Linter

Walks parsed Python modules and reports every use of an identifier that
matches one of the configured patterns.

Usage:
    linter = Linter([r"^print$", r"^os\\.system(# use subprocess.run)?$"])
    issues = linter.run(source_from_text(code, "app.py"))

    # match the import-resolved name instead of the source text
    linter = Linter([r"^subprocess\\."], analyze_types=True)
    issues = linter.run_with_config(RunConfig(type_info=TypeInfo()), src)
"""

from __future__ import annotations

import ast
import json
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .imports import PackageContext, Resolution, TypeInfo, UnresolvableNode
from .patterns import Pattern, default_patterns, parse_pattern
from .source import SourceFile, has_permit_directive, is_example, text_for

logger = logging.getLogger(__name__)

# Same signature as logger.debug: a format string followed by its arguments.
DebugLog = Callable[..., None]


class RunContextError(Exception):
    """A run asks for a mode without the context that mode needs."""


@dataclass(frozen=True)
class Position:
    path: str
    line: int
    col: int  # 0-based, as in the syntax tree

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.col}"


@dataclass(frozen=True)
class Issue:
    """A use of a forbidden identifier."""
    identifier: str
    pattern: str
    position: Position
    custom_msg: str = ""

    def details(self) -> str:
        if self.custom_msg:
            explanation = f" because {json.dumps(self.custom_msg, ensure_ascii=False)}"
        else:
            explanation = f" by pattern `{self.pattern}`"
        return f"use of `{self.identifier}` forbidden{explanation}"

    def __str__(self) -> str:
        return f"{self.details()} at {self.position}"


@dataclass(frozen=True)
class RunConfig:
    # Enables package constraints and, with analyze_types, expanded text.
    type_info: Optional[TypeInfo] = None
    debug_log: Optional[DebugLog] = None


class Linter:
    """
    A validated set of patterns plus the options of a run.

    Construction fails on the first invalid pattern; a Linter is read-only
    afterwards and can be shared between runs.
    """

    def __init__(self, patterns: Optional[Sequence[str]] = None, *,
                 ignore_permit_directives: bool = False,
                 exclude_godoc_examples: bool = False,
                 analyze_types: bool = False):
        """
        Args:
            patterns: pattern strings, the default set if empty
            ignore_permit_directives: report matches on lines with "# permit:" comments
            exclude_godoc_examples: skip example functions in test modules
            analyze_types: match import-resolved names instead of source text
        """
        raw = list(patterns) if patterns else default_patterns()
        self._patterns: Tuple[Pattern, ...] = tuple(parse_pattern(p) for p in raw)
        self._ignore_permit_directives = ignore_permit_directives
        self._exclude_godoc_examples = exclude_godoc_examples
        self._analyze_types = analyze_types
        logger.debug(f"Configured {len(self._patterns)} forbidden patterns")

    @property
    def patterns(self) -> Tuple[Pattern, ...]:
        return self._patterns

    @property
    def ignore_permit_directives(self) -> bool:
        return self._ignore_permit_directives

    @property
    def exclude_godoc_examples(self) -> bool:
        return self._exclude_godoc_examples

    @property
    def analyze_types(self) -> bool:
        return self._analyze_types

    def run(self, *files: SourceFile) -> List[Issue]:
        """Lint source files without type information."""
        return self.run_with_config(RunConfig(), *files)

    def run_with_config(self, config: RunConfig, *files: SourceFile) -> List[Issue]:
        """Lint source files. Issues come back in tree-walk order, file by file."""
        if self._analyze_types and config.type_info is None:
            raise RunContextError("analyzing expanded text requires type information")

        issues: List[Issue] = []
        for src in files:
            context = config.type_info.context_for(src) if config.type_info else None
            visitor = _Visitor(self, config, src, context)
            visitor.visit(src.tree)
            issues.extend(visitor.issues)
        return issues


class _Visitor(ast.NodeVisitor):
    """Checks Name and Attribute uses of one module."""

    def __init__(self, linter: Linter, config: RunConfig, src: SourceFile,
                 context: Optional[PackageContext]) -> None:
        self.linter = linter
        self.src = src
        self.context = context
        self.debug_log = config.debug_log
        self.issues: List[Issue] = []

    def visit_Module(self, node: ast.Module) -> None:
        for stmt in node.body:
            # don't descend into example functions if we are ignoring them
            if self.linter.exclude_godoc_examples and is_example(self.src, stmt):
                self._debug("%s: skipping example %s", self._position(stmt), stmt.name)
                continue
            self.visit(stmt)

    def visit_Name(self, node: ast.Name) -> None:
        if isinstance(node.ctx, ast.Load):
            self._check(node)

    def visit_Attribute(self, node: ast.Attribute) -> None:
        if not isinstance(node.ctx, ast.Load):
            self.generic_visit(node)
            return
        # The whole dotted chain is one candidate; only a non-name base is walked.
        self._check(node)
        base = node.value
        while isinstance(base, ast.Attribute):
            base = base.value
        if not isinstance(base, ast.Name):
            self.visit(base)

    def _check(self, node: ast.AST) -> None:
        position = self._position(node)
        # The text as it appears in the source is always used in issues.
        src_text = text_for(self.src, node)
        if src_text is None:
            self._debug("%s: no source text for %s", position, type(node).__name__)
            return

        try:
            resolved = self._resolve(node)
        except UnresolvableNode as e:
            if self.linter.analyze_types:
                self._debug("%s: skipping %r: %s", position, src_text, e)
                return
            resolved = None

        match_text = src_text
        package = None
        if resolved is not None:
            package = resolved.package
            if self.linter.analyze_types:
                match_text = resolved.text
        self._debug("%s: match %r, package %r", position, match_text, package)

        for pattern in self.linter.patterns:
            if not pattern.matches(match_text):
                continue
            if not pattern.matches_package(package):
                continue
            if self._permit(node, src_text):
                self._debug("%s: %r permitted by directive", position, src_text)
                continue
            self.issues.append(Issue(
                identifier=src_text,
                pattern=pattern.pattern,
                position=position,
                custom_msg=pattern.msg,
            ))

    def _resolve(self, node: ast.AST) -> Optional[Resolution]:
        if self.context is None:
            return None
        return self.context.resolve(node)

    def _permit(self, node: ast.AST, src_text: str) -> bool:
        if self.linter.ignore_permit_directives:
            return False
        return has_permit_directive(self.src, node.lineno, src_text)

    def _position(self, node: ast.AST) -> Position:
        return Position(str(self.src.path), getattr(node, "lineno", 0), getattr(node, "col_offset", 0))

    def _debug(self, fmt: str, *args) -> None:
        if self.debug_log is not None:
            self.debug_log(fmt, *args)
