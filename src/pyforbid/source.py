"""
Source Files

Parsed Python modules together with what the linter needs to know about
them besides the syntax tree: the text for literal matches, comments for
permit directives and whether the module is a test module.
"""

from __future__ import annotations

import ast
import io
import logging
import re
import tokenize
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)


# Skip patterns for directory exclusion
SKIP_DIRS = {
    "__pycache__", ".git", ".venv", "venv", "node_modules",
    ".mypy_cache", ".pytest_cache", ".tox", "build", "dist",
}


@dataclass(frozen=True)
class SourceFile:
    path: Path
    text: str
    lines: List[str]
    tree: ast.Module
    comments: Dict[int, str] = field(default_factory=dict)  # line -> comment text
    module: str = ""  # dotted module name, if known

    @property
    def is_test_file(self) -> bool:
        name = self.path.name
        return name.endswith(".py") and (name.startswith("test_") or name.endswith("_test.py"))


def load_source(path: Path, module: str = "") -> SourceFile:
    """Load and parse a single source file. Raises SyntaxError."""
    text = path.read_text(encoding="utf-8", errors="replace")
    return source_from_text(text, path, module)


def source_from_text(text: str, path: Union[Path, str] = "<string>", module: str = "") -> SourceFile:
    """Parse *text* into a SourceFile. Raises SyntaxError."""
    tree = ast.parse(text, filename=str(path))
    return source_from_tree(tree, text, path, module)


def source_from_tree(tree: ast.Module, text: str = "",
                     path: Union[Path, str] = "<string>", module: str = "") -> SourceFile:
    """Wrap an already parsed tree. Without *text*, literal matches use ast.unparse."""
    return SourceFile(
        path=Path(path),
        text=text,
        lines=text.splitlines(),
        tree=tree,
        comments=collect_comments(text),
        module=module,
    )


def collect_comments(text: str) -> Dict[int, str]:
    """Map line numbers to the comment on that line."""
    comments: Dict[int, str] = {}
    if not text:
        return comments
    try:
        for tok in tokenize.generate_tokens(io.StringIO(text).readline):
            if tok.type == tokenize.COMMENT:
                comments[tok.start[0]] = tok.string
    except (tokenize.TokenError, SyntaxError) as e:
        logger.warning(f"Could not read comments: {e}")
    return comments


def get_line(lines: List[str], line_no: int) -> str:
    """Get line by 1-based line number."""
    if line_no <= 0 or line_no > len(lines):
        return ""
    return lines[line_no-1]


def text_for(src: SourceFile, node: ast.AST) -> Optional[str]:
    """The literal text of *node*, or None if it cannot be recovered."""
    if src.text:
        return ast.get_source_segment(src.text, node)
    try:
        return ast.unparse(node)
    except (AttributeError, ValueError, TypeError) as e:
        logger.debug(f"Could not unparse {type(node).__name__}: {e}")
        return None


def has_permit_directive(src: SourceFile, line_no: int, identifier: str) -> bool:
    """True if the comment on *line_no* permits *identifier*.

    Accepted forms: ``# permit:name`` and ``#permit:name``, optionally
    followed by an explanation.
    """
    comment = src.comments.get(line_no)
    if not comment:
        return False
    directive = re.compile(rf"^#\s?permit:{re.escape(identifier)}\b")
    return directive.match(comment) is not None


def is_example(src: SourceFile, node: ast.AST) -> bool:
    """True for an example function: a parameterless ``example*`` function in a test module.

    Only meaningful for top-level statements; callers check nesting.
    """
    if not src.is_test_file:
        return False
    if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
        return False
    if not node.name.lower().startswith("example"):
        return False
    args = node.args
    return not (args.posonlyargs or args.args or args.vararg or args.kwonlyargs or args.kwarg)


def iter_python_files(paths: Iterable[Path]) -> Iterator[Path]:
    """Yield Python files below *paths*, skipping excluded dirs."""
    for path in paths:
        if path.is_dir():
            yield from _walk_files(path)
        elif path.suffix == ".py":
            yield path


def _walk_files(root: Path) -> Iterator[Path]:
    """Walk directory tree, skipping excluded dirs."""
    for item in sorted(root.iterdir()):
        if item.is_dir():
            if item.name in SKIP_DIRS:
                continue
            yield from _walk_files(item)
        elif item.is_file() and item.suffix == ".py":
            yield item
