"""
Import Resolution

Resolves names used in a module to the dotted path they were imported from.
This is the type information of the linter: with it, ``np.linalg.norm``
after ``import numpy as np`` is matched as ``numpy.linalg.norm`` and
belongs to the package ``numpy``.

Resolution is static and module-wide. Names rebound after an import are
still resolved through the import.
"""

from __future__ import annotations

import ast
import builtins
import importlib.util
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from .source import SourceFile

logger = logging.getLogger(__name__)

BUILTIN_NAMES = frozenset(dir(builtins))


class UnresolvableNode(LookupError):
    """A node refers to an import that cannot be resolved."""


@dataclass(frozen=True)
class Resolution:
    text: str                 # expanded dotted name
    package: Optional[str]    # import path the item comes from


class PackageContext:
    """
    Import bindings of one module.

    Usage:
        ctx = PackageContext.from_tree(tree, "myapp.views")
        ctx.resolve(node)   # Resolution or None
    """

    def __init__(self, bindings: Dict[str, Optional[str]], modules: FrozenSet[str],
                 defined: FrozenSet[str] = frozenset(), module_name: str = ""):
        """
        Args:
            bindings: local name -> fully qualified name (None if unresolvable)
            modules: dotted paths known to be modules
            defined: names bound in the module other than by imports
            module_name: dotted name of the module itself
        """
        self.bindings = dict(bindings)
        self.modules = modules
        self.defined = defined
        self.module_name = module_name

    @classmethod
    def from_tree(cls, tree: ast.AST, module_name: str = "", is_package: bool = False) -> "PackageContext":
        bindings: Dict[str, Optional[str]] = {}
        modules: Set[str] = set()
        defined: Set[str] = set()
        package = module_name if is_package else module_name.rpartition(".")[0]

        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    modules.update(_prefixes(alias.name))
                    if alias.asname:
                        bindings[alias.asname] = alias.name
                    else:
                        top = alias.name.split(".")[0]
                        bindings[top] = top
            elif isinstance(node, ast.ImportFrom):
                base = _absolute_module(node.module, node.level, package)
                if base is not None:
                    modules.update(_prefixes(base))
                for alias in node.names:
                    if alias.name == "*":
                        continue
                    local = alias.asname or alias.name
                    bindings[local] = f"{base}.{alias.name}" if base is not None else None
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
                defined.add(node.name)
            elif isinstance(node, ast.Name) and not isinstance(node.ctx, ast.Load):
                defined.add(node.id)
            elif isinstance(node, ast.arg):
                defined.add(node.arg)

        return cls(bindings, frozenset(modules), frozenset(defined), module_name)

    def resolve(self, node: ast.AST) -> Optional[Resolution]:
        """Resolve a Name or Attribute chain.

        Returns None when the node has no resolvable target and raises
        UnresolvableNode when it refers to an import that could not be
        resolved.
        """
        parts: List[str] = []
        base = node
        while isinstance(base, ast.Attribute):
            parts.append(base.attr)
            base = base.value
        if not isinstance(base, ast.Name):
            return None
        parts.reverse()
        name = base.id

        if name in self.bindings:
            qualified = self.bindings[name]
            if qualified is None:
                raise UnresolvableNode(
                    f"relative import of {name!r} cannot be resolved "
                    f"from {self.module_name or 'an unnamed module'}"
                )
            text = ".".join([qualified] + parts)
            return Resolution(text, self.package_of(text))

        if name in BUILTIN_NAMES and name not in self.defined:
            return Resolution(".".join([name] + parts), "builtins")
        return None

    def package_of(self, dotted: str) -> Optional[str]:
        """Longest known module that is *dotted* itself or one of its prefixes."""
        candidates = _prefixes(dotted)
        for candidate in reversed(candidates):
            if candidate in self.modules:
                return candidate
        return None


class TypeInfo:
    """
    Hands out a PackageContext per source file.

    The module name comes from SourceFile.module or, for files on disk, from
    the enclosing ``__init__.py`` packages. Contexts are cached per path, so
    one TypeInfo belongs to one run.
    """

    def __init__(self) -> None:
        self._cache: Dict[str, PackageContext] = {}

    def context_for(self, src: SourceFile) -> PackageContext:
        key = str(src.path)
        ctx = self._cache.get(key)
        if ctx is None:
            module_name, is_package = self.module_name(src)
            ctx = PackageContext.from_tree(src.tree, module_name, is_package)
            logger.debug(f"{key}: module {module_name!r}, {len(ctx.bindings)} import bindings")
            self._cache[key] = ctx
        return ctx

    @staticmethod
    def module_name(src: SourceFile) -> Tuple[str, bool]:
        """Return (dotted module name, is package) for a source file."""
        path: Path = src.path
        is_package = path.name == "__init__.py"
        if src.module:
            return src.module, is_package
        if not path.is_file():
            return "", is_package

        parts: List[str] = [] if is_package else [path.stem]
        parent = path.resolve().parent
        while (parent / "__init__.py").is_file():
            parts.insert(0, parent.name)
            parent = parent.parent
        return ".".join(parts), is_package


def _prefixes(dotted: str) -> List[str]:
    """'a.b.c' -> ['a', 'a.b', 'a.b.c']"""
    pieces = dotted.split(".")
    return [".".join(pieces[:i]) for i in range(1, len(pieces) + 1)]


def _absolute_module(module: Optional[str], level: int, package: str) -> Optional[str]:
    if level == 0:
        return module
    try:
        return importlib.util.resolve_name("." * level + (module or ""), package)
    except (ImportError, ValueError):
        return None
