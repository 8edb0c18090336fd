"""
Regex Syntax Trees

Builds an immutable syntax tree for a regular expression on top of the
standard library's regex parser and renders every node back to a canonical
string. The tree is used to find documentation comments embedded in
forbidden patterns, for example::

    ^print(# use logging instead)?$

Usage:
    node = parse_regex(r"^os\\.system(# use subprocess.run)?$")
    extract_comment(node)   # -> "use subprocess.run"
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Tuple

# The regex parser is private since Python 3.11; sre_parse is the old name.
try:
    from re import _constants as sre_constants
    from re import _parser as sre_parse
except ImportError:  # pragma: no cover
    import sre_constants  # type: ignore
    import sre_parse  # type: ignore


MAXREPEAT = sre_constants.MAXREPEAT

# Characters escaped when rendering literals. '#' and spaces stay as they are.
_META = frozenset("\\.+*?()|[]{}^$")
_CLASS_META = frozenset("\\]^-[")

_SPECIAL = {
    "\n": r"\n",
    "\t": r"\t",
    "\r": r"\r",
    "\f": r"\f",
    "\v": r"\v",
}

_ANCHORS = {
    "AT_BEGINNING": "^",
    "AT_BEGINNING_LINE": "^",
    "AT_BEGINNING_STRING": r"\A",
    "AT_END": "$",
    "AT_END_LINE": "$",
    "AT_END_STRING": r"\Z",
    "AT_BOUNDARY": r"\b",
    "AT_NON_BOUNDARY": r"\B",
}

_CATEGORIES = {
    "CATEGORY_DIGIT": r"\d",
    "CATEGORY_NOT_DIGIT": r"\D",
    "CATEGORY_SPACE": r"\s",
    "CATEGORY_NOT_SPACE": r"\S",
    "CATEGORY_WORD": r"\w",
    "CATEGORY_NOT_WORD": r"\W",
}

_FLAG_LETTERS = (
    (re.ASCII, "a"),
    (re.IGNORECASE, "i"),
    (re.LOCALE, "L"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
    (re.UNICODE, "u"),
    (re.VERBOSE, "x"),
)


@dataclass(frozen=True)
class RegexNode:
    """One node of a regex syntax tree.

    ``text`` is the canonical rendering of the whole subtree and ``subs``
    holds the immediate sub-expressions (empty for leaves).
    """
    op: str
    text: str
    subs: Tuple["RegexNode", ...] = ()

    def __str__(self) -> str:
        return self.text


def parse_regex(pattern: str, flags: int = 0) -> RegexNode:
    """Parse *pattern* into a RegexNode tree.

    Raises re.error for anything the regex compiler would reject.
    """
    parsed = sre_parse.parse(pattern, flags)
    names = {gid: name for name, gid in parsed.state.groupdict.items()}
    return _build_sequence(parsed, names)


def extract_comment(node: RegexNode) -> str:
    """Return the first comment leaf below *node*, or "".

    A comment is any sub-expression whose rendering starts with '#'. The
    search is depth-first in tree order and stops at the first hit.
    """
    for sub in node.subs:
        text = str(sub)
        if text.startswith("#"):
            return text[1:].strip()
        if sub.subs:
            comment = extract_comment(sub)
            if comment:
                return comment
    return ""


# ============================================================================
# TREE CONSTRUCTION
# ============================================================================

def _build_sequence(items, names: Dict[int, str]) -> RegexNode:
    nodes: List[RegexNode] = []
    run: List[str] = []
    for op, av in items:
        if op.name == "LITERAL":
            run.append(chr(av))
            continue
        if run:
            _append(nodes, _literal(run))
            run = []
        _append(nodes, _build_item(op.name, av, names))
    if run:
        _append(nodes, _literal(run))

    if not nodes:
        return RegexNode("empty", "")
    if len(nodes) == 1:
        return nodes[0]
    text = "".join(_wrap_alternate(n) for n in nodes)
    return RegexNode("concat", text, tuple(nodes))


def _append(nodes: List[RegexNode], node: RegexNode) -> None:
    """Append to a concatenation, flattening nested concats and merging literals."""
    if node.op == "concat":
        for sub in node.subs:
            _append(nodes, sub)
        return
    if node.op == "empty":
        return
    if node.op == "literal" and nodes and nodes[-1].op == "literal":
        nodes[-1] = RegexNode("literal", nodes[-1].text + node.text)
        return
    nodes.append(node)


def _build_item(name: str, av, names: Dict[int, str]) -> RegexNode:
    if name == "NOT_LITERAL":
        return RegexNode("char_class", f"[^{_class_char(chr(av))}]")
    if name == "ANY":
        return RegexNode("any_char", ".")
    if name == "IN":
        return RegexNode("char_class", _render_class(av))
    if name == "AT":
        return RegexNode("anchor", _ANCHORS.get(av.name, ""))

    if name == "BRANCH":
        alternatives = tuple(_build_sequence(p, names) for p in av[1])
        return RegexNode("alternate", "|".join(a.text for a in alternatives), alternatives)

    if name == "SUBPATTERN":
        group, add_flags, del_flags, p = av
        inner = _build_sequence(p, names)
        if group is None:
            if not add_flags and not del_flags:
                return inner
            flags = _flag_letters(add_flags)
            if del_flags:
                flags += "-" + _flag_letters(del_flags)
            return RegexNode("group", f"(?{flags}:{inner.text})", (inner,))
        if group in names:
            return RegexNode("capture", f"(?P<{names[group]}>{inner.text})", (inner,))
        return RegexNode("capture", f"({inner.text})", (inner,))

    if name in ("MAX_REPEAT", "MIN_REPEAT", "POSSESSIVE_REPEAT"):
        lo, hi, p = av
        inner = _build_sequence(p, names)
        suffix = _quantifier(lo, hi)
        if name == "MIN_REPEAT":
            suffix += "?"
        elif name == "POSSESSIVE_REPEAT":
            suffix += "+"
        return RegexNode("repeat", _wrap_operand(inner) + suffix, (inner,))

    if name == "GROUPREF":
        if av in names:
            return RegexNode("backref", f"(?P={names[av]})")
        return RegexNode("backref", f"\\{av}")

    if name == "GROUPREF_EXISTS":
        cond, yes, no = av
        ref = names.get(cond, str(cond))
        yes_node = _build_sequence(yes, names)
        if no is None:
            return RegexNode("conditional", f"(?({ref}){yes_node.text})", (yes_node,))
        no_node = _build_sequence(no, names)
        return RegexNode(
            "conditional",
            f"(?({ref}){yes_node.text}|{no_node.text})",
            (yes_node, no_node),
        )

    if name in ("ASSERT", "ASSERT_NOT"):
        direction, p = av
        inner = _build_sequence(p, names)
        behind = "<" if direction < 0 else ""
        kind = "=" if name == "ASSERT" else "!"
        return RegexNode("lookaround", f"(?{behind}{kind}{inner.text})", (inner,))

    if name == "ATOMIC_GROUP":
        inner = _build_sequence(av, names)
        return RegexNode("atomic", f"(?>{inner.text})", (inner,))

    if name == "FAILURE":
        return RegexNode("fail", "(?!)")

    return RegexNode(name.lower(), "")


# ============================================================================
# RENDERING
# ============================================================================

def _literal(chars: List[str]) -> RegexNode:
    return RegexNode("literal", "".join(_escape_char(c) for c in chars))


def _escape_char(ch: str) -> str:
    if ch in _META:
        return "\\" + ch
    if ch in _SPECIAL:
        return _SPECIAL[ch]
    if not ch.isprintable():
        code = ord(ch)
        if code < 0x100:
            return f"\\x{code:02x}"
        if code < 0x10000:
            return f"\\u{code:04x}"
        return f"\\U{code:08x}"
    return ch


def _class_char(ch: str) -> str:
    if ch in _CLASS_META:
        return "\\" + ch
    if ch in _SPECIAL or not ch.isprintable():
        return _escape_char(ch)
    return ch


def _render_class(items) -> str:
    negate = False
    parts: List[str] = []
    for op, av in items:
        name = op.name
        if name == "NEGATE":
            negate = True
        elif name == "LITERAL":
            parts.append(_class_char(chr(av)))
        elif name == "RANGE":
            parts.append(f"{_class_char(chr(av[0]))}-{_class_char(chr(av[1]))}")
        elif name == "CATEGORY":
            parts.append(_CATEGORIES.get(av.name, ""))
    return "[" + ("^" if negate else "") + "".join(parts) + "]"


def _quantifier(lo: int, hi: int) -> str:
    if hi == MAXREPEAT:
        if lo == 0:
            return "*"
        if lo == 1:
            return "+"
        return f"{{{lo},}}"
    if lo == 0 and hi == 1:
        return "?"
    if lo == hi:
        return f"{{{lo}}}"
    return f"{{{lo},{hi}}}"


def _flag_letters(bits: int) -> str:
    return "".join(letter for flag, letter in _FLAG_LETTERS if bits & flag)


def _wrap_alternate(node: RegexNode) -> str:
    if node.op == "alternate":
        return f"(?:{node.text})"
    return node.text


def _is_single_char(text: str) -> bool:
    return len(text) == 1 or (len(text) == 2 and text[0] == "\\")


def _wrap_operand(node: RegexNode) -> str:
    if node.op in ("concat", "alternate", "empty", "repeat"):
        return f"(?:{node.text})"
    if node.op == "literal" and not _is_single_char(node.text):
        return f"(?:{node.text})"
    return node.text
