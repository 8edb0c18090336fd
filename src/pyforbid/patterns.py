"""
Forbidden Patterns

A pattern is given either as a plain regular expression::

    ^os\\.system$

or, when the text starts with ``{`` or spans several lines, as a JSON or
YAML description with the optional fields ``pattern``, ``package`` and
``msg``::

    {"pattern": "^system$", "package": "^os$", "msg": "use subprocess.run"}

    pattern: ^system$
    package: ^os$
    msg: use subprocess.run

A comment embedded in the expression, e.g. ``^print(# use logging)?$``,
becomes the pattern's message.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

from .regex_syntax import extract_comment, parse_regex

logger = logging.getLogger(__name__)


PATTERN_FIELDS = ("pattern", "package", "msg")


class ConfigError(Exception):
    """Pattern or linter configuration that cannot be decoded."""


class PatternSyntaxError(Exception):
    """Regular expression in a pattern that does not compile or parse."""
    def __init__(self, message: str, field: str = "pattern", value: str = ""):
        self.field = field
        self.value = value
        super().__init__(message)


@dataclass(frozen=True)
class Pattern:
    """A validated rule for code that is not supposed to be used.

    Only obtained through :meth:`compile`, :func:`parse_pattern` or
    :func:`pattern_from_config`, so ``expression`` always compiled.
    """
    # Matched against the literal source text or the expanded text,
    # depending on the mode in which the linter runs.
    pattern: str
    expression: re.Pattern
    # Matched against the import path of the item an expression resolves to.
    package: str = ""
    package_expression: Optional[re.Pattern] = None
    # Printed in addition to the normal message when a match is found.
    msg: str = ""

    @classmethod
    def compile(cls, pattern: str = "", package: str = "", msg: str = "") -> "Pattern":
        """Validate the raw fields and return a usable Pattern.

        An empty pattern matches every identifier, which together with a
        package forbids everything taken from that package.

        Raises PatternSyntaxError when either expression is invalid.
        """
        try:
            expression = re.compile(pattern)
        except re.error as e:
            raise PatternSyntaxError(
                f"unable to compile source code pattern `{pattern}`: {e}", "pattern", pattern
            ) from e
        try:
            tree = parse_regex(pattern)
        except re.error as e:
            raise PatternSyntaxError(
                f"unable to parse source code pattern `{pattern}`: {e}", "pattern", pattern
            ) from e

        comment = extract_comment(tree)
        if comment:
            if msg and msg != comment:
                logger.debug(f"Embedded comment in `{pattern}` replaces message {msg!r}")
            msg = comment

        package_expression = None
        if package:
            try:
                package_expression = re.compile(package)
            except re.error as e:
                raise PatternSyntaxError(
                    f"unable to compile package pattern `{package}`: {e}", "package", package
                ) from e

        return cls(
            pattern=pattern,
            expression=expression,
            package=package,
            package_expression=package_expression,
            msg=msg,
        )

    def matches(self, text: str) -> bool:
        return self.expression.search(text) is not None

    def matches_package(self, package: Optional[str]) -> bool:
        """True when there is no package constraint or *package* satisfies it."""
        if self.package_expression is None:
            return True
        if package is None:
            return False
        return self.package_expression.search(package) is not None


def default_patterns() -> List[str]:
    """Patterns used when none are configured."""
    return [r"^(print|pprint\.pprint)$"]


def parse_pattern(text: str) -> Pattern:
    """Parse a configured pattern string.

    The text is a plain regular expression unless it starts with '{' or
    contains a line break, in which case it is decoded as JSON or YAML.
    """
    if text.strip().startswith("{") or "\n" in text:
        # PyYAML reads JSON objects as flow mappings, so one loader covers both.
        try:
            doc = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(
                "pattern is neither a regular expression string nor a Pattern struct "
                f"(parsing as JSON or YAML failed: {_one_line(e)})"
            ) from e
        return pattern_from_config(doc)
    return Pattern.compile(text)


def pattern_from_config(value: Any) -> Pattern:
    """Build a Pattern from a decoded configuration value.

    Accepts either a string (the traditional regular expression syntax) or
    a mapping with the pattern fields.
    """
    as_struct = _decode_struct(value)
    if as_struct.fields is not None:
        return Pattern.compile(**as_struct.fields)

    as_string = _decode_string(value)
    if as_string.fields is not None:
        return Pattern.compile(**as_string.fields)

    raise ConfigError(
        f"pattern is neither a regular expression string ({as_string.error}) "
        f"nor a Pattern struct ({as_struct.error})"
    )


# ============================================================================
# DECODING
# ============================================================================

@dataclass(frozen=True)
class _Decoded:
    """Outcome of one decoding attempt: either fields or an error."""
    fields: Optional[Dict[str, str]] = None
    error: str = ""


def _decode_struct(value: Any) -> _Decoded:
    if not isinstance(value, dict):
        return _Decoded(error=f"cannot decode {_kind(value)} into a Pattern struct")

    fields: Dict[str, str] = {}
    for key, item in value.items():
        if key not in PATTERN_FIELDS:
            return _Decoded(error=f"field {key!r} not found in Pattern struct")
        if item is None:
            item = ""
        elif isinstance(item, bool) or not isinstance(item, (str, int, float)):
            return _Decoded(error=f"cannot decode {_kind(item)} into Pattern field {key!r}")
        fields[key] = str(item)
    return _Decoded(fields=fields)


def _decode_string(value: Any) -> _Decoded:
    if not isinstance(value, str):
        return _Decoded(error=f"cannot decode {_kind(value)} into a string")
    return _Decoded(fields={"pattern": value})


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, dict):
        return "mapping"
    if isinstance(value, (list, tuple)):
        return "sequence"
    return type(value).__name__


def _one_line(error: Exception) -> str:
    return " ".join(str(error).split())
