"""
Tests for the flake8 plugin.
"""

import ast
import textwrap
from types import SimpleNamespace

import pytest

from pyforbid.plugin import ForbiddenChecker


def options(patterns="", exclude_examples=False, ignore_permit=False, analyze_types=False):
    return SimpleNamespace(
        forbid_patterns=patterns,
        forbid_exclude_examples=exclude_examples,
        forbid_ignore_permit=ignore_permit,
        forbid_analyze_types=analyze_types,
    )


def check(code, filename="app.py"):
    code = textwrap.dedent(code)
    lines = code.splitlines(keepends=True)
    checker = ForbiddenChecker(ast.parse(code), filename, lines)
    return list(checker.run())


@pytest.fixture(autouse=True)
def reset_linter(monkeypatch):
    monkeypatch.setattr(ForbiddenChecker, "_linter", None)


class FakeOptionManager:

    def __init__(self):
        self.options = {}

    def add_option(self, name, **kwargs):
        self.options[name] = kwargs


class TestOptions:

    def test_registered_options(self):
        manager = FakeOptionManager()
        ForbiddenChecker.add_options(manager)
        assert set(manager.options) == {
            "--forbid-patterns",
            "--forbid-exclude-examples",
            "--forbid-ignore-permit",
            "--forbid-analyze-types",
        }
        assert all(kwargs["parse_from_config"] for kwargs in manager.options.values())
        assert "one line" in manager.options["--forbid-patterns"]["help"]

    def test_patterns_one_per_line(self):
        ForbiddenChecker.parse_options(options("\n  ^eval$\n\n  ^exec$\n"))
        assert [p.pattern for p in ForbiddenChecker._linter.patterns] == ["^eval$", "^exec$"]


class TestRun:

    def test_default_patterns(self):
        results = check("print('x')\n")
        assert len(results) == 1
        line, col, message, checker_type = results[0]
        assert (line, col) == (1, 0)
        assert message.startswith("FBD001 use of `print` forbidden by pattern")
        assert checker_type is ForbiddenChecker

    def test_configured_patterns(self):
        ForbiddenChecker.parse_options(options(r"^eval(# never evaluate input)?$"))
        results = check("""
            print(1)
            eval(data)
        """)
        assert [(r[0], r[2]) for r in results] == [
            (3, 'FBD001 use of `eval` forbidden because "never evaluate input"'),
        ]

    def test_permit_directive(self):
        code = "print(1)  # permit:print\n"
        assert check(code) == []
        ForbiddenChecker.parse_options(options(ignore_permit=True))
        assert len(check(code)) == 1

    def test_exclude_examples(self):
        code = """
            def example_main():
                print(1)
        """
        ForbiddenChecker.parse_options(options(exclude_examples=True))
        assert check(code, "test_main.py") == []
        assert len(check(code, "main.py")) == 1

    def test_flow_mapping_pattern(self):
        ForbiddenChecker.parse_options(options("{pattern: system$, package: ^os$, msg: use subprocess}",
                                               analyze_types=True))
        results = check("""
            import os
            os.system("ls")
        """)
        assert [r[2] for r in results] == ['FBD001 use of `os.system` forbidden because "use subprocess"']

    def test_analyze_types(self):
        ForbiddenChecker.parse_options(options(r"^os\.system$", analyze_types=True))
        results = check("""
            from os import system as run_command
            run_command("ls")
        """)
        assert [r[2] for r in results] == [r"FBD001 use of `run_command` forbidden by pattern `^os\.system$`"]
