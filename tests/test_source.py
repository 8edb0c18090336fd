"""
Tests for source files, permit directives and example detection.
"""

import ast
from pathlib import Path

import pytest

from pyforbid.source import (
    collect_comments,
    get_line,
    has_permit_directive,
    is_example,
    iter_python_files,
    load_source,
    source_from_text,
    source_from_tree,
    text_for,
)


class TestSourceFile:

    def test_from_text(self):
        src = source_from_text("x = 1  # one\ny = 2\n", "mod.py")
        assert src.path == Path("mod.py")
        assert src.lines == ["x = 1  # one", "y = 2"]
        assert src.comments == {1: "# one"}
        assert isinstance(src.tree, ast.Module)

    def test_syntax_error(self):
        with pytest.raises(SyntaxError):
            source_from_text("def (:\n")

    def test_load_source(self, tmp_path):
        path = tmp_path / "mod.py"
        path.write_text("import os\n", encoding="utf-8")
        src = load_source(path, module="mod")
        assert src.path == path
        assert src.module == "mod"

    @pytest.mark.parametrize("name,expected", [
        ("test_app.py", True),
        ("app_test.py", True),
        ("app.py", False),
        ("testing.py", False),
        ("conftest.py", False),
    ])
    def test_is_test_file(self, name, expected):
        assert source_from_text("", name).is_test_file is expected

    def test_get_line(self):
        assert get_line(["a", "b"], 2) == "b"
        assert get_line(["a", "b"], 0) == ""
        assert get_line(["a", "b"], 3) == ""


class TestText:

    def test_literal_text(self):
        src = source_from_text("os . system ('ls')\n")
        node = src.tree.body[0].value.func
        assert text_for(src, node) == "os . system"

    def test_unparsed_text(self):
        src = source_from_tree(ast.parse("os . system ('ls')\n"))
        node = src.tree.body[0].value.func
        assert text_for(src, node) == "os.system"

    def test_comments_skip_strings(self):
        assert collect_comments('s = "# not a comment"\n# real\n') == {2: "# real"}


class TestPermitDirective:

    @pytest.mark.parametrize("comment,identifier,expected", [
        ("# permit:print", "print", True),
        ("#permit:print", "print", True),
        ("# permit:print -- debugging only", "print", True),
        ("#  permit:print", "print", False),
        ("# permit:printer", "print", False),
        ("# permit:pprint", "print", False),
        ("# noqa", "print", False),
        ("# permit:os.system", "os.system", True),
        ("# permit:osXsystem", "os.system", False),
    ])
    def test_directive(self, comment, identifier, expected):
        src = source_from_text(f"{identifier}()  {comment}\n")
        assert has_permit_directive(src, 1, identifier) is expected

    def test_other_line(self):
        src = source_from_text("# permit:print\nprint()\n")
        assert not has_permit_directive(src, 2, "print")


class TestExamples:

    def first(self, code: str, path: str = "test_app.py"):
        src = source_from_text(code, path)
        return src, src.tree.body[0]

    def test_example(self):
        assert is_example(*self.first("def example_parse():\n    pass\n"))

    def test_capitalized_example(self):
        assert is_example(*self.first("def ExampleParse():\n    pass\n"))

    def test_async_example(self):
        assert is_example(*self.first("async def example_fetch():\n    pass\n"))

    def test_with_parameters(self):
        assert not is_example(*self.first("def example_parse(x):\n    pass\n"))
        assert not is_example(*self.first("def example_parse(*, x=1):\n    pass\n"))

    def test_not_an_example_name(self):
        assert not is_example(*self.first("def test_parse():\n    pass\n"))

    def test_not_in_test_module(self):
        assert not is_example(*self.first("def example_parse():\n    pass\n", "app.py"))

    def test_class(self):
        assert not is_example(*self.first("class ExampleThing:\n    pass\n"))


class TestDiscovery:

    def test_skips_excluded_dirs(self, tmp_path):
        (tmp_path / "pkg").mkdir()
        (tmp_path / "pkg" / "a.py").write_text("")
        (tmp_path / "pkg" / "notes.txt").write_text("")
        (tmp_path / "__pycache__").mkdir()
        (tmp_path / "__pycache__" / "b.py").write_text("")
        (tmp_path / "venv").mkdir()
        (tmp_path / "venv" / "c.py").write_text("")
        (tmp_path / "d.py").write_text("")

        found = sorted(p.relative_to(tmp_path).as_posix() for p in iter_python_files([tmp_path]))
        assert found == ["d.py", "pkg/a.py"]

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "one.py"
        path.write_text("")
        assert list(iter_python_files([path])) == [path]
