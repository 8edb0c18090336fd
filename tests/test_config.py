"""
Tests for YAML configuration and environment overrides.
"""

import logging

import pytest

from pyforbid.config import LinterConfig
from pyforbid.linter import Linter
from pyforbid.patterns import ConfigError


def write_config(root, text):
    path = root / ".pyforbid.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:

    def test_no_file(self, isolated_config):
        config = LinterConfig(environ={})
        assert config.config_path is None
        assert config.patterns == []
        assert not config.exclude_godoc_examples
        assert not config.ignore_permit_directives
        assert not config.analyze_types

    def test_empty_file(self, isolated_config):
        path = write_config(isolated_config, "")
        config = LinterConfig(environ={})
        assert config.config_path == path
        assert config.patterns == []

    def test_to_dict(self, isolated_config):
        assert LinterConfig(environ={}).to_dict() == {
            "forbid": [],
            "exclude_godoc_examples": False,
            "ignore_permit_directives": False,
            "analyze_types": False,
            "config_path": None,
        }


class TestFile:

    def test_found_in_working_directory(self, isolated_config):
        write_config(isolated_config, """
forbid:
  - ^print$
  - {pattern: ^system$, package: ^os$, msg: use subprocess.run}
exclude_godoc_examples: true
ignore_permit_directives: true
analyze_types: true
""")
        config = LinterConfig(environ={})
        assert config.patterns[0] == "^print$"
        assert config.exclude_godoc_examples
        assert config.ignore_permit_directives
        assert config.analyze_types

        linter = Linter(config.patterns)
        structured = linter.patterns[1]
        assert structured.pattern == "^system$"
        assert structured.package == "^os$"
        assert structured.msg == "use subprocess.run"

    def test_explicit_path(self, isolated_config):
        other = isolated_config / "custom.yaml"
        other.write_text("forbid: [^eval$]\n", encoding="utf-8")
        write_config(isolated_config, "forbid: [^print$]\n")
        config = LinterConfig(other, environ={})
        assert config.config_path == other
        assert config.patterns == ["^eval$"]

    def test_missing_explicit_path(self, isolated_config):
        with pytest.raises(ConfigError):
            LinterConfig(isolated_config / "missing.yaml", environ={})

    def test_null_forbid(self, isolated_config):
        write_config(isolated_config, "forbid:\n")
        assert LinterConfig(environ={}).patterns == []

    def test_unknown_key_warns(self, isolated_config, caplog):
        write_config(isolated_config, "forbidden: [^x$]\n")
        with caplog.at_level(logging.WARNING, logger="pyforbid.config"):
            config = LinterConfig(environ={})
        assert config.patterns == []
        assert "ignoring unknown key 'forbidden'" in caplog.text

    @pytest.mark.parametrize("text", [
        "forbid: [unclosed\n",
        "- just\n- a list\n",
        "forbid: ^print$\n",
        "forbid:\n  - 42\n",
        "analyze_types: sometimes\n",
    ])
    def test_invalid(self, isolated_config, text):
        write_config(isolated_config, text)
        with pytest.raises(ConfigError):
            LinterConfig(environ={})


class TestEnvironment:

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("true", True), ("Yes", True), ("on", True),
        ("0", False), ("false", False), ("no", False), ("", False),
    ])
    def test_bool_values(self, isolated_config, value, expected):
        config = LinterConfig(environ={"PYFORBID_ANALYZE_TYPES": value})
        assert config.analyze_types is expected

    def test_overrides_file(self, isolated_config):
        write_config(isolated_config, "exclude_godoc_examples: true\nignore_permit_directives: false\n")
        config = LinterConfig(environ={
            "PYFORBID_EXCLUDE_EXAMPLES": "false",
            "PYFORBID_IGNORE_PERMIT": "true",
        })
        assert not config.exclude_godoc_examples
        assert config.ignore_permit_directives

    def test_reads_process_environment(self, isolated_config, monkeypatch):
        monkeypatch.setenv("PYFORBID_IGNORE_PERMIT", "1")
        assert LinterConfig().ignore_permit_directives

    def test_invalid_value(self, isolated_config):
        with pytest.raises(ConfigError):
            LinterConfig(environ={"PYFORBID_EXCLUDE_EXAMPLES": "maybe"})
