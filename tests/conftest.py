"""
Pytest configuration and shared fixtures.
"""

import sys
import textwrap
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pyforbid import config as config_module
from pyforbid.source import source_from_text


# =============================================================================
# SOURCE FIXTURES
# =============================================================================

@pytest.fixture
def make_source():
    """Factory: dedented code -> SourceFile."""
    def _make(code: str, path: str = "app.py", module: str = ""):
        return source_from_text(textwrap.dedent(code), path, module)
    return _make


# =============================================================================
# CONFIGURATION FIXTURES
# =============================================================================

@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """No configuration file or PYFORBID_* variable leaks into the test."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "config_search_paths",
                        lambda: [tmp_path / config_module.CONFIG_FILE_NAME])
    for env_var in config_module.ENV_MAPPINGS:
        monkeypatch.delenv(env_var, raising=False)
    return tmp_path
