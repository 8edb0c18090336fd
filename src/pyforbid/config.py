"""
Linter Configuration

Loads configuration from a YAML file or environment variables.

Example .pyforbid.yaml:

    forbid:
      - ^print$
      - {pattern: ^os\\.system$, msg: use subprocess.run}
      - pattern: ^subprocess\\.
        package: ^subprocess$
    exclude_godoc_examples: false
    ignore_permit_directives: false
    analyze_types: false
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

import yaml

from .patterns import ConfigError

logger = logging.getLogger(__name__)


CONFIG_FILE_NAME = ".pyforbid.yaml"


def config_search_paths() -> List[Path]:
    """Default configuration file locations (checked in order)."""
    return [
        Path.cwd() / CONFIG_FILE_NAME,
        Path.home() / ".pyforbid" / "config.yaml",
    ]


DEFAULT_CONFIG: Dict[str, Any] = {
    "forbid": [],                       # empty: built-in default patterns
    "exclude_godoc_examples": False,    # example functions in test modules are checked
    "ignore_permit_directives": False,  # "# permit:" comments are honoured
    "analyze_types": False,             # match literal source text
}

ENV_MAPPINGS = {
    "PYFORBID_EXCLUDE_EXAMPLES": "exclude_godoc_examples",
    "PYFORBID_IGNORE_PERMIT": "ignore_permit_directives",
    "PYFORBID_ANALYZE_TYPES": "analyze_types",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class LinterConfig:
    """Configuration for the forbidden identifier linter."""

    def __init__(self, config_path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None):
        self._config: Dict[str, Any] = dict(DEFAULT_CONFIG)
        self._config_path: Optional[Path] = None

        # Load from file if found
        self._load_config(config_path)

        # Override with environment variables
        self._apply_env_overrides(os.environ if environ is None else environ)

    def _load_config(self, explicit_path: Optional[Path] = None) -> None:
        """Load configuration from YAML file."""
        if explicit_path is not None and not explicit_path.is_file():
            raise ConfigError(f"configuration file {explicit_path} not found")
        search_paths = [explicit_path] if explicit_path else config_search_paths()

        for config_path in search_paths:
            if config_path.is_file():
                try:
                    with open(config_path, 'r', encoding='utf-8') as f:
                        user_config = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ConfigError(f"invalid YAML in {config_path}: {e}") from e
                if not isinstance(user_config, dict):
                    raise ConfigError(f"{config_path}: expected a mapping at the top level")
                self._apply(user_config, str(config_path))
                self._config_path = config_path
                logger.debug(f"Loaded configuration from {config_path}")
                return

    def _apply(self, user_config: Dict[str, Any], origin: str) -> None:
        for key, value in user_config.items():
            if key not in DEFAULT_CONFIG:
                logger.warning(f"{origin}: ignoring unknown key {key!r}")
                continue
            if key == "forbid":
                self._config[key] = _pattern_strings(value, origin)
            elif isinstance(value, bool):
                self._config[key] = value
            else:
                raise ConfigError(f"{origin}: {key} must be true or false, got {value!r}")

    def _apply_env_overrides(self, environ: Dict[str, str]) -> None:
        """Apply environment variable overrides."""
        for env_var, config_key in ENV_MAPPINGS.items():
            if env_var in environ:
                self._config[config_key] = _parse_bool(environ[env_var], env_var)

    @property
    def config_path(self) -> Optional[Path]:
        """Path to loaded config file, or None if using defaults."""
        return self._config_path

    @property
    def patterns(self) -> List[str]:
        """Configured pattern strings; empty means the default set."""
        return list(self._config["forbid"])

    @property
    def exclude_godoc_examples(self) -> bool:
        return self._config["exclude_godoc_examples"]

    @property
    def ignore_permit_directives(self) -> bool:
        return self._config["ignore_permit_directives"]

    @property
    def analyze_types(self) -> bool:
        return self._config["analyze_types"]

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return {
            "forbid": self.patterns,
            "exclude_godoc_examples": self.exclude_godoc_examples,
            "ignore_permit_directives": self.ignore_permit_directives,
            "analyze_types": self.analyze_types,
            "config_path": str(self._config_path) if self._config_path else None,
        }


def _pattern_strings(value: Any, origin: str) -> List[str]:
    """Turn the forbid list into pattern strings.

    Mappings become single-line JSON so they take the same parsing path as
    structured patterns given on the command line.
    """
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{origin}: forbid must be a list of patterns")

    patterns: List[str] = []
    for i, entry in enumerate(value):
        if isinstance(entry, str):
            patterns.append(entry)
        elif isinstance(entry, dict):
            patterns.append(json.dumps(entry, ensure_ascii=False, default=str))
        else:
            raise ConfigError(f"{origin}: forbid[{i}] must be a string or a mapping, got {entry!r}")
    return patterns


def _parse_bool(value: str, name: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")
