"""Configuration loading from files and the environment."""
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from hvprovision._package import ENV_PREFIX, PACKAGE_NAME_SHORT
from hvprovision.config.utils.env_expansion import expand_env_vars
from hvprovision.domain.core.exceptions import ConfigurationError
from hvprovision.infrastructure.logging.logger import get_logger

CONFIG_PATH_VARIABLE = f"{ENV_PREFIX}CONFIG"
NESTING_SEPARATOR = "__"

logger = get_logger(__name__)


class ConfigurationLoader:
    """
    Reads raw configuration data.

    Sources, lowest precedence first:
    1. The file named explicitly, or the first default location that exists
    2. ``HVPROV_<SECTION>__<KEY>`` environment variables
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = os.environ if environ is None else environ

    def default_locations(self) -> List[Path]:
        locations = []
        if CONFIG_PATH_VARIABLE in self._environ:
            locations.append(Path(self._environ[CONFIG_PATH_VARIABLE]))
        locations.extend([
            Path.cwd() / f"{PACKAGE_NAME_SHORT}.yaml",
            Path.cwd() / "config" / f"{PACKAGE_NAME_SHORT}.yaml",
            Path.home() / ".config" / PACKAGE_NAME_SHORT / "config.yaml",
        ])
        return locations

    def load_configuration(self) -> Dict[str, Any]:
        """Load the first default location that exists, or nothing."""
        for path in self.default_locations():
            if path.is_file():
                return self.load_from_file(str(path))
        logger.debug("No configuration file found", searched=[str(p) for p in self.default_locations()])
        return {}

    def load_from_file(self, path: str) -> Dict[str, Any]:
        """
        Load a YAML or JSON file and expand environment references.

        Raises:
            ConfigurationError: If the file is missing, unparseable or not a mapping
        """
        if not os.path.isfile(path):
            raise ConfigurationError(f"Configuration file not found: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                if path.endswith(".json"):
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot parse configuration file {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping")
        logger.debug("Configuration file loaded", path=path)
        return expand_env_vars(data, self._environ)

    def apply_environment_overrides(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Overlay ``HVPROV_DNS__FORWARD_ZONE=lab.local`` style variables onto ``data``."""
        result = dict(data)
        for key, value in self._environ.items():
            if not key.startswith(ENV_PREFIX) or key == CONFIG_PATH_VARIABLE:
                continue
            path = [part.lower() for part in key[len(ENV_PREFIX):].split(NESTING_SEPARATOR) if part]
            if not path:
                continue
            _set_nested(result, path, value)
        return result


def _set_nested(data: Dict[str, Any], path: List[str], value: Any) -> None:
    node = data
    for part in path[:-1]:
        child = node.get(part)
        child = dict(child) if isinstance(child, dict) else {}
        node[part] = child
        node = child
    node[path[-1]] = value
