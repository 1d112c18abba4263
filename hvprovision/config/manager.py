"""Configuration management for the application."""
import threading
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from hvprovision.config.loader import ConfigurationLoader
from hvprovision.config.schemas import (
    AppConfig,
    DhcpConfig,
    DnsConfig,
    HyperVConfig,
    LoggingConfig,
    ProvisioningConfig,
    ServerConfig,
    WinRMConfig,
)
from hvprovision.infrastructure.resilience.config import RetryConfig

T = TypeVar("T")

_SECTIONS: Dict[type, str] = {
    WinRMConfig: "winrm",
    HyperVConfig: "hyperv",
    DhcpConfig: "dhcp",
    DnsConfig: "dns",
    ProvisioningConfig: "provisioning",
    RetryConfig: "retry",
    LoggingConfig: "logging",
    ServerConfig: "server",
}


class ConfigurationManager:
    """
    Single source of configuration for one process.

    Loading is lazy: nothing is read until the first access, and
    ``reload`` forces the next access to read the sources again.
    """

    def __init__(
        self,
        config_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        self._config_file = config_file
        self._loader = ConfigurationLoader(environ)
        self._overrides = overrides or {}
        self._lock = threading.RLock()
        self._app_config: Optional[AppConfig] = None

    @property
    def app_config(self) -> AppConfig:
        """Lazy load application configuration."""
        if self._app_config is None:
            with self._lock:
                if self._app_config is None:
                    self._app_config = self._load_app_config()
        return self._app_config

    def _load_app_config(self) -> AppConfig:
        if self._config_file:
            config_data = self._loader.load_from_file(self._config_file)
        else:
            config_data = self._loader.load_configuration()
        config_data = self._loader.apply_environment_overrides(config_data)
        for section, values in self._overrides.items():
            merged = dict(config_data.get(section) or {})
            merged.update(values)
            config_data[section] = merged
        return AppConfig.from_dict(config_data)

    def get_typed(self, config_type: Type[T]) -> T:
        """Return the section of the application configuration with the given type."""
        if config_type is AppConfig:
            return self.app_config
        if config_type not in _SECTIONS:
            raise ValueError(f"Unknown configuration type: {config_type.__name__}")
        return getattr(self.app_config, _SECTIONS[config_type])

    def reload(self) -> None:
        with self._lock:
            self._app_config = None
