"""Configuration package: schemas, loading and management."""

from .loader import ConfigurationLoader
from .manager import ConfigurationManager
from .schemas import (
    AppConfig,
    DhcpConfig,
    DnsConfig,
    HyperVConfig,
    LoggingConfig,
    ProvisioningConfig,
    ServerConfig,
    WinRMConfig,
)

__all__ = [
    "ConfigurationLoader",
    "ConfigurationManager",
    "AppConfig",
    "WinRMConfig",
    "HyperVConfig",
    "DhcpConfig",
    "DnsConfig",
    "ProvisioningConfig",
    "ServerConfig",
    "LoggingConfig",
]
