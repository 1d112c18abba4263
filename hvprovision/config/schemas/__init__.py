"""Configuration schemas package."""

from .app_schema import AppConfig
from .logging_schema import LoggingConfig
from .provisioning_schema import ProvisioningConfig
from .remote_schema import DhcpConfig, DnsConfig, HyperVConfig, WinRMConfig
from .server_schema import ServerConfig

__all__ = [
    "AppConfig",
    "LoggingConfig",
    "ProvisioningConfig",
    "WinRMConfig",
    "HyperVConfig",
    "DhcpConfig",
    "DnsConfig",
    "ServerConfig",
]
