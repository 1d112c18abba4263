"""Windows DNS Server provider."""

from .dns_adapter import WindowsDnsAdapter

__all__ = ["WindowsDnsAdapter"]
