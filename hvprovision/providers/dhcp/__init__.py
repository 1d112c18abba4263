"""Windows DHCP Server provider."""

from .dhcp_adapter import WindowsDhcpAdapter

__all__ = ["WindowsDhcpAdapter"]
