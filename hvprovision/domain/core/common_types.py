# hvprovision/domain/core/common_types.py
from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass
from typing import Optional

from hvprovision.domain.core.exceptions import ValidationError

_HEX_DIGITS = re.compile(r"^[0-9A-F]{12}$")


@dataclass(frozen=True)
class IPAddress:
    """Represents an IPv4 address with validation."""
    value: str

    def __post_init__(self):
        self._validate()

    def _validate(self) -> None:
        try:
            ipaddress.IPv4Address(self.value)
        except ValueError as e:
            raise ValidationError(f"Invalid IP address: {self.value}") from e

    @property
    def reverse_pointer(self) -> str:
        """Full in-addr.arpa name, e.g. ``5.0.0.10.in-addr.arpa``."""
        return ipaddress.IPv4Address(self.value).reverse_pointer

    @property
    def reverse_zone(self) -> str:
        """Reverse lookup zone assuming the /24 delegation used by DHCP scopes."""
        return self.reverse_pointer.split('.', 1)[1]

    def ptr_name(self, zone: str) -> str:
        """Name of this address's PTR record relative to ``zone``."""
        pointer = self.reverse_pointer
        suffix = "." + zone.strip('.').lower()
        if not pointer.endswith(suffix):
            raise ValidationError(f"{self.value} does not belong to reverse zone {zone}")
        return pointer[:-len(suffix)]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HardwareAddress:
    """Link-layer (MAC) address, stored as 12 upper-case hex digits."""
    value: str

    def __post_init__(self):
        normalised = re.sub(r"[-:.\s]", "", self.value).upper()
        if not _HEX_DIGITS.match(normalised):
            raise ValidationError(f"Invalid hardware address: {self.value}")
        object.__setattr__(self, "value", normalised)

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional[HardwareAddress]:
        """Parse a provider value; empty and all-zero addresses mean 'not assigned yet'."""
        if not raw or not raw.strip():
            return None
        address = cls(raw.strip())
        return None if address.is_zero else address

    @property
    def is_zero(self) -> bool:
        return self.value == "0" * 12

    def as_hyperv(self) -> str:
        """Format accepted by Set-VMNetworkAdapter -StaticMacAddress."""
        return self.value

    def as_client_id(self) -> str:
        """Dash separated format used by the DHCP server for client ids and filters."""
        return "-".join(self.value[i:i + 2] for i in range(0, 12, 2))

    def __str__(self) -> str:
        return self.as_client_id()
