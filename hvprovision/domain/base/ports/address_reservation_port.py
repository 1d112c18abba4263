"""Domain port for the address reservation (DHCP) service."""

from abc import ABC, abstractmethod
from typing import List, Optional

from hvprovision.domain.core.common_types import HardwareAddress, IPAddress
from hvprovision.domain.machine.value_objects import DhcpFilterHandle, DhcpReservationHandle


class AddressReservationPort(ABC):
    """Allocates addresses and binds them to hardware addresses."""

    @abstractmethod
    def get_free_address(self, scope_id: str) -> Optional[IPAddress]:
        """Next free address in the scope, None when the scope is exhausted."""

    @abstractmethod
    def create_reservation(
        self, scope_id: str, address: IPAddress, hardware_address: HardwareAddress, name: str
    ) -> DhcpReservationHandle:
        """Reserve ``address`` for ``hardware_address`` under ``name``."""

    @abstractmethod
    def remove_reservation(self, scope_id: str, hardware_address: HardwareAddress) -> None:
        """Remove the reservation held by ``hardware_address`` in ``scope_id``."""

    @abstractmethod
    def allow_hardware_address(self, hardware_address: HardwareAddress, label: str) -> DhcpFilterHandle:
        """Add ``hardware_address`` to the allow list."""

    @abstractmethod
    def remove_allow(self, hardware_address: HardwareAddress) -> None:
        """Remove ``hardware_address`` from the allow list."""

    @abstractmethod
    def list_scopes(self) -> List[str]:
        """Ids of every scope configured on the server."""
