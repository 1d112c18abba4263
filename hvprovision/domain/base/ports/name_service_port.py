"""Domain port for the name (DNS) service."""

from abc import ABC, abstractmethod
from typing import List

from hvprovision.domain.core.common_types import IPAddress
from hvprovision.domain.machine.value_objects import DnsRecordHandle


class NameServicePort(ABC):
    """Maintains forward and reverse records."""

    @abstractmethod
    def create_a_record(self, zone: str, name: str, address: IPAddress) -> DnsRecordHandle:
        """Create ``name`` -> ``address`` in ``zone``."""

    @abstractmethod
    def create_ptr_record(self, reverse_zone: str, address: IPAddress, fqdn: str) -> DnsRecordHandle:
        """Create the reverse mapping of ``address`` to ``fqdn``."""

    @abstractmethod
    def remove_a_record(self, zone: str, name: str) -> None:
        """Remove every A record for ``name`` in ``zone``."""

    @abstractmethod
    def find_a_records(self, zone: str, name: str) -> List[DnsRecordHandle]:
        """A records for ``name``; empty when there are none."""

    @abstractmethod
    def find_ptr_records_by_target(self, reverse_zone: str, fqdn: str) -> List[DnsRecordHandle]:
        """PTR records in ``reverse_zone`` whose target is ``fqdn``."""

    @abstractmethod
    def remove_record(self, record: DnsRecordHandle) -> None:
        """Remove exactly the given record."""
