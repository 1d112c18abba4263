"""Machine value objects: workflow steps, resource handles and sizing."""
from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Optional

from hvprovision.domain.core.common_types import HardwareAddress, IPAddress

MIB = 1024 * 1024
GIB = 1024 * MIB


class ProvisioningStep(str, Enum):
    """Ordered steps of the create workflow."""
    PREPARE_STORAGE = "prepare_storage"
    CREATE_INSTANCE = "create_instance"
    ATTACH_DISK = "attach_disk"
    DISCOVER_HARDWARE_ADDRESS = "discover_hardware_address"
    RESERVE_ADDRESS = "reserve_address"
    REGISTER_DHCP = "register_dhcp"
    REGISTER_DNS = "register_dns"


class CleanupStep(str, Enum):
    """Ordered steps of the destroy workflow."""
    STOP_INSTANCE = "stop_instance"
    RESOLVE_HARDWARE_ADDRESS = "resolve_hardware_address"
    REMOVE_DNS_RECORDS = "remove_dns_records"
    REMOVE_DHCP_ENTRIES = "remove_dhcp_entries"
    DELETE_INSTANCE = "delete_instance"
    REMOVE_STORAGE = "remove_storage"


class StepOutcome(str, Enum):
    """Result of a single best-effort cleanup step."""
    COMPLETED = "completed"
    NOT_FOUND = "not_found"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class MemorySpec:
    """Memory sizing handed to the compute provider, in bytes."""
    startup_bytes: int
    dynamic: bool = True
    minimum_bytes: Optional[int] = None
    maximum_bytes: Optional[int] = None


@dataclass(frozen=True)
class InstanceOptions:
    """Instance settings that carry no ordering logic of their own."""
    cpu_count: int = 1
    generation: int = 2
    path: Optional[str] = None
    secure_boot: bool = True
    secure_boot_template: Optional[str] = None
    automatic_start_action: Optional[str] = None
    automatic_start_delay: int = 0
    automatic_stop_action: Optional[str] = None
    notes: str = ""


@dataclass(frozen=True)
class InstanceHandle:
    name: str
    host: str
    instance_id: Optional[str] = None
    path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "host": self.host, "id": self.instance_id, "path": self.path}


@dataclass(frozen=True)
class DiskHandle:
    path: str
    size_bytes: int

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "sizeBytes": self.size_bytes}


@dataclass(frozen=True)
class DhcpReservationHandle:
    scope_id: str
    ip_address: IPAddress
    hardware_address: HardwareAddress
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scopeId": self.scope_id,
            "ipAddress": str(self.ip_address),
            "clientId": self.hardware_address.as_client_id(),
            "name": self.name,
        }


@dataclass(frozen=True)
class DhcpFilterHandle:
    hardware_address: HardwareAddress
    description: str = ""
    list_name: str = "Allow"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "list": self.list_name,
            "macAddress": self.hardware_address.as_client_id(),
            "description": self.description,
        }


@dataclass(frozen=True)
class DnsRecordHandle:
    """A DNS record as identified by the name service.

    ``name`` is relative to ``zone``; ``data`` is the address for A records
    and the target fqdn for PTR records.
    """
    zone: str
    name: str
    record_type: str
    data: str

    def to_dict(self) -> Dict[str, Any]:
        return {"zone": self.zone, "name": self.name, "type": self.record_type, "data": self.data}


@dataclass
class MachineResources:
    """Handles of the remote resources owned by one machine."""
    instance: Optional[InstanceHandle] = None
    disk: Optional[DiskHandle] = None
    dhcp_reservation: Optional[DhcpReservationHandle] = None
    dhcp_allow_entry: Optional[DhcpFilterHandle] = None
    dns_a_record: Optional[DnsRecordHandle] = None
    dns_ptr_record: Optional[DnsRecordHandle] = None

    def present(self) -> List[str]:
        """Names of the handles currently held, in declaration order."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    @property
    def all_present(self) -> bool:
        return len(self.present()) == len(fields(self))

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        for f in fields(self):
            handle = getattr(self, f.name)
            result[f.name] = handle.to_dict() if handle is not None else None
        return result
