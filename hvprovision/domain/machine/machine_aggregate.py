from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from hvprovision.domain.core.common_types import HardwareAddress, IPAddress
from hvprovision.domain.machine.exceptions import InvalidMachineStateError
from hvprovision.domain.machine.value_objects import MachineResources


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ManagedMachine:
    """One provisioned unit: a VM plus its DHCP and DNS bindings.

    ``name`` is the only key shared by the three subsystems. The hardware
    address and the IP address are assigned once and never change.
    """
    name: str
    host: str
    fqdn: str
    hardware_address: Optional[HardwareAddress] = None
    ip_address: Optional[IPAddress] = None
    scope_id: Optional[str] = None
    storage_path: Optional[str] = None
    resources: MachineResources = field(default_factory=MachineResources)
    created_at: datetime = field(default_factory=_utcnow)
    lifecycle_events: List[Dict[str, Any]] = field(default_factory=list)

    def pin_hardware_address(self, address: HardwareAddress) -> None:
        if address.is_zero:
            raise InvalidMachineStateError(self.name, "cannot pin an all-zero hardware address")
        if self.hardware_address is not None and self.hardware_address != address:
            raise InvalidMachineStateError(
                self.name,
                f"hardware address already pinned to {self.hardware_address}, refusing {address}",
            )
        self.hardware_address = address
        self.record_event("hardware_address_pinned", address=str(address))

    def assign_ip_address(self, address: IPAddress, scope_id: str) -> None:
        if self.ip_address is not None and self.ip_address != address:
            raise InvalidMachineStateError(
                self.name, f"address already assigned ({self.ip_address}), refusing {address}"
            )
        self.ip_address = address
        self.scope_id = scope_id
        self.record_event("ip_address_assigned", address=str(address), scope=scope_id)

    def record_event(self, event: str, **details: Any) -> None:
        self.lifecycle_events.append({
            "timestamp": _utcnow().isoformat(),
            "event": event,
            "details": details,
        })

    def live_resources(self) -> List[str]:
        """Resources that exist remotely right now, storage directory included."""
        live = ["storage"] if self.storage_path else []
        return live + self.resources.present()

    @property
    def is_complete(self) -> bool:
        return self.resources.all_present and self.hardware_address is not None

    def to_dict(self, long: bool = False) -> Dict[str, Any]:
        """
        Convert machine to dictionary.

        Args:
            long: If True, include resource handles and lifecycle events.
        """
        result = {
            "name": self.name,
            "host": self.host,
            "fqdn": self.fqdn,
            "hardwareAddress": str(self.hardware_address) if self.hardware_address else None,
            "ipAddress": str(self.ip_address) if self.ip_address else None,
            "scopeId": self.scope_id,
            "storagePath": self.storage_path,
            "complete": self.is_complete,
            "resources": self.resources.present(),
        }
        if long:
            result["resources"] = self.resources.to_dict()
            result["createdAt"] = self.created_at.isoformat()
            result["lifecycleEvents"] = list(self.lifecycle_events)
        return result
