"""Machine bounded context - machine domain logic."""

from .exceptions import (
    AddressDiscoveryError,
    AddressDiscoveryTimeoutError,
    DhcpRegistrationError,
    DiskAttachError,
    DnsRegistrationError,
    InstanceCreationError,
    InvalidMachineStateError,
    NoFreeAddressError,
    PartialFailureError,
    StepFailureError,
    StoragePreparationError,
)
from .machine_aggregate import ManagedMachine
from .machine_spec import MachineSpec
from .value_objects import (
    CleanupStep,
    DhcpFilterHandle,
    DhcpReservationHandle,
    DiskHandle,
    DnsRecordHandle,
    InstanceHandle,
    InstanceOptions,
    MachineResources,
    MemorySpec,
    ProvisioningStep,
    StepOutcome,
)

__all__ = [
    "ManagedMachine",
    "MachineSpec",
    "MachineResources",
    "MemorySpec",
    "InstanceOptions",
    "InstanceHandle",
    "DiskHandle",
    "DhcpReservationHandle",
    "DhcpFilterHandle",
    "DnsRecordHandle",
    "ProvisioningStep",
    "CleanupStep",
    "StepOutcome",
    "InvalidMachineStateError",
    "StepFailureError",
    "StoragePreparationError",
    "InstanceCreationError",
    "DiskAttachError",
    "AddressDiscoveryError",
    "AddressDiscoveryTimeoutError",
    "NoFreeAddressError",
    "DhcpRegistrationError",
    "DnsRegistrationError",
    "PartialFailureError",
]
