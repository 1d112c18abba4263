"""Domain port for the compute provider (virtualization host)."""

from abc import ABC, abstractmethod
from typing import Optional

from hvprovision.domain.core.common_types import HardwareAddress
from hvprovision.domain.machine.value_objects import (
    DiskHandle,
    InstanceHandle,
    InstanceOptions,
    MemorySpec,
)


class ComputePort(ABC):
    """Creates, inspects and destroys compute instances on a host.

    Implementations raise ``ResourceNotFoundError`` when the instance does
    not exist, ``RemoteUnavailableError`` when the host cannot be reached
    and ``RemoteOperationError`` for any other remote failure.
    """

    @abstractmethod
    def check_host(self, host: str) -> None:
        """Verify the host is reachable and able to run instances."""

    @abstractmethod
    def get_instance(self, name: str, host: str) -> Optional[InstanceHandle]:
        """Return the instance named ``name`` or None."""

    @abstractmethod
    def create_instance(
        self,
        name: str,
        host: str,
        memory: MemorySpec,
        switch_name: str,
        boot_media: Optional[str],
        options: InstanceOptions,
    ) -> InstanceHandle:
        """Create an instance without disks, connected to ``switch_name``."""

    @abstractmethod
    def attach_disk(self, instance: InstanceHandle, size_bytes: int) -> DiskHandle:
        """Create a virtual disk of ``size_bytes`` and attach it."""

    @abstractmethod
    def set_hardware_address_static(self, instance: InstanceHandle, address: HardwareAddress) -> None:
        """Pin the network adapter's hardware address."""

    @abstractmethod
    def start(self, instance: InstanceHandle) -> None:
        """Power the instance on."""

    @abstractmethod
    def stop_hard(self, instance: InstanceHandle) -> None:
        """Power the instance off without a guest shutdown; no-op when already off."""

    @abstractmethod
    def get_hardware_address(self, instance: InstanceHandle) -> Optional[HardwareAddress]:
        """Current adapter hardware address, None until one has been generated."""

    @abstractmethod
    def delete_instance(self, instance: InstanceHandle) -> None:
        """Remove the instance definition."""
