"""Machine workflow exceptions."""
from typing import TYPE_CHECKING, Any, List, Optional

from hvprovision.domain.core.exceptions import DomainException
from hvprovision.domain.machine.value_objects import ProvisioningStep

if TYPE_CHECKING:
    from hvprovision.domain.machine.machine_aggregate import ManagedMachine


class InvalidMachineStateError(DomainException):
    """Raised when a machine invariant would be broken."""

    def __init__(self, machine_name: str, message: str):
        super().__init__(f"Machine {machine_name}: {message}")
        self.machine_name = machine_name


class StepFailureError(DomainException):
    """A provisioning step failed after the steps before it succeeded.

    Nothing is rolled back: ``left_in_place`` names the resources that
    still exist and ``machine`` holds their handles.
    """

    step: ProvisioningStep = ProvisioningStep.PREPARE_STORAGE

    def __init__(
        self,
        message: str,
        step: Optional[ProvisioningStep] = None,
        machine: Optional["ManagedMachine"] = None,
        left_in_place: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        if step is not None:
            self.step = step
        self.machine = machine
        self.left_in_place = list(left_in_place or [])
        self.rollback_report: Optional[Any] = None

    def __str__(self) -> str:
        name = self.machine.name if self.machine is not None else "machine"
        left = ", ".join(self.left_in_place) if self.left_in_place else "nothing"
        return f"{self.step.value} failed for {name}: {self.message} (left in place: {left})"


class StoragePreparationError(StepFailureError):
    step = ProvisioningStep.PREPARE_STORAGE


class InstanceCreationError(StepFailureError):
    step = ProvisioningStep.CREATE_INSTANCE


class DiskAttachError(StepFailureError):
    step = ProvisioningStep.ATTACH_DISK


class AddressDiscoveryError(StepFailureError):
    step = ProvisioningStep.DISCOVER_HARDWARE_ADDRESS


class AddressDiscoveryTimeoutError(AddressDiscoveryError):
    """The instance did not report a hardware address within the bounded wait."""


class NoFreeAddressError(StepFailureError):
    """The DHCP scope has no free address left."""
    step = ProvisioningStep.RESERVE_ADDRESS


class DhcpRegistrationError(StepFailureError):
    step = ProvisioningStep.REGISTER_DHCP


class DnsRegistrationError(StepFailureError):
    step = ProvisioningStep.REGISTER_DNS


class PartialFailureError(DomainException):
    """Decommission ran every step but at least one of them failed."""

    def __init__(self, report: Any):
        failed = ", ".join(result.step.value for result in report.failures)
        super().__init__(f"Decommission of {report.name} on {report.host} incomplete; failed steps: {failed}")
        self.report = report
