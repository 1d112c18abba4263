"""Provisioning orchestrator - create and destroy workflows.

The compute host, the DHCP server and the DNS server offer no shared
transaction, so both workflows are sagas:

- ``provision`` runs its steps in dependency order and stops at the first
  failure, leaving what was already created in place (optionally followed by
  a compensating ``decommission`` when ``rollback_on_failure`` is set).
- ``decommission`` runs every cleanup step in reverse dependency order,
  treats missing resources as already cleaned up, and reports all failures
  together once every step has been attempted.
"""
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import PureWindowsPath
from typing import Any, Callable, Iterator, Optional, Type

from hvprovision.application.provisioning.report import DecommissionReport, StepResult
from hvprovision.domain.base.ports import (
    AddressReservationPort,
    ComputePort,
    HostStoragePort,
    NameServicePort,
)
from hvprovision.domain.core.common_types import HardwareAddress, IPAddress
from hvprovision.domain.core.exceptions import (
    DomainException,
    RemoteUnavailableError,
    ResourceConflictError,
    ResourceNotFoundError,
)
from hvprovision.domain.machine.exceptions import (
    AddressDiscoveryError,
    AddressDiscoveryTimeoutError,
    DhcpRegistrationError,
    DiskAttachError,
    DnsRegistrationError,
    InstanceCreationError,
    NoFreeAddressError,
    PartialFailureError,
    StepFailureError,
    StoragePreparationError,
)
from hvprovision.domain.machine.machine_aggregate import ManagedMachine
from hvprovision.domain.machine.machine_spec import MachineSpec
from hvprovision.domain.machine.value_objects import (
    CleanupStep,
    InstanceHandle,
    ProvisioningStep,
    StepOutcome,
)
from hvprovision.infrastructure.logging import get_logger


@dataclass(frozen=True)
class OrchestratorSettings:
    """Deployment-wide defaults the workflows need."""
    forward_zone: str
    base_path: str = r"C:\ProgramData\Microsoft\Windows\Hyper-V"
    switch_name: str = "Default Switch"
    install_media_path: Optional[str] = None
    reverse_zone: Optional[str] = None
    discovery_timeout: float = 120.0
    discovery_poll_interval: float = 2.0
    rollback_on_failure: bool = False


class ProvisioningOrchestrator:
    """Sequences compute, DHCP and DNS calls for one machine at a time."""

    def __init__(
        self,
        compute: ComputePort,
        address_reservation: AddressReservationPort,
        name_service: NameServicePort,
        host_storage: HostStoragePort,
        settings: OrchestratorSettings,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._compute = compute
        self._dhcp = address_reservation
        self._dns = name_service
        self._storage = host_storage
        self._settings = settings
        self._sleep = sleep
        self._clock = clock
        self._logger = get_logger(__name__)

    @property
    def settings(self) -> OrchestratorSettings:
        return self._settings

    def fqdn(self, name: str) -> str:
        return f"{name}.{self._settings.forward_zone.strip('.')}"

    def storage_path(self, name: str, base_path: Optional[str] = None) -> str:
        return str(PureWindowsPath(base_path or self._settings.base_path) / name)

    # Create path

    def provision(self, spec: MachineSpec) -> ManagedMachine:
        """
        Provision a machine and register it with DHCP and DNS.

        Args:
            spec: Validated machine specification

        Returns:
            The machine with every resource handle populated

        Raises:
            RemoteUnavailableError: The host (or a service mid-workflow) is unreachable
            ResourceConflictError: An instance with the same name already exists
            StepFailureError: A step failed; ``left_in_place`` lists what survived
        """
        log = self._logger.bind(machine=spec.name, host=spec.host)

        self._compute.check_host(spec.host)
        if self._compute.get_instance(spec.name, spec.host) is not None:
            log.warning("Machine name already in use")
            raise ResourceConflictError("Machine", spec.name, spec.host)

        machine = ManagedMachine(name=spec.name, host=spec.host, fqdn=self.fqdn(spec.name))
        log.info("Provisioning machine", scope=spec.scope_address)
        try:
            self._create(machine, spec)
        except (StepFailureError, RemoteUnavailableError) as e:
            log.error(
                "Provisioning failed",
                step=getattr(e.step, "value", None),
                left_in_place=e.left_in_place,
                error=str(e),
            )
            if self._settings.rollback_on_failure and machine.live_resources():
                self._roll_back(machine, e, spec.base_path)
            raise

        log.info(
            "Machine provisioned",
            hardware_address=str(machine.hardware_address),
            ip_address=str(machine.ip_address),
        )
        return machine

    def _create(self, machine: ManagedMachine, spec: MachineSpec) -> None:
        base_path = spec.base_path or self._settings.base_path
        path = self.storage_path(spec.name, base_path)
        self._run_step(machine, StoragePreparationError, self._storage.create_directory, spec.host, path)
        machine.storage_path = path

        instance = self._run_step(
            machine,
            InstanceCreationError,
            self._compute.create_instance,
            spec.name,
            spec.host,
            spec.memory,
            spec.switch_name or self._settings.switch_name,
            spec.install_media_path or self._settings.install_media_path,
            spec.instance_options(base_path),
        )
        machine.resources.instance = instance

        machine.resources.disk = self._run_step(
            machine, DiskAttachError, self._compute.attach_disk, instance, spec.disk_size_bytes
        )

        # Every DHCP/DNS call below uses the address discovered here
        hardware_address = self._run_step(
            machine, AddressDiscoveryError, self.discover_and_pin_hardware_address, instance
        )
        machine.pin_hardware_address(hardware_address)

        ip_address = self._run_step(
            machine,
            DhcpRegistrationError,
            self._dhcp.get_free_address,
            spec.scope_address,
            step=ProvisioningStep.RESERVE_ADDRESS,
        )
        if ip_address is None:
            raise NoFreeAddressError(
                f"scope {spec.scope_address} has no free address",
                machine=machine,
                left_in_place=machine.live_resources(),
            )
        machine.assign_ip_address(ip_address, spec.scope_address)

        machine.resources.dhcp_reservation = self._run_step(
            machine,
            DhcpRegistrationError,
            self._dhcp.create_reservation,
            spec.scope_address,
            ip_address,
            hardware_address,
            spec.name,
        )
        machine.resources.dhcp_allow_entry = self._run_step(
            machine, DhcpRegistrationError, self._dhcp.allow_hardware_address, hardware_address, spec.name
        )

        machine.resources.dns_a_record = self._run_step(
            machine,
            DnsRegistrationError,
            self._dns.create_a_record,
            self._settings.forward_zone,
            spec.name,
            ip_address,
        )
        machine.resources.dns_ptr_record = self._run_step(
            machine,
            DnsRegistrationError,
            self._dns.create_ptr_record,
            self._settings.reverse_zone or ip_address.reverse_zone,
            ip_address,
            machine.fqdn,
        )

    def _run_step(
        self,
        machine: ManagedMachine,
        error_type: Type[StepFailureError],
        action: Callable[..., Any],
        *args: Any,
        step: Optional[ProvisioningStep] = None,
    ) -> Any:
        """Run one remote action, translating its failure into ``error_type``."""
        step = step or error_type.step
        log = self._logger.bind(machine=machine.name, host=machine.host, step=step.value)
        log.debug("Provisioning step started")
        try:
            result = action(*args)
        except StepFailureError as e:
            if e.machine is None:
                e.machine = machine
            if not e.left_in_place:
                e.left_in_place = machine.live_resources()
            raise
        except RemoteUnavailableError as e:
            e.step = step
            e.machine = machine
            e.left_in_place = machine.live_resources()
            raise
        except DomainException as e:
            raise error_type(
                str(e), step=step, machine=machine, left_in_place=machine.live_resources()
            ) from e
        machine.record_event(step.value)
        log.info("Provisioning step completed")
        return result

    def discover_and_pin_hardware_address(self, instance: InstanceHandle) -> HardwareAddress:
        """
        Boot the instance once to make the hypervisor generate its hardware address.

        The instance is started and immediately powered off (no guest
        shutdown), then polled until it reports a non-zero address, which is
        pinned as static so later boots cannot regenerate it.

        Raises:
            AddressDiscoveryTimeoutError: No address within ``discovery_timeout`` seconds
        """
        self._compute.start(instance)
        self._compute.stop_hard(instance)

        deadline = self._clock() + self._settings.discovery_timeout
        while True:
            address = self._compute.get_hardware_address(instance)
            if address is not None and not address.is_zero:
                break
            if self._clock() >= deadline:
                raise AddressDiscoveryTimeoutError(
                    f"{instance.name} reported no hardware address within "
                    f"{self._settings.discovery_timeout:g}s"
                )
            self._sleep(self._settings.discovery_poll_interval)

        self._compute.set_hardware_address_static(instance, address)
        self._logger.info("Hardware address pinned", machine=instance.name, hardware_address=str(address))
        return address

    def _roll_back(self, machine: ManagedMachine, error: DomainException, base_path: Optional[str]) -> None:
        self._logger.warning(
            "Rolling back partially provisioned machine",
            machine=machine.name,
            left_in_place=machine.live_resources(),
        )
        try:
            report = self.decommission(machine.name, machine.host, base_path)
        except PartialFailureError as rollback_error:
            report = rollback_error.report
        except RemoteUnavailableError as rollback_error:
            self._logger.error("Rollback aborted", machine=machine.name, error=str(rollback_error))
            report = rollback_error.report
        error.rollback_report = report

    # Destroy path

    def decommission(self, name: str, host: str, base_path: Optional[str] = None) -> DecommissionReport:
        """
        Remove a machine and everything registered for it, best effort.

        Missing resources count as already removed, so the call is
        idempotent. A failing step never stops the ones after it.

        Returns:
            Report with one entry per cleanup step

        Raises:
            RemoteUnavailableError: The host is unreachable (fatal)
            PartialFailureError: One or more steps failed; carries the report
        """
        log = self._logger.bind(machine=name, host=host)
        self._compute.check_host(host)

        report = DecommissionReport(name=name, host=host)
        instance = InstanceHandle(name=name, host=host)
        log.info("Decommissioning machine")

        with self._cleanup_step(report, CleanupStep.STOP_INSTANCE, host_bound=True):
            self._compute.stop_hard(instance)

        hardware_address: Optional[HardwareAddress] = None
        with self._cleanup_step(report, CleanupStep.RESOLVE_HARDWARE_ADDRESS, host_bound=True) as result:
            hardware_address = self._compute.get_hardware_address(instance)
            if hardware_address is not None and hardware_address.is_zero:
                hardware_address = None
            if hardware_address is None:
                result.not_found(f"{name} reports no hardware address")

        if hardware_address is None:
            # Only name-keyed cleanup continues once the instance is gone
            for step in (CleanupStep.REMOVE_DNS_RECORDS, CleanupStep.REMOVE_DHCP_ENTRIES):
                report.add(StepResult(step, StepOutcome.SKIPPED, "hardware address unknown"))
        else:
            with self._cleanup_step(report, CleanupStep.REMOVE_DNS_RECORDS) as result:
                if not self._remove_dns_records(name):
                    result.not_found(f"no records for {self.fqdn(name)}")

            with self._cleanup_step(report, CleanupStep.REMOVE_DHCP_ENTRIES) as result:
                if not self._remove_dhcp_entries(hardware_address):
                    result.not_found(f"no reservation or filter for {hardware_address}")

        with self._cleanup_step(report, CleanupStep.DELETE_INSTANCE, host_bound=True):
            self._compute.delete_instance(instance)

        with self._cleanup_step(report, CleanupStep.REMOVE_STORAGE, host_bound=True):
            self._storage.remove_directory_recursive(host, self.storage_path(name, base_path))

        log.info("Decommission finished", succeeded=report.succeeded)
        report.raise_for_failures()
        return report

    @contextmanager
    def _cleanup_step(
        self, report: DecommissionReport, step: CleanupStep, host_bound: bool = False
    ) -> Iterator[StepResult]:
        """Record the outcome of one cleanup step; only host loss escapes."""
        result = StepResult(step)
        try:
            yield result
        except ResourceNotFoundError as e:
            result.not_found(str(e))
        except RemoteUnavailableError as e:
            result.fail(str(e))
            if host_bound:
                report.add(result)
                e.report = report
                self._logger.error("Host lost during decommission", machine=report.name, step=step.value)
                raise
        except DomainException as e:
            result.fail(str(e))
        report.add(result)
        self._logger.info(
            "Cleanup step finished",
            machine=report.name,
            step=step.value,
            outcome=result.outcome.value,
            detail=result.detail,
        )

    def _remove_dns_records(self, name: str) -> int:
        # PTR records are matched on their target, never on name
        zone = self._settings.forward_zone
        fqdn = self.fqdn(name)
        if self._settings.reverse_zone:
            reverse_zones = [self._settings.reverse_zone]
        else:
            reverse_zones = sorted({
                IPAddress(record.data).reverse_zone for record in self._dns.find_a_records(zone, name)
            })

        removed = 0
        for reverse_zone in reverse_zones:
            try:
                records = self._dns.find_ptr_records_by_target(reverse_zone, fqdn)
            except ResourceNotFoundError:
                continue
            for record in records:
                try:
                    self._dns.remove_record(record)
                    removed += 1
                except ResourceNotFoundError:
                    continue
        try:
            self._dns.remove_a_record(zone, name)
            removed += 1
        except ResourceNotFoundError:
            pass
        return removed

    def _remove_dhcp_entries(self, hardware_address: HardwareAddress) -> int:
        removed = 0
        try:
            self._dhcp.remove_allow(hardware_address)
            removed += 1
        except ResourceNotFoundError:
            pass
        # Reservation scope is not recorded; check every scope
        for scope_id in self._dhcp.list_scopes():
            try:
                self._dhcp.remove_reservation(scope_id, hardware_address)
                removed += 1
            except ResourceNotFoundError:
                continue
        return removed
