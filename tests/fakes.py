"""In-memory stand-ins for the compute host, DHCP server, DNS server and host storage.

Every fake appends ``("<port>.<method>", args)`` to a shared call log so tests
can assert on ordering across subsystems. Set ``failures[method]`` to make a
method raise, or ``unavailable`` to make every call fail as unreachable.
"""
from dataclasses import dataclass, field
from pathlib import PureWindowsPath
from typing import Dict, List, Optional, Set, Tuple

from hvprovision.domain.base.ports import (
    AddressReservationPort,
    ComputePort,
    HostStoragePort,
    NameServicePort,
)
from hvprovision.domain.core.common_types import HardwareAddress, IPAddress
from hvprovision.domain.core.exceptions import (
    RemoteOperationError,
    RemoteUnavailableError,
    ResourceNotFoundError,
)
from hvprovision.domain.machine.value_objects import (
    DhcpFilterHandle,
    DhcpReservationHandle,
    DiskHandle,
    DnsRecordHandle,
    InstanceHandle,
    InstanceOptions,
    MemorySpec,
)

ZERO_ADDRESS = HardwareAddress("000000000000")


class CallLog(list):
    def names(self) -> List[str]:
        return [name for name, _ in self]

    def index_of(self, name: str) -> int:
        return self.names().index(name)

    def mutations(self) -> List[str]:
        readonly = ("check_host", "get_", "find_", "list_")
        return [n for n in self.names() if not n.split(".", 1)[1].startswith(readonly)]


class FakeClock:
    """Monotonic clock advanced only by ``sleep``."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class _Recording:
    prefix = ""
    endpoint = ""

    def __init__(self, log: CallLog):
        self.calls = log
        self.failures: Dict[str, Exception] = {}
        self.unavailable = False

    def _record(self, method: str, *args) -> None:
        self.calls.append((f"{self.prefix}.{method}", args))
        if self.unavailable:
            raise RemoteUnavailableError(self.endpoint, "connection refused")
        failure = self.failures.get(method)
        if failure is not None:
            raise failure


@dataclass
class FakeInstance:
    name: str
    host: str
    path: str
    memory: MemorySpec
    switch_name: str
    boot_media: Optional[str]
    options: InstanceOptions
    state: str = "Off"
    booted: bool = False
    polls: int = 0
    hardware_address: Optional[HardwareAddress] = None
    static_address: Optional[HardwareAddress] = None
    disks: List[str] = field(default_factory=list)


class FakeCompute(_Recording, ComputePort):
    prefix = "compute"

    def __init__(self, log: CallLog, generated_address: str = "00155D0A0001", polls_before_address: int = 0):
        super().__init__(log)
        self.instances: Dict[Tuple[str, str], FakeInstance] = {}
        self.unreachable_hosts: Set[str] = set()
        self.generated_address = HardwareAddress(generated_address)
        self.polls_before_address = polls_before_address

    def _check(self, host: str) -> None:
        if host in self.unreachable_hosts:
            raise RemoteUnavailableError(host, "connection refused")

    def _get(self, instance: InstanceHandle) -> FakeInstance:
        self._check(instance.host)
        try:
            return self.instances[(instance.host, instance.name)]
        except KeyError:
            raise ResourceNotFoundError("VM", instance.name)

    def check_host(self, host):
        self._record("check_host", host)
        self._check(host)

    def get_instance(self, name, host):
        self._record("get_instance", name, host)
        self._check(host)
        inst = self.instances.get((host, name))
        if inst is None:
            return None
        return InstanceHandle(name=name, host=host, instance_id=f"id-{name}", path=inst.path)

    def create_instance(self, name, host, memory, switch_name, boot_media, options):
        self._record("create_instance", name, host)
        self._check(host)
        path = str(PureWindowsPath(options.path or "C:\\VMs") / name)
        self.instances[(host, name)] = FakeInstance(name, host, path, memory, switch_name, boot_media, options)
        return InstanceHandle(name=name, host=host, instance_id=f"id-{name}", path=path)

    def attach_disk(self, instance, size_bytes):
        self._record("attach_disk", instance.name, size_bytes)
        inst = self._get(instance)
        disk_path = str(PureWindowsPath(inst.path) / f"{inst.name}.vhdx")
        inst.disks.append(disk_path)
        return DiskHandle(path=disk_path, size_bytes=size_bytes)

    def set_hardware_address_static(self, instance, address):
        self._record("set_hardware_address_static", instance.name, address)
        self._get(instance).static_address = address

    def start(self, instance):
        self._record("start", instance.name)
        inst = self._get(instance)
        inst.state = "Running"
        inst.booted = True

    def stop_hard(self, instance):
        self._record("stop_hard", instance.name)
        self._get(instance).state = "Off"

    def get_hardware_address(self, instance):
        self._record("get_hardware_address", instance.name)
        inst = self._get(instance)
        if inst.hardware_address is None:
            if not inst.booted or inst.polls < self.polls_before_address:
                inst.polls += 1
                return ZERO_ADDRESS
            inst.hardware_address = self.generated_address
        return inst.hardware_address

    def delete_instance(self, instance):
        self._record("delete_instance", instance.name)
        self._get(instance)
        del self.instances[(instance.host, instance.name)]


class FakeDhcp(_Recording, AddressReservationPort):
    prefix = "dhcp"
    endpoint = "dhcp01"

    def __init__(self, log: CallLog, scopes: Optional[Dict[str, List[str]]] = None):
        super().__init__(log)
        self.scopes = {scope: list(addresses) for scope, addresses in (scopes or {}).items()}
        self.reservations: Dict[Tuple[str, str], DhcpReservationHandle] = {}
        self.allowed: Dict[str, DhcpFilterHandle] = {}

    def get_free_address(self, scope_id):
        self._record("get_free_address", scope_id)
        if scope_id not in self.scopes:
            raise ResourceNotFoundError("DHCP scope", scope_id)
        taken = {str(r.ip_address) for r in self.reservations.values() if r.scope_id == scope_id}
        for address in self.scopes[scope_id]:
            if address not in taken:
                return IPAddress(address)
        return None

    def create_reservation(self, scope_id, address, hardware_address, name):
        self._record("create_reservation", scope_id, address, hardware_address, name)
        key = (scope_id, hardware_address.value)
        if key in self.reservations:
            raise RemoteOperationError("Add-DhcpServerv4Reservation", "reservation already exists")
        handle = DhcpReservationHandle(scope_id, address, hardware_address, name)
        self.reservations[key] = handle
        return handle

    def remove_reservation(self, scope_id, hardware_address):
        self._record("remove_reservation", scope_id, hardware_address)
        if self.reservations.pop((scope_id, hardware_address.value), None) is None:
            raise ResourceNotFoundError("DHCP reservation", hardware_address.as_client_id())

    def allow_hardware_address(self, hardware_address, label):
        self._record("allow_hardware_address", hardware_address, label)
        handle = DhcpFilterHandle(hardware_address, label)
        self.allowed[hardware_address.value] = handle
        return handle

    def remove_allow(self, hardware_address):
        self._record("remove_allow", hardware_address)
        if self.allowed.pop(hardware_address.value, None) is None:
            raise ResourceNotFoundError("DHCP filter", hardware_address.as_client_id())

    def list_scopes(self):
        self._record("list_scopes")
        return list(self.scopes)


def _fqdn_key(value: str) -> str:
    return value.rstrip(".").lower()


class FakeDns(_Recording, NameServicePort):
    prefix = "dns"
    endpoint = "dns01"

    def __init__(self, log: CallLog):
        super().__init__(log)
        self.records: List[DnsRecordHandle] = []

    def create_a_record(self, zone, name, address):
        self._record("create_a_record", zone, name, address)
        record = DnsRecordHandle(zone=zone, name=name, record_type="A", data=str(address))
        self.records.append(record)
        return record

    def create_ptr_record(self, reverse_zone, address, fqdn):
        self._record("create_ptr_record", reverse_zone, address, fqdn)
        record = DnsRecordHandle(
            zone=reverse_zone, name=address.ptr_name(reverse_zone), record_type="PTR", data=_fqdn_key(fqdn) + "."
        )
        self.records.append(record)
        return record

    def remove_a_record(self, zone, name):
        self._record("remove_a_record", zone, name)
        matches = self._a_records(zone, name)
        if not matches:
            raise ResourceNotFoundError("A record", name)
        for record in matches:
            self.records.remove(record)

    def find_a_records(self, zone, name):
        self._record("find_a_records", zone, name)
        return self._a_records(zone, name)

    def find_ptr_records_by_target(self, reverse_zone, fqdn):
        self._record("find_ptr_records_by_target", reverse_zone, fqdn)
        return [
            r for r in self.records
            if r.zone == reverse_zone and r.record_type == "PTR" and _fqdn_key(r.data) == _fqdn_key(fqdn)
        ]

    def remove_record(self, record):
        self._record("remove_record", record)
        if record not in self.records:
            raise ResourceNotFoundError(record.record_type + " record", record.name)
        self.records.remove(record)

    def _a_records(self, zone, name):
        return [r for r in self.records if r.zone == zone and r.name == name and r.record_type == "A"]


class FakeStorage(_Recording, HostStoragePort):
    prefix = "storage"

    def __init__(self, log: CallLog):
        super().__init__(log)
        self.directories: Set[Tuple[str, str]] = set()

    def create_directory(self, host, path):
        self._record("create_directory", host, path)
        self.directories.add((host, path))

    def remove_directory_recursive(self, host, path):
        self._record("remove_directory_recursive", host, path)
        if (host, path) not in self.directories:
            raise ResourceNotFoundError("Directory", path)
        self.directories.remove((host, path))
