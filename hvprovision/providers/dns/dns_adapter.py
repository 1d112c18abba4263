"""Windows DNS Server implementation of the name service port."""
from typing import List, Optional

from hvprovision.domain.base.ports import NameServicePort
from hvprovision.domain.core.common_types import IPAddress
from hvprovision.domain.machine.value_objects import DnsRecordHandle
from hvprovision.infrastructure.logging.logger import get_logger
from hvprovision.infrastructure.remote import NOT_FOUND_EXIT_CODE, PowerShellRunner, as_list, ps_quote

_RECORD_DATA = {
    "A": "$_.RecordData.IPv4Address.IPAddressToString",
    "PTR": "$_.RecordData.PtrDomainName",
}


def normalise_fqdn(value: str) -> str:
    return value.strip().rstrip(".").lower()


class WindowsDnsAdapter(NameServicePort):
    """Maintains A and PTR records through the DnsServer module."""

    def __init__(self, runner: PowerShellRunner):
        self._runner = runner
        self._logger = get_logger(__name__).bind(dns_server=runner.endpoint)

    def create_a_record(self, zone: str, name: str, address: IPAddress) -> DnsRecordHandle:
        script = (
            f"Add-DnsServerResourceRecordA -ZoneName {ps_quote(zone)} -Name {ps_quote(name)} "
            f"-IPv4Address {ps_quote(address)}"
        )
        self._runner.run(script, operation="Add-DnsServerResourceRecordA")
        self._logger.info("A record created", zone=zone, name=name, ip_address=str(address))
        return DnsRecordHandle(zone=zone, name=name, record_type="A", data=str(address))

    def create_ptr_record(self, reverse_zone: str, address: IPAddress, fqdn: str) -> DnsRecordHandle:
        ptr_name = address.ptr_name(reverse_zone)
        target = normalise_fqdn(fqdn) + "."
        script = (
            f"Add-DnsServerResourceRecordPtr -ZoneName {ps_quote(reverse_zone)} -Name {ps_quote(ptr_name)} "
            f"-PtrDomainName {ps_quote(target)}"
        )
        self._runner.run(script, operation="Add-DnsServerResourceRecordPtr")
        self._logger.info("PTR record created", zone=reverse_zone, name=ptr_name, target=target)
        return DnsRecordHandle(zone=reverse_zone, name=ptr_name, record_type="PTR", data=target)

    def remove_a_record(self, zone: str, name: str) -> None:
        script = "\n".join([
            f"$r = Get-DnsServerResourceRecord -ZoneName {ps_quote(zone)} -Name {ps_quote(name)} "
            f"-RRType A -ErrorAction SilentlyContinue",
            f"if (-not $r) {{ exit {NOT_FOUND_EXIT_CODE} }}",
            f"$r | Remove-DnsServerResourceRecord -ZoneName {ps_quote(zone)} -Force",
        ])
        self._runner.run(script, operation="Remove-DnsServerResourceRecord")
        self._logger.info("A record removed", zone=zone, name=name)

    def find_a_records(self, zone: str, name: str) -> List[DnsRecordHandle]:
        return [
            DnsRecordHandle(zone=zone, name=name, record_type="A", data=item["Data"])
            for item in self._records(zone, "A", name)
        ]

    def find_ptr_records_by_target(self, reverse_zone: str, fqdn: str) -> List[DnsRecordHandle]:
        target = normalise_fqdn(fqdn)
        return [
            DnsRecordHandle(zone=reverse_zone, name=item["Name"], record_type="PTR", data=item["Data"])
            for item in self._records(reverse_zone, "PTR")
            if normalise_fqdn(item["Data"] or "") == target
        ]

    def remove_record(self, record: DnsRecordHandle) -> None:
        rr_type = record.record_type.upper()
        if rr_type == "PTR":
            expected = ps_quote(normalise_fqdn(record.data))
            match = f"($_.RecordData.PtrDomainName.TrimEnd('.')) -eq {expected}"
        else:
            match = f"{_RECORD_DATA[rr_type]} -eq {ps_quote(record.data)}"
        script = "\n".join([
            f"$r = Get-DnsServerResourceRecord -ZoneName {ps_quote(record.zone)} -Name {ps_quote(record.name)} "
            f"-RRType {rr_type.capitalize()} -ErrorAction SilentlyContinue | Where-Object {{ {match} }}",
            f"if (-not $r) {{ exit {NOT_FOUND_EXIT_CODE} }}",
            f"$r | Remove-DnsServerResourceRecord -ZoneName {ps_quote(record.zone)} -Force",
        ])
        self._runner.run(script, operation="Remove-DnsServerResourceRecord")
        self._logger.info("Record removed", **record.to_dict())

    def _records(self, zone: str, rr_type: str, name: Optional[str] = None) -> List[dict]:
        name_arg = f" -Name {ps_quote(name)}" if name else ""
        script = (
            f"Get-DnsServerResourceRecord -ZoneName {ps_quote(zone)}{name_arg} -RRType {rr_type.capitalize()} "
            f"-ErrorAction SilentlyContinue | ForEach-Object {{ "
            f"[pscustomobject]@{{ Name = $_.HostName; Data = {_RECORD_DATA[rr_type]} }} }} | ConvertTo-Json -Compress"
        )
        return as_list(self._runner.run(script, operation="Get-DnsServerResourceRecord", parse_json=True))
