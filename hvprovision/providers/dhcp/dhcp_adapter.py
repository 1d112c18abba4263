"""Windows DHCP Server implementation of the address reservation port."""
from typing import List, Optional

from hvprovision.domain.base.ports import AddressReservationPort
from hvprovision.domain.core.common_types import HardwareAddress, IPAddress
from hvprovision.domain.machine.value_objects import DhcpFilterHandle, DhcpReservationHandle
from hvprovision.infrastructure.logging.logger import get_logger
from hvprovision.infrastructure.remote import NOT_FOUND_EXIT_CODE, PowerShellRunner, as_list, ps_quote


class WindowsDhcpAdapter(AddressReservationPort):
    """
    Manages reservations and the MAC allow list through the DhcpServer module.

    Reservations are keyed by client id, which for Ethernet clients is the
    dash separated hardware address.
    """

    def __init__(self, runner: PowerShellRunner):
        self._runner = runner
        self._logger = get_logger(__name__).bind(dhcp_server=runner.endpoint)

    def get_free_address(self, scope_id: str) -> Optional[IPAddress]:
        script = f"Get-DhcpServerv4FreeIPAddress -ScopeId {ps_quote(scope_id)} -NumAddress 1"
        raw = self._runner.run(script, operation="Get-DhcpServerv4FreeIPAddress")
        if not raw:
            self._logger.warning("Scope exhausted", scope_id=scope_id)
            return None
        return IPAddress(raw.splitlines()[0].strip())

    def create_reservation(
        self, scope_id: str, address: IPAddress, hardware_address: HardwareAddress, name: str
    ) -> DhcpReservationHandle:
        script = (
            f"Add-DhcpServerv4Reservation -ScopeId {ps_quote(scope_id)} -IPAddress {ps_quote(address)} "
            f"-ClientId {ps_quote(hardware_address.as_client_id())} -Name {ps_quote(name)}"
        )
        self._runner.run(script, operation="Add-DhcpServerv4Reservation")
        self._logger.info("Reservation created", scope_id=scope_id, ip_address=str(address), name=name)
        return DhcpReservationHandle(
            scope_id=scope_id, ip_address=address, hardware_address=hardware_address, name=name
        )

    def remove_reservation(self, scope_id: str, hardware_address: HardwareAddress) -> None:
        client_id = ps_quote(hardware_address.as_client_id())
        script = "\n".join([
            f"$r = Get-DhcpServerv4Reservation -ScopeId {ps_quote(scope_id)} -ErrorAction SilentlyContinue |",
            f"    Where-Object {{ $_.ClientId -eq {client_id} }}",
            f"if (-not $r) {{ exit {NOT_FOUND_EXIT_CODE} }}",
            "$r | Remove-DhcpServerv4Reservation",
        ])
        self._runner.run(script, operation="Remove-DhcpServerv4Reservation")
        self._logger.info("Reservation removed", scope_id=scope_id, hardware_address=str(hardware_address))

    def allow_hardware_address(self, hardware_address: HardwareAddress, label: str) -> DhcpFilterHandle:
        script = (
            f"Add-DhcpServerv4Filter -List Allow -MacAddress {ps_quote(hardware_address.as_client_id())} "
            f"-Description {ps_quote(label)}"
        )
        self._runner.run(script, operation="Add-DhcpServerv4Filter")
        return DhcpFilterHandle(hardware_address=hardware_address, description=label)

    def remove_allow(self, hardware_address: HardwareAddress) -> None:
        mac = ps_quote(hardware_address.as_client_id())
        script = "\n".join([
            f"$f = Get-DhcpServerv4Filter -List Allow | Where-Object {{ $_.MacAddress -eq {mac} }}",
            f"if (-not $f) {{ exit {NOT_FOUND_EXIT_CODE} }}",
            f"Remove-DhcpServerv4Filter -MacAddress {mac}",
        ])
        self._runner.run(script, operation="Remove-DhcpServerv4Filter")

    def list_scopes(self) -> List[str]:
        script = "Get-DhcpServerv4Scope | ForEach-Object { $_.ScopeId.IPAddressToString } | ConvertTo-Json -Compress"
        return [str(s) for s in as_list(self._runner.run(script, operation="Get-DhcpServerv4Scope", parse_json=True))]
