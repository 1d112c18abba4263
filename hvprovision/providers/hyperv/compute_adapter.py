"""Hyper-V implementation of the compute port."""
from typing import Any, Callable, Dict, List, Optional

from hvprovision.domain.base.ports import ComputePort
from hvprovision.domain.core.common_types import HardwareAddress
from hvprovision.domain.core.exceptions import RemoteOperationError
from hvprovision.domain.machine.value_objects import (
    DiskHandle,
    InstanceHandle,
    InstanceOptions,
    MemorySpec,
)
from hvprovision.infrastructure.logging.logger import get_logger
from hvprovision.infrastructure.remote import PowerShellRunner, ps_quote
from hvprovision.providers.hyperv._scripts import VM_SUMMARY, lookup_vm

RunnerFactory = Callable[[str], PowerShellRunner]


class HyperVComputeAdapter(ComputePort):
    """Drives the Hyper-V PowerShell module on each host over WinRM."""

    def __init__(self, runner_factory: RunnerFactory):
        self._runner_factory = runner_factory
        self._logger = get_logger(__name__)

    def _runner(self, host: str) -> PowerShellRunner:
        return self._runner_factory(host)

    def check_host(self, host: str) -> None:
        info = self._runner(host).run(
            "Get-VMHost | Select-Object Name, LogicalProcessorCount | ConvertTo-Json -Compress",
            operation="Get-VMHost",
            parse_json=True,
        )
        if not info:
            raise RemoteOperationError("Get-VMHost", f"{host} did not report a Hyper-V host")
        self._logger.debug("Host reachable", host=host, name=info.get("Name"))

    def get_instance(self, name: str, host: str) -> Optional[InstanceHandle]:
        script = (
            f"Get-VM -Name {ps_quote(name)} -ErrorAction SilentlyContinue | "
            f"Select-Object -First 1 | {VM_SUMMARY}"
        )
        payload = self._runner(host).run(script, operation="Get-VM", parse_json=True)
        if not payload:
            return None
        return self._to_handle(payload, host)

    def create_instance(
        self,
        name: str,
        host: str,
        memory: MemorySpec,
        switch_name: str,
        boot_media: Optional[str],
        options: InstanceOptions,
    ) -> InstanceHandle:
        new_vm = [
            f"$vm = New-VM -Name {ps_quote(name)}",
            f"-MemoryStartupBytes {memory.startup_bytes}",
            f"-Generation {options.generation}",
            "-NoVHD",
            f"-SwitchName {ps_quote(switch_name)}",
        ]
        if options.path:
            new_vm.append(f"-Path {ps_quote(options.path)}")

        lines = [" ".join(new_vm), self._set_vm(memory, options)]
        if options.generation == 2:
            lines.append(self._set_firmware(options))
        if boot_media:
            lines.extend(self._boot_from(boot_media, options.generation))
        lines.append(f"$vm | {VM_SUMMARY}")

        payload = self._runner(host).run("\n".join(lines), operation="New-VM", parse_json=True)
        if not payload:
            raise RemoteOperationError("New-VM", f"{host} returned no data for {name}")
        handle = self._to_handle(payload, host)
        self._logger.info("Instance created", machine=name, host=host, instance_id=handle.instance_id)
        return handle

    @staticmethod
    def _set_vm(memory: MemorySpec, options: InstanceOptions) -> str:
        args = ["Set-VM -VM $vm", f"-ProcessorCount {options.cpu_count}"]
        if memory.dynamic:
            args.append("-DynamicMemory")
            if memory.minimum_bytes:
                args.append(f"-MemoryMinimumBytes {memory.minimum_bytes}")
            if memory.maximum_bytes:
                args.append(f"-MemoryMaximumBytes {memory.maximum_bytes}")
        else:
            args.append("-StaticMemory")
        if options.automatic_start_action:
            args.append(f"-AutomaticStartAction {options.automatic_start_action}")
            args.append(f"-AutomaticStartDelay {options.automatic_start_delay}")
        if options.automatic_stop_action:
            args.append(f"-AutomaticStopAction {options.automatic_stop_action}")
        if options.notes:
            args.append(f"-Notes {ps_quote(options.notes)}")
        return " ".join(args)

    @staticmethod
    def _set_firmware(options: InstanceOptions) -> str:
        state = "On" if options.secure_boot else "Off"
        args = ["Set-VMFirmware -VM $vm", f"-EnableSecureBoot {state}"]
        if options.secure_boot and options.secure_boot_template:
            args.append(f"-SecureBootTemplate {ps_quote(options.secure_boot_template)}")
        return " ".join(args)

    @staticmethod
    def _boot_from(boot_media: str, generation: int) -> List[str]:
        lines = [f"$dvd = Add-VMDvdDrive -VM $vm -Path {ps_quote(boot_media)} -Passthru"]
        if generation == 2:
            lines.append("Set-VMFirmware -VM $vm -FirstBootDevice $dvd")
        else:
            lines.append("Set-VMBios -VM $vm -StartupOrder @('CD', 'IDE', 'LegacyNetworkAdapter', 'Floppy')")
        return lines

    def attach_disk(self, instance: InstanceHandle, size_bytes: int) -> DiskHandle:
        file_name = f"{instance.name}.vhdx"
        script = "\n".join([
            lookup_vm(instance.name),
            f"$vhd = Join-Path $vm.Path {ps_quote(file_name)}",
            f"New-VHD -Path $vhd -SizeBytes {size_bytes} -Dynamic | Out-Null",
            "Add-VMHardDiskDrive -VM $vm -Path $vhd",
            "@{ Path = $vhd } | ConvertTo-Json -Compress",
        ])
        payload = self._runner(instance.host).run(script, operation="New-VHD", parse_json=True)
        return DiskHandle(path=payload["Path"], size_bytes=size_bytes)

    def set_hardware_address_static(self, instance: InstanceHandle, address: HardwareAddress) -> None:
        script = "\n".join([
            lookup_vm(instance.name),
            f"$vm | Get-VMNetworkAdapter | Set-VMNetworkAdapter -StaticMacAddress {ps_quote(address.as_hyperv())}",
        ])
        self._runner(instance.host).run(script, operation="Set-VMNetworkAdapter")

    def start(self, instance: InstanceHandle) -> None:
        script = "\n".join([lookup_vm(instance.name), "Start-VM -VM $vm"])
        self._runner(instance.host).run(script, operation="Start-VM")

    def stop_hard(self, instance: InstanceHandle) -> None:
        script = "\n".join([
            lookup_vm(instance.name),
            "if ($vm.State -ne 'Off') { Stop-VM -VM $vm -TurnOff -Force }",
        ])
        self._runner(instance.host).run(script, operation="Stop-VM")

    def get_hardware_address(self, instance: InstanceHandle) -> Optional[HardwareAddress]:
        script = "\n".join([
            lookup_vm(instance.name),
            "($vm | Get-VMNetworkAdapter | Select-Object -First 1).MacAddress",
        ])
        raw = self._runner(instance.host).run(script, operation="Get-VMNetworkAdapter")
        return HardwareAddress.parse(raw)

    def delete_instance(self, instance: InstanceHandle) -> None:
        script = "\n".join([lookup_vm(instance.name), "Remove-VM -VM $vm -Force"])
        self._runner(instance.host).run(script, operation="Remove-VM")
        self._logger.info("Instance deleted", machine=instance.name, host=instance.host)

    @staticmethod
    def _to_handle(payload: Dict[str, Any], host: str) -> InstanceHandle:
        return InstanceHandle(
            name=payload["Name"],
            host=host,
            instance_id=payload.get("Id"),
            path=payload.get("Path"),
        )
