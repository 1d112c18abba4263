"""Machine directories on the Hyper-V host."""
from typing import Callable

from hvprovision.domain.base.ports import HostStoragePort
from hvprovision.infrastructure.remote import NOT_FOUND_EXIT_CODE, PowerShellRunner, ps_quote


class HyperVHostStorageAdapter(HostStoragePort):
    def __init__(self, runner_factory: Callable[[str], PowerShellRunner]):
        self._runner_factory = runner_factory

    def create_directory(self, host: str, path: str) -> None:
        script = f"New-Item -ItemType Directory -Path {ps_quote(path)} -Force | Out-Null"
        self._runner_factory(host).run(script, operation="New-Item")

    def remove_directory_recursive(self, host: str, path: str) -> None:
        script = "\n".join([
            f"if (-not (Test-Path -LiteralPath {ps_quote(path)})) {{ exit {NOT_FOUND_EXIT_CODE} }}",
            f"Remove-Item -LiteralPath {ps_quote(path)} -Recurse -Force",
        ])
        self._runner_factory(host).run(script, operation="Remove-Item")
