"""PowerShell fragments shared by the Hyper-V adapters."""
from hvprovision.infrastructure.remote import NOT_FOUND_EXIT_CODE, ps_quote

VM_SUMMARY = "Select-Object Name, @{Name='Id'; Expression={$_.Id.Guid}}, Path | ConvertTo-Json -Compress"


def lookup_vm(name: str) -> str:
    """Bind ``$vm`` or exit with the not-found code."""
    message = ps_quote(f"VM {name} not found")
    return (
        f"$vm = Get-VM -Name {ps_quote(name)} -ErrorAction SilentlyContinue | Select-Object -First 1\n"
        f"if (-not $vm) {{ [Console]::Error.WriteLine({message}); exit {NOT_FOUND_EXIT_CODE} }}"
    )
