"""Remote execution against Windows endpoints."""

from .powershell import NOT_FOUND_EXIT_CODE, PowerShellRunner, as_list, ps_quote

__all__ = ["PowerShellRunner", "NOT_FOUND_EXIT_CODE", "ps_quote", "as_list"]
