"""
CLI-specific formatting functions for human-readable output.

Machines and decommission reports render as Rich tables; everything else
falls back to JSON.
"""
import json
from typing import Any, Dict, List

import yaml
from rich.console import Console
from rich.table import Table

OUTCOME_STYLES = {
    "completed": "green",
    "not_found": "cyan",
    "skipped": "yellow",
    "failed": "bold red",
}


def format_output(data: Any, format_type: str) -> str:
    """Format data according to the specified format type."""
    if format_type == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    if format_type == "table":
        return format_table_output(data)
    return json.dumps(data, indent=2, default=str)


def format_table_output(data: Any) -> str:
    """Format data as a table."""
    if isinstance(data, dict) and "steps" in data:
        return format_report_table(data)
    if isinstance(data, dict) and "fqdn" in data:
        return format_machine_table(data)
    if isinstance(data, dict) and "error" in data:
        return format_error_table(data)
    return json.dumps(data, indent=2, default=str)


def format_machine_table(machine: Dict[str, Any]) -> str:
    table = Table(title=machine.get("name"), show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for label, key in [
        ("Host", "host"),
        ("FQDN", "fqdn"),
        ("Hardware address", "hardwareAddress"),
        ("IP address", "ipAddress"),
        ("Scope", "scopeId"),
        ("Storage", "storagePath"),
        ("Complete", "complete"),
    ]:
        value = machine.get(key)
        table.add_row(label, "N/A" if value is None else str(value))
    return _render(table)


def format_report_table(report: Dict[str, Any]) -> str:
    status = "succeeded" if report.get("succeeded") else "incomplete"
    table = Table(
        title=f"Decommission of {report.get('name')} on {report.get('host')}: {status}",
        show_header=True,
        header_style="bold magenta",
        show_lines=True,
    )
    table.add_column("Step", style="cyan")
    table.add_column("Outcome")
    table.add_column("Detail", overflow="fold")
    for step in report.get("steps", []):
        outcome = step.get("outcome", "")
        style = OUTCOME_STYLES.get(outcome, "")
        table.add_row(step.get("step", ""), f"[{style}]{outcome}[/{style}]" if style else outcome, step.get("detail", ""))
    return _render(table)


def format_error_table(payload: Dict[str, Any]) -> str:
    error = payload["error"]
    details = error.get("details") or {}
    lines: List[str] = [f"Error [{error.get('code')}]: {error.get('message')}"]
    if details.get("leftInPlace"):
        lines.append(f"Left in place: {', '.join(details['leftInPlace'])}")
    output = "\n".join(lines)
    report = details.get("report") or details.get("rollback")
    if report:
        output += "\n" + format_report_table(report)
    return output


def _render(table: Table) -> str:
    console = Console(width=120, legacy_windows=False, force_terminal=False)
    with console.capture() as capture:
        console.print(table)
    return capture.get()
