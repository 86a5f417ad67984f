"""
Rich terminal output helpers for CLI.

Provides functions for printing record tables, health status and
status messages using the Rich library.
"""

import json
from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from datagate.core.models import HealthStatus, PaginatedResult, Record

# Console instance for all output
console = Console()


def _columns(records: list[Record]) -> list[str]:
    """Collect column names in first-seen order, with id first."""
    columns: list[str] = []
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)
    if "id" in columns:
        columns.remove("id")
        columns.insert(0, "id")
    return columns


def _cell(value: Any) -> str | Text:
    if value is None:
        return Text("null", style="dim")
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def print_records_table(table_name: str, result: PaginatedResult) -> None:
    """Print one page of records as a table.

    Args:
        table_name: Name of the queried table, used as the title.
        result: Page to display.
    """
    if not result.data:
        print_info(f"No records in {table_name} matched ({result.count} total).")
        return

    table = Table(
        title=table_name,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )

    columns = _columns(result.data)
    for column in columns:
        table.add_column(column, style="cyan" if column == "id" else None, no_wrap=column == "id")

    for record in result.data:
        table.add_row(*(_cell(record.get(column)) for column in columns))

    console.print()
    console.print(table)

    first = result.offset + 1
    last = result.offset + len(result.data)
    console.print(f"[bold]Showing[/] {first}-{last} of {result.count}")
    if result.has_more:
        console.print(f"  [dim]More records available; use --offset {last}[/]")


def print_health(provider: str, status: HealthStatus) -> None:
    """Print adapter health."""
    if status.ok:
        console.print(f"[bold green]OK[/] {provider} responded in {status.latency_ms} ms")
    else:
        console.print(f"[bold red]DOWN[/] {provider} is unreachable")


def print_json(data: Any) -> None:
    """Print data as pretty JSON."""
    console.print_json(json.dumps(data, default=str))


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[cyan]Info:[/] {message}")
