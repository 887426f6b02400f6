"""
Rendering functions for gitversion output.

This module handles all pretty-printing and table formatting.
Core functions return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import Any, Dict, Optional

console = Console()


def render_version_table(info: Dict[str, Any], title: Optional[str] = None) -> None:
    """
    Render resolved version information as a two-column table.

    Args:
        info: Output of VersionSpec.to_dict(), or a dict with just name and code
        title: Optional table title
    """
    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    for key, value in info.items():
        if value is None:
            value = "[dim]-[/dim]"
        table.add_row(key, str(value))

    console.print(table)
