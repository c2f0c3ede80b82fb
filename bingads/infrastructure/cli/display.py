"""Rich console output for the bingads command-line interface.

Renders errors, informational notes, service endpoint tables and fault
classifications. Nothing here talks to the network.
"""

import logging
from typing import Iterable, Optional, Tuple

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from bingads.domain.models.call import ClassifiedError

logger = logging.getLogger(__name__)


class ConsoleDisplay:
    """Renders CLI results with the rich library."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    @property
    def console(self) -> Console:
        return self._console

    def display_error(self, error_message: str) -> None:
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_services(self, environment: str, rows: Iterable[Tuple[str, str]]) -> None:
        """Shows a (service, endpoint) table for one environment."""
        table = Table(title=f"Bing Ads services ({environment})", box=ROUNDED)
        table.add_column("Service", style="cyan", no_wrap=True)
        table.add_column("Endpoint", overflow="fold")
        for service_name, url in rows:
            table.add_row(service_name, url)
        self.console.print(table)

    def display_classification(self, operation: str, classified: ClassifiedError) -> None:
        """Shows how a fault would be handled by the call executor."""
        table = Table(box=SIMPLE, show_header=False)
        table.add_column("Field", style="bold")
        table.add_column("Value", overflow="fold")
        table.add_row("Operation", operation)
        table.add_row("Kind", classified.kind.value)
        table.add_row("Retryable", "yes" if classified.is_retryable else "no")
        error_type = type(classified.to_exception(operation))
        wait_range = getattr(error_type, "wait_range", None)
        if wait_range:
            table.add_row("Wait range", f"{wait_range[0]}-{wait_range[1]}s")
        table.add_row("Message", classified.message)
        border = "yellow" if classified.is_retryable else "red"
        self.console.print(Panel(table, title=f"[bold]{error_type.__name__}[/bold]", border_style=border))
