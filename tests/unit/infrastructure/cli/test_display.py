import pytest
from unittest.mock import MagicMock

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from bingads.domain.models.call import ClassifiedError, FaultKind
from bingads.infrastructure.cli import display
from bingads.infrastructure.cli.display import ConsoleDisplay


@pytest.fixture
def mock_console():
    """Fixture to create a mock rich Console object."""
    return MagicMock(spec=Console)


@pytest.fixture
def console_display(mock_console: MagicMock):
    return ConsoleDisplay(console=mock_console)


def test_module_is_documented():
    assert display.__doc__
    assert "command-line" in display.__doc__


def test_display_error_prints_a_panel(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_error("Unknown service 'bulk'")

    mock_console.print.assert_called_once()
    panel = mock_console.print.call_args.args[0]
    assert isinstance(panel, Panel)
    assert "Error" in panel.title
    assert panel.renderable.plain == "Unknown service 'bulk'"


def test_display_services_prints_one_row_per_service(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_services("sandbox", [("bulk", "https://bulk"), ("reporting", "https://reporting")])

    table = mock_console.print.call_args.args[0]
    assert isinstance(table, Table)
    assert table.row_count == 2
    assert "sandbox" in table.title


def test_display_classification_names_error_type():
    console = Console(record=True, width=120)
    classified = ClassifiedError(FaultKind.BULK_RATE_LIMITED, "Bulk API Rate limit exceeded.", 950)

    ConsoleDisplay(console=console).display_classification("get_bulk_upload_url", classified)

    output = console.export_text()
    assert "BulkRateLimited" in output
    assert "900-1080s" in output
    assert "get_bulk_upload_url" in output
