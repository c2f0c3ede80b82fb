"""Main entry point for the bingads command line.

Sets up the Typer application, wires the dependencies (composition root)
and exposes diagnostic commands: endpoint lookup and fault classification.
No remote call is made from here.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer
import yaml
from typing_extensions import Annotated

from bingads.domain.errors import BingAdsError
from bingads.domain.models.call import FaultDetail
from bingads.domain.models.common import EnvironmentName, ServiceName
from bingads.infrastructure.cli.display import ConsoleDisplay
from bingads.infrastructure.config.endpoints import EndpointCatalog
from bingads.infrastructure.config.settings import get_config, get_environment, load_configuration
from bingads.infrastructure.monitoring.logger_setup import level_from_name, setup_logging
from bingads.infrastructure.resilience.fault_classifier import FaultClassifier

logger = logging.getLogger(__name__)

DEFAULT_ENVIRONMENT = "production"

app = typer.Typer(
    name="bingads",
    help="Bing Ads v13 service helper: endpoint lookup and SOAP fault diagnosis.",
    add_completion=False,
)


def create_dependencies(endpoints_file: Optional[Path] = None) -> Dict[str, Any]:
    """Creates and wires up the objects used by the commands."""
    catalog_file = endpoints_file or get_config('endpoints.file')
    return {
        'ui': ConsoleDisplay(),
        'endpoints': EndpointCatalog.from_file(Path(catalog_file)) if catalog_file else EndpointCatalog(),
        'classifier': FaultClassifier(),
    }


def _fail(ctx: typer.Context, error: Exception) -> None:
    logger.debug(f"Command failed: {error}", exc_info=True)
    ctx.obj['ui'].display_error(str(error))
    raise typer.Exit(code=1)


EnvironmentOption = Annotated[
    Optional[str],
    typer.Option("--environment", "-e", help="'production' or 'sandbox'. Defaults to the configured environment."),
]


def _environment(value: Optional[str]) -> EnvironmentName:
    return EnvironmentName(value or get_environment() or DEFAULT_ENVIRONMENT)


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: Annotated[str, typer.Option("--log-level", help="Logging level (debug, info, warning, error).")] = "warning",
    endpoints_file: Annotated[
        Optional[Path],
        typer.Option("--endpoints-file", exists=True, dir_okay=False, help="YAML endpoint catalog to use instead of the packaged one."),
    ] = None,
):
    """Load configuration, set up logging and build the dependencies."""
    load_configuration()
    setup_logging(log_level=level_from_name(log_level, logging.WARNING))
    try:
        ctx.obj = create_dependencies(endpoints_file)
    except BingAdsError as e:
        ConsoleDisplay().display_error(str(e))
        raise typer.Exit(code=1)


@app.command()
def endpoint(
    ctx: typer.Context,
    service: Annotated[str, typer.Argument(help="Service name, e.g. campaign_management.")],
    environment: EnvironmentOption = None,
):
    """Print the endpoint of SERVICE."""
    try:
        url = ctx.obj['endpoints'].resolve(_environment(environment), ServiceName(service))
    except BingAdsError as e:
        _fail(ctx, e)
    typer.echo(url)


@app.command()
def services(
    ctx: typer.Context,
    environment: EnvironmentOption = None,
):
    """List the known services and their endpoints."""
    env = _environment(environment)
    catalog: EndpointCatalog = ctx.obj['endpoints']
    try:
        rows = [(name, catalog.resolve(env, name)) for name in catalog.services(env)]
    except BingAdsError as e:
        _fail(ctx, e)
    ctx.obj['ui'].display_services(env, rows)


@app.command()
def classify(
    ctx: typer.Context,
    fault_file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="JSON or YAML file holding a parsed SOAP fault."),
    ],
    operation: Annotated[str, typer.Option("--operation", "-o", help="Operation the fault came from.")] = "unknown_operation",
):
    """Show how a SOAP fault would be handled by the call executor."""
    try:
        fault = yaml.safe_load(fault_file.read_text(encoding='utf-8'))
    except yaml.YAMLError as e:
        _fail(ctx, BingAdsError(f"Could not parse {fault_file}: {e}"))

    if isinstance(fault, dict) and isinstance(fault.get('fault'), dict):
        fault = fault['fault']

    detail = FaultDetail.from_fault(fault)
    if detail is None:
        keys = ", ".join(fault) if isinstance(fault, dict) else type(fault).__name__
        ctx.obj['ui'].display_info(
            f"Unrecognized fault layout ({keys}): retried with exponential backoff, "
            f"then raised as UnhandledFault."
        )
        return

    classified = ctx.obj['classifier'].classify(operation, detail)
    logger.debug(f"Classified fault as {classified.kind.value}, wait={classified.wait_seconds}")
    ctx.obj['ui'].display_classification(operation, classified)


def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
