"""Endpoint catalog for the Bing Ads v13 services.

Resolves an environment ('production' / 'sandbox') and a service name to
the service's WSDL address. The packaged endpoints.yaml is the default
source; another YAML file with the same layout can replace it.
"""

import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from bingads.domain.errors import ConfigurationError
from bingads.domain.interfaces.endpoints import EndpointResolver
from bingads.domain.models.common import EndpointUrl, EnvironmentName, ServiceName

logger = logging.getLogger(__name__)

PACKAGED_CATALOG = "endpoints.yaml"


def load_catalog(path: Optional[Path] = None) -> Dict[str, Dict[str, str]]:
    """Reads an endpoint catalog from ``path`` or from the packaged file."""
    if path is not None:
        text = Path(path).read_text(encoding='utf-8')
        source = str(path)
    else:
        text = resources.files(__package__).joinpath(PACKAGED_CATALOG).read_text(encoding='utf-8')
        source = PACKAGED_CATALOG

    data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise ConfigurationError(f"Endpoint catalog {source} must map environments to services")
    logger.debug(f"Loaded endpoint catalog from {source}: environments={sorted(data)}")
    return data


class EndpointCatalog(EndpointResolver):
    """EndpointResolver backed by a nested {environment: {service: url}} mapping."""

    def __init__(self, catalog: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self.catalog = catalog if catalog is not None else load_catalog()

    @classmethod
    def from_file(cls, path: Path) -> "EndpointCatalog":
        return cls(load_catalog(path))

    def _environment(self, environment: EnvironmentName) -> Mapping[str, Any]:
        services = self.catalog.get(str(environment))
        if not isinstance(services, Mapping):
            known = ", ".join(sorted(self.catalog))
            raise ConfigurationError(
                f"Unknown environment '{environment}' (expected one of: {known})"
            )
        return services

    def resolve(self, environment: EnvironmentName, service_name: ServiceName) -> EndpointUrl:
        services = self._environment(environment)
        url = services.get(str(service_name))
        if not url:
            raise ConfigurationError(
                f"Unknown service '{service_name}' for environment '{environment}'"
            )
        return EndpointUrl(str(url))

    def services(self, environment: EnvironmentName) -> List[ServiceName]:
        return [ServiceName(name) for name in sorted(self._environment(environment))]
