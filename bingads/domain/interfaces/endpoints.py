"""Interface for endpoint resolution.

Maps an environment and a service name to the address of that service.
"""

import abc
from typing import List

from ..models.common import EndpointUrl, EnvironmentName, ServiceName


class EndpointResolver(abc.ABC):
    """Abstract Base Class for looking up service endpoints."""

    @abc.abstractmethod
    def resolve(self, environment: EnvironmentName, service_name: ServiceName) -> EndpointUrl:
        """Returns the endpoint of ``service_name`` in ``environment``.

        Raises:
            ConfigurationError: If the environment or service is unknown.
        """
        pass

    @abc.abstractmethod
    def services(self, environment: EnvironmentName) -> List[ServiceName]:
        """Lists the service names known for ``environment``."""
        pass
