"""Base class for the Bing Ads v13 service objects.

A service is configured once (environment, retry budget, account ids,
credentials, transport) and then exposes ``call(operation, payload)``,
which runs through the CallExecutor.
"""

import abc
import logging
from typing import Any, Callable, Dict, Optional, Sequence

from bingads.domain.errors import AuthenticationParamsMissing, ConfigurationError, LimitError
from bingads.domain.interfaces.endpoints import EndpointResolver
from bingads.domain.interfaces.transport import RpcTransport
from bingads.domain.models.common import EndpointUrl, EnvironmentName, Payload, ServiceName
from bingads.infrastructure.config import settings
from bingads.infrastructure.config.endpoints import EndpointCatalog
from bingads.infrastructure.resilience.call_executor import CallExecutor
from bingads.infrastructure.resilience.fault_classifier import FaultClassifier

logger = logging.getLogger(__name__)

TransportFactory = Callable[[EndpointUrl, Dict[str, Any]], RpcTransport]


class BaseService(abc.ABC):
    """Caller-facing surface shared by every service."""

    def __init__(
        self,
        environment: Optional[str] = None,
        retry_attempts: Optional[int] = 0,
        developer_token: Optional[str] = None,
        customer_id: Optional[str] = None,
        account_id: Optional[str] = None,
        authentication_token: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        transport: Optional[RpcTransport] = None,
        transport_factory: Optional[TransportFactory] = None,
        endpoint_resolver: Optional[EndpointResolver] = None,
        classifier: Optional[FaultClassifier] = None,
        sleep: Optional[Callable[[float], None]] = None,
        client_settings: Optional[Dict[str, Any]] = None,
    ):
        """Initializes the service.

        Args:
            environment: 'production' or 'sandbox'. Mandatory.
            retry_attempts: Number of times a failed call may be retried.
            developer_token: Client application's developer access token.
            customer_id: Identifier of the customer that owns the account.
            account_id: Identifier of the account that owns the entities.
            authentication_token: OAuth2 token (or use username/password).
            username: Bing Ads username.
            password: Bing Ads password.
            transport: Ready-made transport for this service.
            transport_factory: Builds a transport from the endpoint and the
                client options when ``transport`` is not given.
            endpoint_resolver: Defaults to the packaged EndpointCatalog.
            classifier: Fault classifier handed to the CallExecutor.
            sleep: Blocking wait handed to the CallExecutor.
            client_settings: Extra transport options (headers, timeouts, ...).

        Raises:
            ConfigurationError: Missing environment, unknown service or bad
                retry count.
            AuthenticationParamsMissing: No usable credentials.
        """
        if not environment:
            raise ConfigurationError('You must set the service environment')

        retry_attempts = 0 if retry_attempts is None else retry_attempts
        if isinstance(retry_attempts, bool) or not isinstance(retry_attempts, int) or retry_attempts < 0:
            raise ConfigurationError(
                f"retry_attempts must be a non-negative integer, got {retry_attempts!r}"
            )

        if not authentication_token and not (username and password):
            raise AuthenticationParamsMissing(
                'Provide either an authentication_token or a username and password'
            )

        self.environment = EnvironmentName(str(environment))
        self.retry_attempts = retry_attempts
        self.developer_token = developer_token
        self.customer_id = customer_id
        self.account_id = account_id
        self.authentication_token = authentication_token
        self.username = username
        self.password = password
        self.client_settings = dict(client_settings or {})

        resolver = endpoint_resolver or EndpointCatalog()
        self.endpoint_url = resolver.resolve(self.environment, self.service_name)

        if transport is None:
            if transport_factory is None:
                raise ConfigurationError(
                    f"{type(self).__name__} needs a transport or a transport_factory"
                )
            transport = transport_factory(self.endpoint_url, self.client_options())
        self.transport = transport

        self.executor = CallExecutor(
            transport,
            max_retries=self.retry_attempts,
            classifier=classifier,
            sleep=sleep,
        )
        logger.info(
            f"{type(self).__name__} initialized: environment={self.environment}, "
            f"retry_attempts={self.retry_attempts}"
        )

    @property
    @abc.abstractmethod
    def service_name(self) -> ServiceName:
        """Service name as listed in the endpoint catalog."""

    @classmethod
    def from_settings(cls, **overrides: Any) -> "BaseService":
        """Builds the service from the settings layer; keyword overrides win."""
        settings.load_configuration()
        options: Dict[str, Any] = {
            'environment': settings.get_environment(),
            'retry_attempts': settings.get_retry_attempts(),
            'developer_token': settings.get_developer_token(),
            'customer_id': settings.get_customer_id(),
            'account_id': settings.get_account_id(),
        }
        options.update(settings.get_credentials())
        catalog_file = settings.get_config('endpoints.file')
        if catalog_file and 'endpoint_resolver' not in overrides:
            options['endpoint_resolver'] = EndpointCatalog.from_file(catalog_file)
        options.update(overrides)
        return cls(**options)

    def client_options(self) -> Dict[str, Any]:
        """Options a transport needs to build its request headers."""
        options: Dict[str, Any] = {
            'environment': self.environment,
            'developer_token': self.developer_token,
            'customer_id': self.customer_id,
            'account_id': self.account_id,
        }
        if self.authentication_token:
            options['authentication_token'] = self.authentication_token
        else:
            options['username'] = self.username
            options['password'] = self.password
        options.update(self.client_settings)
        return options

    def call(self, operation: str, payload: Optional[Payload] = None) -> Any:
        """Calls ``operation`` on this service, retrying as configured.

        Example:
            service.call('get_campaigns_by_account_id', {'account_id': 123})

        Raises:
            BingAdsError: One of the call taxonomy errors, or the transport's
                own failure once retries are exhausted.
        """
        return self.executor.execute(operation, payload)

    async def call_async(self, operation: str, payload: Optional[Payload] = None) -> Any:
        return await self.executor.execute_async(operation, payload)

    @staticmethod
    def response_body(response: Dict[str, Any], method: str) -> Any:
        """Extracts ``<method>_response`` from a full envelope/body response."""
        return response['envelope']['body'][f"{method}_response"]

    @staticmethod
    def ensure_limit(operation: str, items: Sequence[Any], limit: int, entity_type: str) -> None:
        if len(items) > limit:
            raise LimitError(operation, limit, entity_type)
