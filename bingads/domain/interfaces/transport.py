"""Interface for RPC transports.

Defines the contract for sending one operation to a remote SOAP service.
Serialization, connections and timeouts belong to the concrete transport.
"""

import abc
from typing import Any

from ..models.common import OperationName, Payload


class RpcTransport(abc.ABC):
    """Abstract Base Class for a single remote operation invocation."""

    @abc.abstractmethod
    def invoke(self, operation: OperationName, payload: Payload) -> Any:
        """Sends one request and returns the parsed response.

        Args:
            operation: The name of the remote operation (e.g. 'get_campaigns').
            payload: Operation arguments, passed through untouched.

        Returns:
            The parsed response, usually a nested mapping with an
            ``envelope`` / ``body`` structure.

        Raises:
            StructuredFault: The service answered with a fault body.
            NetworkError: Connection, timeout or HTTP failure.
            InvalidResponse: The response could not be parsed.
        """
        pass
