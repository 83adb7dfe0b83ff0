# soapwire/soap_client.py
"""
SOAP API Client

This module provides a high-level client that ties the soapwire pieces
together: it resolves operations from an operation table, builds envelopes
(with optional WS-Security headers), sends them over HTTP and interprets
the responses.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from types import TracebackType
from typing import Any

from soapwire.envelope import BodyContent, EnvelopeBuilder
from soapwire.errors import MissingEndpointError
from soapwire.models import Operation, OperationTable, SoapVersion, WsseCredentials
from soapwire.response import CallOutcome, ResponseInterpreter
from soapwire.transport import HttpTransport, TransportResponse
from soapwire.utils.config_loader import SoapwireConfig, load_config
from soapwire.utils.logger import setup_logger_from_config
from soapwire.utils.merge import HeaderContent
from soapwire.wsse import SecurityHeaderGenerator

# Set up module-level logger
logger: logging.Logger = logging.getLogger(__name__)


class SoapClient:
    """
    Client for calling operations of a SOAP service.

    The client is a thin coordinator; each step is handled by its own
    component:
    - OperationTable resolves operation names to Operation records
    - SecurityHeaderGenerator builds the WS-Security header
    - EnvelopeBuilder renders the SOAP envelope
    - HttpTransport sends it
    - ResponseInterpreter classifies the response

    The configuration is immutable and read at every call; to change a
    default, create a new configuration (e.g. config.with_soap_version(2))
    and a new client.

    Attributes:
        config: The configuration supplying all call defaults.
        endpoint: The default endpoint for operations that carry none.
        operations: The operation table used by name lookups.
        transport: The HTTP transport.
        interpreter: The response interpreter.

    Usage:
        Context Manager (Recommended):
            >>> with SoapClient('https://example.com/service', operations=table) as client:
            ...     outcome = client.call('getUser', {'id': 666})
            ...     outcome.to_dict()

        Non-raising calls:
            >>> config = SoapwireConfig(response={'raise_errors': False})
            >>> client = SoapClient(endpoint, config=config, operations=table)
            >>> outcome = client.call('getUser', {'id': 666})
            >>> if outcome.is_soap_fault:
            ...     print(outcome.soap_fault)
    """

    def __init__(
        self,
        endpoint: str | None = None,
        *,
        operations: OperationTable | Mapping[str, Operation | Mapping[str, Any]] | None = None,
        config_path: Path | None = None,
        config: SoapwireConfig | None = None,
        transport: HttpTransport | None = None,
    ) -> None:
        """
        Initialize the SOAP client.

        Args:
            endpoint: Default endpoint URL. Falls back to soap.endpoint_url
                      from the configuration.
            operations: Operation table (or a plain mapping). Falls back to
                        the 'operations' section of the configuration.
            config_path: Optional path to a configuration file. Ignored if
                         config is given. If both are None, the default
                         configuration file is loaded.
            config: Optional pre-loaded SoapwireConfig instance.
            transport: Optional transport. Defaults to an HttpTransport using
                       the configured timeouts and SSL verification. An
                       injected transport is not closed by close().

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            ValidationError: If the config file is invalid.
        """
        if config is not None:
            # Use the injected configuration (Dependency Injection)
            self.config: SoapwireConfig = config
            logger.debug('Initializing SoapClient with injected configuration')
        else:
            if config_path is not None:
                logger.info('Loading soapwire configuration from: %r', config_path)
            else:
                logger.info('Loading soapwire configuration from default location')
            self.config = load_config(config_path)
            setup_logger_from_config(self.config.logging)

        configured_endpoint: str | None = (
            str(self.config.soap.endpoint_url) if self.config.soap.endpoint_url else None
        )
        self.endpoint: str | None = endpoint or configured_endpoint

        if operations is None:
            self.operations: OperationTable = self.config.operation_table()
        elif isinstance(operations, OperationTable):
            self.operations = operations
        else:
            self.operations = OperationTable(operations)

        self._owns_transport: bool = transport is None
        self.transport: HttpTransport = transport or HttpTransport(
            timeout=self.config.client.request_timeout,
            verify_ssl=self.config.client.verify_ssl,
        )
        self.interpreter: ResponseInterpreter = ResponseInterpreter.from_config(self.config)

        logger.debug(
            'SoapClient ready (endpoint=%r, %d operations)', self.endpoint, len(self.operations)
        )

    def operation(self, operation: str | Operation) -> Operation:
        """
        Resolve an operation by name, or pass an Operation through unchanged.

        Raises:
            UnknownOperationError: If the name is not in the operation table.
        """
        if isinstance(operation, Operation):
            return operation
        return self.operations.resolve(operation)

    def security_header(self, wsse: WsseCredentials | None = None) -> str:
        """
        Build the WS-Security header from configured and per-call credentials.

        Returns:
            The header fragment, or an empty string if no username and
            password are available.
        """
        credentials: WsseCredentials = self.config.wsse.merged_with(wsse)
        return SecurityHeaderGenerator(credentials).header()

    def build_envelope(
        self,
        operation: str | Operation,
        body: BodyContent = None,
        *,
        namespaces: Mapping[str, str] | None = None,
        header: HeaderContent = None,
        version: SoapVersion | int | str | None = None,
        wsse: WsseCredentials | None = None,
    ) -> EnvelopeBuilder:
        """
        Create the envelope builder for one call.

        Args:
            operation: Operation name or Operation record.
            body: Call body: a mapping or a raw XML string.
            namespaces: Per-call namespaces.
            header: Per-call header content (mapping or raw XML).
            version: Per-call SOAP version. Unsupported values are ignored.
            wsse: Per-call WS-Security credentials, merged over the
                  configured ones.

        Returns:
            An EnvelopeBuilder, not yet rendered.
        """
        return EnvelopeBuilder(
            self.operation(operation),
            body,
            config=self.config,
            namespaces=namespaces,
            header=header,
            version=version,
            security_header=self.security_header(wsse),
        )

    def _endpoint_for(self, operation: Operation) -> str:
        endpoint: str | None = operation.endpoint or self.endpoint
        if not endpoint:
            raise MissingEndpointError(
                f'No endpoint for operation {operation.action!r}: set Operation.endpoint, '
                f'the client endpoint, or soap.endpoint_url in the configuration.'
            )
        return endpoint

    def send(self, envelope: EnvelopeBuilder) -> CallOutcome:
        """
        Send a built envelope and interpret the response.

        Raises:
            MissingEndpointError: If no endpoint is known for the operation.
            SoapFaultError: On a SOAP fault, if the raise policy is enabled.
            HttpError: On an HTTP status > 299, if the raise policy is enabled.
            requests.exceptions.RequestException: For network-level errors.
        """
        endpoint: str = self._endpoint_for(envelope.operation)
        logger.info('Calling SOAP action %r at %r', envelope.operation.action, endpoint)

        response: TransportResponse = self.transport.post(
            endpoint,
            envelope.to_bytes(),
            envelope.content_type,
            envelope.operation.action,
        )
        return self.interpreter.interpret(response.status_code, response.reason, response.body)

    def call(
        self,
        operation: str | Operation,
        body: BodyContent = None,
        *,
        namespaces: Mapping[str, str] | None = None,
        header: HeaderContent = None,
        version: SoapVersion | int | str | None = None,
        wsse: WsseCredentials | None = None,
    ) -> CallOutcome:
        """
        Call a SOAP operation.

        This method coordinates the execution of a SOAP call by:
        1. Resolving the operation
        2. Building the envelope, including the WS-Security header
        3. Sending the request and interpreting the response

        Args:
            operation: Operation name (looked up in the operation table) or
                       an Operation record.
            body: Call body: a mapping or a raw XML string.
            namespaces: Per-call namespaces.
            header: Per-call header content.
            version: Per-call SOAP version.
            wsse: Per-call WS-Security credentials.

        Returns:
            The interpreted CallOutcome.

        Raises:
            UnknownOperationError: If the operation name is unknown.
            MissingEndpointError: If no endpoint is known for the operation.
            SoapFaultError: On a SOAP fault, if the raise policy is enabled.
            HttpError: On an HTTP status > 299, if the raise policy is enabled.
            requests.exceptions.RequestException: For network-level errors.

        Example:
            >>> outcome = client.call(
            ...     'authenticate',
            ...     {'id': 666},
            ...     wsse=WsseCredentials(username='jo', password='secret', digest=True),
            ... )
        """
        envelope: EnvelopeBuilder = self.build_envelope(
            operation,
            body,
            namespaces=namespaces,
            header=header,
            version=version,
            wsse=wsse,
        )
        return self.send(envelope)

    def close(self) -> None:
        """
        Release the HTTP session of a transport this client created.

        An injected transport belongs to the caller and is left open.
        """
        if self._owns_transport:
            logger.debug('Closing SoapClient transport')
            self.transport.close()

    def __enter__(self) -> 'SoapClient':
        logger.debug('Entering SoapClient context manager')
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        _exc_value: BaseException | None,
        _traceback: TracebackType | None,
    ) -> None:
        """
        Exit the context manager and close the transport.

        This method does not suppress exceptions raised in the with block.
        """
        logger.debug(
            'Exiting SoapClient context manager (exception occurred: %s)',
            exc_type is not None,
        )
        self.close()

    def __repr__(self) -> str:
        return (
            f'SoapClient('
            f'endpoint={self.endpoint}, '
            f'operations={len(self.operations)}'
            f')'
        )
