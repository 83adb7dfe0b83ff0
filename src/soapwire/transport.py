# soapwire/transport.py
"""
HTTP transport for SOAP requests.

The transport only moves bytes: it posts the envelope and returns the
status code, reason phrase and body of whatever came back. HTTP error
statuses are NOT raised here; classifying the response is the job of the
ResponseInterpreter. Network-level failures (timeouts, connection errors)
propagate as requests exceptions.
"""

import logging
from types import TracebackType
from typing import NamedTuple

import requests

from soapwire.models import SoapVersion

logger: logging.Logger = logging.getLogger(__name__)


class TransportResponse(NamedTuple):
    """Status code, reason phrase and raw body of an HTTP response."""

    status_code: int
    reason: str
    body: bytes


def build_soap_headers(content_type: str, soap_action: str = '') -> dict[str, str]:
    """
    Build the HTTP headers for a SOAP request.

    SOAP 1.1 identifies the operation with a SOAPAction header. SOAP 1.2
    carries it as the 'action' parameter of the Content-Type instead.

    Args:
        content_type: The SOAP version's content type.
        soap_action: The SOAP action. May be empty.

    Returns:
        A dictionary of HTTP headers ready for the request.
    """
    if content_type == SoapVersion.V1_2.content_type:
        full_content_type: str = f'{content_type}; charset=utf-8'
        if soap_action:
            full_content_type += f'; action="{soap_action}"'
        return {'Content-Type': full_content_type, 'Accept': f'{content_type}, text/xml'}

    return {
        'Content-Type': f'{content_type}; charset=utf-8',
        'Accept': 'text/xml',
        'SOAPAction': f'"{soap_action}"',
    }


class HttpTransport:
    """
    Sends SOAP envelopes with requests.

    Attributes:
        timeout: (connect, read) timeouts in seconds.
        verify_ssl: Whether to verify SSL certificates.
        session: The requests session used for all requests.

    Usage:
        >>> with HttpTransport(timeout=(5.0, 30.0)) as transport:
        ...     response = transport.post(url, envelope_bytes, 'text/xml', 'getUser')
    """

    def __init__(
        self,
        timeout: tuple[float, float] = (10.0, 30.0),
        verify_ssl: bool = True,
        session: requests.Session | None = None,
    ) -> None:
        self.timeout: tuple[float, float] = timeout
        self.verify_ssl: bool = verify_ssl
        self._owns_session: bool = session is None
        self.session: requests.Session = session if session is not None else requests.Session()

    def post(
        self,
        url: str,
        payload: bytes,
        content_type: str,
        soap_action: str = '',
    ) -> TransportResponse:
        """
        POST a SOAP envelope and return the raw response.

        Args:
            url: The SOAP endpoint.
            payload: The envelope, encoded as UTF-8.
            content_type: The SOAP version's content type.
            soap_action: The SOAP action of the operation.

        Returns:
            The status code, reason phrase and body bytes.

        Raises:
            requests.exceptions.Timeout: If the request times out.
            requests.exceptions.RequestException: For other network-level errors.
        """
        headers: dict[str, str] = build_soap_headers(content_type, soap_action)

        try:
            logger.debug(
                'Sending SOAP request to %r (connect/read timeout=%r)', url, self.timeout
            )
            logger.debug('***REQUEST HEADERS***')
            logger.debug('\n'.join(f'  {k}: {v}' for k, v in headers.items()))
            logger.debug('***REQUEST BODY (XML)***')
            logger.debug(payload.decode('utf-8', errors='replace'))

            response: requests.Response = self.session.post(
                url,
                data=payload,
                headers=headers,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )

        except requests.exceptions.Timeout as timeout_error:
            logger.error(
                'Request timeout for action %r after %r: %r',
                soap_action,
                self.timeout,
                timeout_error,
            )
            raise

        except requests.exceptions.RequestException as request_error:
            logger.error('Network error for action %r: %r', soap_action, request_error)
            raise

        logger.debug(
            'Received response for action %r: HTTP %r', soap_action, response.status_code
        )
        return TransportResponse(
            status_code=response.status_code,
            reason=response.reason or '',
            body=response.content or b'',
        )

    def close(self) -> None:
        """Close the underlying session if this transport created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> 'HttpTransport':
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        _exc_value: BaseException | None,
        _traceback: TracebackType | None,
    ) -> None:
        self.close()
