# soapwire/response.py
"""
Interpretation of SOAP responses.

A completed HTTP exchange (status code, reason phrase and body) is turned
into a CallOutcome, which reports one of three results:

- SUCCESS: the body parsed (or not) without a fault and the status is OK,
- SOAP_FAULT: the SOAP Body contains a SOAP 1.1 or SOAP 1.2 Fault,
- HTTP_ERROR: the HTTP status code is greater than 299.

With the raise-errors policy enabled (the default) faults and HTTP errors
are raised as SoapFaultError and HttpError; otherwise the outcome carries
both conditions as independent flags and messages.
"""

import logging
from enum import StrEnum
from functools import cached_property
from typing import Any

from lxml import etree

from soapwire.errors import HttpError, SoapFaultError
from soapwire.models import FaultRecord
from soapwire.utils.config_loader import SoapwireConfig
from soapwire.utils.xml_tools import parse_soap_body, parse_soap_document

logger: logging.Logger = logging.getLogger(__name__)

# The maximum HTTP status code considered to be OK
MAX_NON_ERROR_STATUS_CODE: int = 299


class OutcomeKind(StrEnum):
    """The result category of a SOAP call."""

    SUCCESS = 'success'
    SOAP_FAULT = 'soap_fault'
    HTTP_ERROR = 'http_error'


class CallOutcome:
    """
    The interpreted result of one SOAP request.

    The response body is kept as received; the dictionary and lxml views of
    it are parsed on first access and cached.

    Attributes:
        status_code: The HTTP status code.
        reason: The HTTP reason phrase.
        body: The raw response body as bytes.
    """

    def __init__(self, status_code: int, reason: str, body: bytes | str) -> None:
        self.status_code: int = int(status_code)
        self.reason: str = reason or ''
        # Text bodies are parsed as text so their declared encoding is not reapplied
        self._source: bytes | str = body
        self.body: bytes = body.encode('utf-8') if isinstance(body, str) else body

    # --- Raw and parsed views ---

    @cached_property
    def text(self) -> str:
        """The response body as text (decoded as UTF-8 when given as bytes)."""
        if isinstance(self._source, str):
            return self._source
        return self.body.decode('utf-8', errors='replace')

    def to_xml(self) -> str:
        """Return the raw response XML."""
        return self.text

    def __str__(self) -> str:
        return self.text

    @cached_property
    def _body_map(self) -> dict[str, Any]:
        return parse_soap_body(self._source)

    def to_dict(self) -> dict[str, Any]:
        """
        Return the SOAP Body contents as a dictionary.

        Keys are snake_case local names without namespace prefixes. A body
        that is not well-formed XML yields an empty dictionary.
        """
        return self._body_map

    @cached_property
    def _document(self) -> etree._Element:
        return parse_soap_document(self._source)

    def document(self) -> etree._Element:
        """
        Return the response as an lxml element tree (root element).

        Raises:
            etree.XMLSyntaxError: If the body is not well-formed XML.
        """
        return self._document

    # --- SOAP fault ---

    @cached_property
    def fault(self) -> FaultRecord | None:
        """The normalised SOAP fault, or None if the body carries no fault."""
        return FaultRecord.from_fault(self.to_dict().get('fault'))

    @property
    def is_soap_fault(self) -> bool:
        return self.fault is not None

    @property
    def soap_fault(self) -> str:
        """The SOAP fault message, '(code) reason', or an empty string."""
        return str(self.fault) if self.fault is not None else ''

    # --- HTTP error ---

    @property
    def is_http_error(self) -> bool:
        return self.status_code > MAX_NON_ERROR_STATUS_CODE

    @property
    def http_error(self) -> str:
        """
        The HTTP error message, or an empty string.

        Format: '<reason> (<code>)', followed by ': <body>' when the body is
        not empty.
        """
        if not self.is_http_error:
            return ''
        message: str = f'{self.reason} ({self.status_code})'
        if self.body:
            message += f': {self.text}'
        return message

    # --- Summary ---

    @property
    def kind(self) -> OutcomeKind:
        """
        The single outcome category.

        A SOAP fault takes precedence over an HTTP error when both are present;
        use is_soap_fault and is_http_error to inspect both.
        """
        if self.is_soap_fault:
            return OutcomeKind.SOAP_FAULT
        if self.is_http_error:
            return OutcomeKind.HTTP_ERROR
        return OutcomeKind.SUCCESS

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def __repr__(self) -> str:
        return f'CallOutcome(kind={self.kind.value!r}, status_code={self.status_code!r})'


class ResponseInterpreter:
    """
    Classifies HTTP responses into CallOutcome objects.

    Attributes:
        raise_errors: Raise SoapFaultError and HttpError instead of returning
                      an outcome that carries them.

    Usage:
        >>> interpreter = ResponseInterpreter.from_config(config)
        >>> outcome = interpreter.interpret(200, 'OK', response_bytes)
        >>> outcome.to_dict()
    """

    def __init__(self, raise_errors: bool = True) -> None:
        self.raise_errors: bool = raise_errors

    @classmethod
    def from_config(cls, config: SoapwireConfig) -> 'ResponseInterpreter':
        """Create an interpreter using the configured raise-errors policy."""
        return cls(raise_errors=config.response.raise_errors)

    def interpret(self, status_code: int, reason: str, body: bytes | str) -> CallOutcome:
        """
        Interpret a completed HTTP exchange.

        The SOAP fault check runs first, then the HTTP status check. Under
        the raise policy the first condition found is raised.

        Args:
            status_code: The HTTP status code.
            reason: The HTTP reason phrase.
            body: The response body.

        Returns:
            The interpreted outcome.

        Raises:
            SoapFaultError: If the body contains a SOAP fault and raise_errors is set.
            HttpError: If status_code > 299 and raise_errors is set.
        """
        outcome: CallOutcome = CallOutcome(status_code, reason, body)

        if outcome.is_soap_fault:
            logger.warning('SOAP fault received: %s', outcome.soap_fault)
            if self.raise_errors:
                raise SoapFaultError(outcome.soap_fault, fault=outcome.fault, outcome=outcome)

        if outcome.is_http_error:
            logger.warning('HTTP error received: %s (%r)', outcome.reason, outcome.status_code)
            logger.debug('***RESPONSE BODY***')
            logger.debug(outcome.text)
            if self.raise_errors:
                raise HttpError(
                    outcome.http_error,
                    status_code=outcome.status_code,
                    reason=outcome.reason,
                    body=outcome.text,
                    outcome=outcome,
                )

        logger.debug('Interpreted response as %r', outcome)
        return outcome
