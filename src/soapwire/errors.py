# soapwire/errors.py
"""
Exceptions raised by soapwire.

SOAP faults and HTTP errors are only raised when the response policy
'raise_errors' is enabled (the default). With the policy disabled the
same information is available on the returned CallOutcome.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from soapwire.models import FaultRecord
    from soapwire.response import CallOutcome


class SoapwireError(Exception):
    """Base class for all soapwire errors."""


class SoapFaultError(SoapwireError):
    """
    The remote endpoint answered with a SOAP fault.

    Attributes:
        fault: The normalised fault code and message.
        outcome: The interpreted response that carried the fault.
    """

    def __init__(
        self,
        message: str,
        fault: 'FaultRecord | None' = None,
        outcome: 'CallOutcome | None' = None,
    ) -> None:
        super().__init__(message)
        self.fault = fault
        self.outcome = outcome


class HttpError(SoapwireError):
    """
    The HTTP status code signalled an error (greater than 299).

    Attributes:
        status_code: The HTTP status code.
        reason: The HTTP reason phrase.
        body: The response body text.
        outcome: The interpreted response.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        reason: str = '',
        body: str = '',
        outcome: 'CallOutcome | None' = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.body = body
        self.outcome = outcome


class UnknownOperationError(SoapwireError, LookupError):
    """No operation with the requested name exists in the operation table."""


class MissingEndpointError(SoapwireError, ValueError):
    """Neither the operation, the client nor the configuration define an endpoint."""
