# soapwire/__init__.py

from .envelope import EnvelopeBuilder
from .errors import (
    HttpError,
    MissingEndpointError,
    SoapFaultError,
    SoapwireError,
    UnknownOperationError,
)
from .models import FaultRecord, Operation, OperationTable, SoapVersion, WsseCredentials
from .response import CallOutcome, OutcomeKind, ResponseInterpreter
from .soap_client import SoapClient
from .transport import HttpTransport, TransportResponse
from .utils.config_loader import SoapwireConfig, load_config
from .wsse import SecurityHeaderGenerator

__all__: list[str] = [
    # response.py
    'CallOutcome',
    # envelope.py
    'EnvelopeBuilder',
    # models.py
    'FaultRecord',
    # errors.py
    'HttpError',
    # transport.py
    'HttpTransport',
    'MissingEndpointError',
    'Operation',
    'OperationTable',
    'OutcomeKind',
    'ResponseInterpreter',
    # wsse.py
    'SecurityHeaderGenerator',
    # soap_client.py
    'SoapClient',
    'SoapFaultError',
    'SoapVersion',
    # utils/config_loader.py
    'SoapwireConfig',
    'SoapwireError',
    'TransportResponse',
    'UnknownOperationError',
    'WsseCredentials',
    'load_config',
]
