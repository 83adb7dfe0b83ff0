"""Pytest configuration and shared fixtures for soapwire tests."""

from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest
import yaml

from soapwire.models import Operation
from soapwire.transport import HttpTransport, TransportResponse
from soapwire.utils.config_loader import SoapwireConfig

AUTH_NAMESPACE = 'http://v1_0.ws.auth.order.example.com/'


@pytest.fixture
def sample_config_dict() -> dict[str, Any]:
    """Create a sample configuration dictionary for testing."""
    return {
        'soap': {
            'version': 1,
            'endpoint_url': 'https://test.example.com/api',
            'namespaces': {},
            'header': {},
        },
        'wsse': {
            'username': None,
            'password': None,
            'digest': False,
        },
        'response': {
            'raise_errors': True,
        },
        'client': {
            'request_timeout': [10, 30],
            'verify_ssl': True,
        },
        'logging': {
            'console_level': 'INFO',
        },
        'operations': {
            'authenticate': {
                'action': 'authenticate',
                'input': 'authenticate',
                'target_namespace': AUTH_NAMESPACE,
            },
            'getUser': {
                'action': 'getUser',
                'input': ['GetUserRequest', {'mode': 'full'}],
                'target_namespace': AUTH_NAMESPACE,
            },
        },
    }


@pytest.fixture
def sample_config(sample_config_dict: dict[str, Any]) -> SoapwireConfig:
    """Create a sample SoapwireConfig for testing."""
    return SoapwireConfig.model_validate(sample_config_dict)


@pytest.fixture
def quiet_config(sample_config: SoapwireConfig) -> SoapwireConfig:
    """A sample configuration with the raise-errors policy disabled."""
    return sample_config.model_copy(
        update={'response': sample_config.response.model_copy(update={'raise_errors': False})}
    )


@pytest.fixture
def temp_config_file(tmp_path: Path, sample_config_dict: dict[str, Any]) -> Path:
    """Create a temporary config file for testing."""
    config_path: Path = tmp_path / 'config.yaml'
    config_path.write_text(yaml.safe_dump(sample_config_dict, sort_keys=False))
    return config_path


@pytest.fixture
def authenticate_operation() -> Operation:
    """The 'authenticate' operation of the example authentication service."""
    return Operation(
        action='authenticate',
        input='authenticate',
        target_namespace=AUTH_NAMESPACE,
    )


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """A clock frozen at 2012-03-22T16:22:33Z."""
    return lambda: datetime(2012, 3, 22, 16, 22, 33, tzinfo=UTC)


@pytest.fixture
def fixed_ids() -> Callable[[], str]:
    """Return 'id-1', 'id-2', ... on successive calls."""
    counter: Iterator[int] = iter(range(1, 100))
    return lambda: f'id-{next(counter)}'


@pytest.fixture
def mock_soap_response() -> str:
    """Create a mock SOAP response for testing."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/">
    <soapenv:Body>
        <ns:getUserResponse xmlns:ns="http://v1_0.ws.auth.order.example.com/">
            <return>
                <id>666</id>
                <userName>jo</userName>
            </return>
        </ns:getUserResponse>
    </soapenv:Body>
</soapenv:Envelope>"""


@pytest.fixture
def mock_soap_fault() -> str:
    """Create a mock SOAP 1.1 fault response for testing."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/">
    <soapenv:Body>
        <soapenv:Fault>
            <faultcode>soapenv:Server</faultcode>
            <faultstring>Invalid credentials</faultstring>
        </soapenv:Fault>
    </soapenv:Body>
</soapenv:Envelope>"""


@pytest.fixture
def mock_soap12_fault() -> str:
    """Create a mock SOAP 1.2 fault response for testing."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<env:Envelope xmlns:env="http://www.w3.org/2003/05/soap-envelope">
    <env:Body>
        <env:Fault>
            <env:Code>
                <env:Value>env:Sender</env:Value>
            </env:Code>
            <env:Reason>
                <env:Text xml:lang="en">Unknown user</env:Text>
            </env:Reason>
        </env:Fault>
    </env:Body>
</env:Envelope>"""


@pytest.fixture
def mock_transport(mock_soap_response: str) -> Mock:
    """Create a mock HttpTransport answering every request with a success response."""
    transport = Mock(spec=HttpTransport)
    transport.post.return_value = TransportResponse(
        status_code=200,
        reason='OK',
        body=mock_soap_response.encode('utf-8'),
    )
    return transport
