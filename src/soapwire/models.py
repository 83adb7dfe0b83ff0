# soapwire/models.py
"""
Pydantic models describing SOAP operations and their call parameters.

These models are immutable: an Operation or a set of credentials is
built once (from a WSDL, a YAML file or code) and then shared freely
between envelope builds.
"""

import logging
from collections.abc import Iterator, Mapping
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from soapwire.errors import UnknownOperationError
from soapwire.utils.xml_tools import snake_case, text_of

logger: logging.Logger = logging.getLogger(__name__)

# (element name, ordered attribute map)
InputSpec = str | tuple[str, dict[str, str]] | None


def _attribute_text(value: Any) -> str:
    """Render a root element attribute value as XML attribute text."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


class SoapVersion(IntEnum):
    """
    Supported SOAP versions.

    Each version maps to a fixed envelope namespace URI and HTTP
    content type.
    """

    V1_1 = 1
    V1_2 = 2

    @property
    def namespace(self) -> str:
        """The envelope namespace URI for this version."""
        return _ENVELOPE_NAMESPACES[self]

    @property
    def content_type(self) -> str:
        """The HTTP Content-Type for requests of this version."""
        return _CONTENT_TYPES[self]

    @classmethod
    def coerce(cls, value: Any, fallback: 'SoapVersion') -> 'SoapVersion':
        """
        Convert a user-supplied version, keeping the fallback if unsupported.

        Accepts SoapVersion members, the integers 1 and 2, and the strings
        '1', '2', '1.1' and '1.2'. Anything else is ignored silently and the
        fallback is returned unchanged.

        Example:
            >>> SoapVersion.coerce('1.2', SoapVersion.V1_1)
            <SoapVersion.V1_2: 2>
            >>> SoapVersion.coerce(3, SoapVersion.V1_1)
            <SoapVersion.V1_1: 1>
        """
        if isinstance(value, SoapVersion):
            return value

        version: SoapVersion | None = _VERSION_ALIASES.get(str(value).strip())
        if version is None:
            logger.debug('Ignoring unsupported SOAP version %r, keeping %r', value, fallback)
            return fallback
        return version


_ENVELOPE_NAMESPACES: dict[SoapVersion, str] = {
    SoapVersion.V1_1: 'http://schemas.xmlsoap.org/soap/envelope/',
    SoapVersion.V1_2: 'http://www.w3.org/2003/05/soap-envelope',
}

_CONTENT_TYPES: dict[SoapVersion, str] = {
    SoapVersion.V1_1: 'text/xml',
    SoapVersion.V1_2: 'application/soap+xml',
}

_VERSION_ALIASES: dict[str, SoapVersion] = {
    '1': SoapVersion.V1_1,
    '1.1': SoapVersion.V1_1,
    '2': SoapVersion.V1_2,
    '1.2': SoapVersion.V1_2,
}


class Operation(BaseModel):
    """
    A remote SOAP operation, as described by a WSDL.

    Attributes:
        action: The SOAP action name. Also the fallback name of the Body's
                root element when no input is given.
        input: The Body's root element: absent, a single element name, or
               an (element name, attribute map) pair.
        target_namespace: The WSDL target namespace, bound to the 'wsdl'
                          prefix in the envelope.
        endpoint: Optional endpoint URL for this operation. Overrides the
                  client endpoint when set.
    """

    model_config = ConfigDict(frozen=True, extra='forbid')

    action: str = ''
    input: InputSpec = None
    target_namespace: str | None = None
    endpoint: str | None = None

    @field_validator('input', mode='before')
    @classmethod
    def normalize_input(cls, v: Any) -> Any:
        """
        Treat empty names as absent and lists (from YAML) as pairs.

        Attribute values of a pair are converted to strings, so YAML numbers
        and booleans ('version: 1.2', 'strict: true') are accepted.
        """
        if v == '' or v == [] or v == ():
            return None
        pair_length: int = 2
        if isinstance(v, list | tuple) and len(v) == pair_length and isinstance(v[1], Mapping):
            name, attributes = v
            return name, {key: _attribute_text(value) for key, value in attributes.items()}
        if isinstance(v, list):
            return tuple(v)
        return v

    def root_element(self) -> tuple[str, dict[str, str]] | None:
        """
        Resolve the Body's root element name and attributes.

        Resolution order:
        1. An (element name, attributes) input.
        2. A plain element name input, without attributes.
        3. The action name, if not empty.
        4. None: the body content is written directly into the Body.

        Returns:
            The element name and its attributes, or None.
        """
        if isinstance(self.input, tuple):
            name, attributes = self.input
            return name, dict(attributes)
        if self.input:
            return self.input, {}
        if self.action:
            return self.action, {}
        return None


class OperationTable(Mapping[str, Operation]):
    """
    A read-only lookup table of operations by name.

    This replaces dynamic method dispatch: callers resolve an operation by
    name and pass the resulting Operation to the envelope builder.

    Example:
        >>> table = OperationTable({'getUser': Operation(action='getUser')})
        >>> table.resolve('get_user').action
        'getUser'
    """

    def __init__(
        self, operations: Mapping[str, Operation | Mapping[str, Any]] | None = None
    ) -> None:
        self._operations: dict[str, Operation] = {
            name: op if isinstance(op, Operation) else Operation.model_validate(op)
            for name, op in (operations or {}).items()
        }
        self._by_snake_name: dict[str, str] = {
            snake_case(name): name for name in self._operations
        }

    def __getitem__(self, name: str) -> Operation:
        return self._operations[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def __repr__(self) -> str:
        return f'OperationTable({list(self._operations)!r})'

    def resolve(self, name: str) -> Operation:
        """
        Find an operation by exact name, then by its snake_case spelling.

        Args:
            name: The operation name, e.g. 'getUser' or 'get_user'.

        Returns:
            The matching Operation.

        Raises:
            UnknownOperationError: If no operation matches.
        """
        if name in self._operations:
            return self._operations[name]

        table_name: str | None = self._by_snake_name.get(snake_case(name))
        if table_name is None:
            raise UnknownOperationError(
                f'Unknown SOAP operation {name!r}. '
                f'Available operations: {", ".join(self._operations) or "none"}'
            )
        return self._operations[table_name]


class WsseCredentials(BaseModel):
    """
    WS-Security UsernameToken credentials.

    Every field is optional so that a per-call instance can override only
    some of the configured defaults. See merged_with().
    """

    model_config = ConfigDict(frozen=True, extra='forbid')

    username: str | None = Field(
        default=None,
        description='WSSE username.',
    )
    password: SecretStr | None = Field(
        default=None,
        description='WSSE password. Stored as SecretStr to prevent accidental exposure.',
    )
    digest: bool | None = Field(
        default=None,
        description='Send a PasswordDigest instead of PasswordText. Defaults to False.',
    )

    @property
    def is_complete(self) -> bool:
        """True if both username and password are non-empty."""
        return bool(self.username) and bool(self.password and self.password.get_secret_value())

    @property
    def use_digest(self) -> bool:
        return bool(self.digest)

    def merged_with(self, override: 'WsseCredentials | None') -> 'WsseCredentials':
        """
        Return these credentials with the non-None fields of override applied.

        Args:
            override: Per-call credentials. May be None.

        Returns:
            A new WsseCredentials instance (or self when nothing changes).
        """
        if override is None:
            return self
        return self.model_copy(update=override.model_dump(exclude_none=True))


class FaultRecord(BaseModel):
    """
    A SOAP fault, normalised across SOAP 1.1 and SOAP 1.2.

    Attributes:
        code: The fault code, e.g. 'soap:Server'.
        message: The human readable reason.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str

    def __str__(self) -> str:
        return f'({self.code}) {self.message}'

    @classmethod
    def from_fault(cls, fault: Any) -> 'FaultRecord | None':
        """
        Build a FaultRecord from the parsed 'fault' entry of a SOAP body.

        SOAP 1.1 faults carry 'faultcode' and 'faultstring'. SOAP 1.2 faults
        carry 'code' (with a nested 'value') and 'reason' (with a nested
        'text'). Anything else is not recognised as a fault.

        Returns:
            The normalised fault, or None if the entry has neither shape.
        """
        if not isinstance(fault, Mapping):
            return None

        if 'faultcode' in fault:
            return cls(
                code=text_of(fault.get('faultcode')),
                message=text_of(fault.get('faultstring')),
            )

        if 'code' in fault:
            code: Any = fault.get('code')
            reason: Any = fault.get('reason')
            return cls(
                code=text_of(code.get('value') if isinstance(code, Mapping) else code),
                message=text_of(reason.get('text') if isinstance(reason, Mapping) else reason),
            )

        return None
