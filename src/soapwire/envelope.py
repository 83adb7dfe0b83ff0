# soapwire/envelope.py
"""
SOAP envelope construction.

The EnvelopeBuilder combines an Operation, a call body and the per-call
options with the configuration defaults, and renders the envelope through
the 'envelope.xml' Jinja2 template:

    <?xml version="1.0" encoding="UTF-8"?>
    <env:Envelope xmlns:env="..." xmlns:wsdl="...">
      <env:Header>...</env:Header>          (only if there is header content)
      <env:Body><wsdl:action attr="...">...</wsdl:action></env:Body>
    </env:Envelope>

(the real output contains no whitespace between elements).
"""

import logging
from collections.abc import Mapping
from typing import Any

from jinja2 import Template

from soapwire.models import Operation, SoapVersion
from soapwire.utils.config_loader import SoapwireConfig
from soapwire.utils.merge import HeaderContent, merge_namespaces, render_header
from soapwire.utils.templating import get_template
from soapwire.utils.xml_tools import to_xml_text

logger: logging.Logger = logging.getLogger(__name__)

ENVELOPE_TEMPLATE_NAME: str = 'envelope.xml'

# Prefix of the envelope elements, bound to the SOAP version's namespace
ENVELOPE_NAMESPACE_ATTRIBUTE: str = 'xmlns:env'

# Prefix bound to the operation's target namespace
WSDL_PREFIX: str = 'wsdl'
WSDL_NAMESPACE_ATTRIBUTE: str = f'xmlns:{WSDL_PREFIX}'

BodyContent = Mapping[str, Any] | str | None


class EnvelopeBuilder:
    """
    Builds the SOAP envelope for a single call.

    The envelope is rendered once, on the first call to to_xml(). Later
    calls return the cached text, so changes made to the body (or any
    other attribute) after the first render are ignored. Build a new
    EnvelopeBuilder for every request.

    Attributes:
        operation: The operation being called.
        body: The call body: a mapping rendered to XML elements, or raw XML.
        config: The configuration supplying default version, namespaces
                and header.
        namespaces: Per-call namespaces, merged over the configured ones.
        header: Per-call header content, merged with the configured header.
        version: The SOAP version used for this envelope.
        security_header: A pre-rendered WS-Security header fragment,
                         appended to the header content.

    Usage:
        >>> operation = Operation(
        ...     action='authenticate',
        ...     target_namespace='http://v1_0.ws.auth.order.example.com/',
        ... )
        >>> builder = EnvelopeBuilder(operation, {'id': 666})
        >>> xml = builder.to_xml()
    """

    def __init__(
        self,
        operation: Operation,
        body: BodyContent = None,
        *,
        config: SoapwireConfig | None = None,
        namespaces: Mapping[str, str] | None = None,
        header: HeaderContent = None,
        version: SoapVersion | int | str | None = None,
        security_header: str = '',
    ) -> None:
        self.operation: Operation = operation
        self.body: BodyContent = body
        self.config: SoapwireConfig = config if config is not None else SoapwireConfig()
        self.namespaces: dict[str, str] = dict(namespaces or {})
        self.header: HeaderContent = header
        self.security_header: str = security_header

        # An unsupported per-call version is ignored
        self.version: SoapVersion = SoapVersion.coerce(
            version if version is not None else self.config.soap.version,
            self.config.soap.version,
        )

        self._xml: str | None = None

    @property
    def content_type(self) -> str:
        """The HTTP Content-Type matching this envelope's SOAP version."""
        return self.version.content_type

    def all_namespaces(self) -> dict[str, str]:
        """
        Return the namespace declarations for the Envelope element.

        The SOAP envelope namespace for the active version always comes first
        and cannot be overridden. It is followed by the configured namespaces
        merged with the per-call ones (per-call wins). The operation's target
        namespace is bound to the 'wsdl' prefix unless that prefix is already
        declared.
        """
        merged: dict[str, str] = merge_namespaces(self.config.soap.namespaces, self.namespaces)

        if self.operation.target_namespace:
            merged.setdefault(WSDL_NAMESPACE_ATTRIBUTE, self.operation.target_namespace)

        merged.pop(ENVELOPE_NAMESPACE_ATTRIBUTE, None)
        return {ENVELOPE_NAMESPACE_ATTRIBUTE: self.version.namespace, **merged}

    def _root_tag(self, namespaces: Mapping[str, str]) -> tuple[str | None, dict[str, str]]:
        """
        Return the qualified name and attributes of the Body's root element.

        The name is prefixed with 'wsdl:' when that prefix is declared and the
        name is not already qualified. (None, {}) means no root element.
        """
        root: tuple[str, dict[str, str]] | None = self.operation.root_element()
        if root is None:
            return None, {}

        name, attributes = root
        if WSDL_NAMESPACE_ATTRIBUTE in namespaces and ':' not in name:
            name = f'{WSDL_PREFIX}:{name}'
        return name, attributes

    def to_xml(self) -> str:
        """
        Render the SOAP envelope.

        Returns:
            The envelope XML text. The same string object is returned on
            every call after the first.

        Raises:
            jinja2.TemplateNotFound: If the template file doesn't exist.
        """
        if self._xml is not None:
            return self._xml

        namespaces: dict[str, str] = self.all_namespaces()
        root_tag, root_attributes = self._root_tag(namespaces)
        header: str = render_header(self.config.soap.header, self.header, self.security_header)

        template: Template = get_template(ENVELOPE_TEMPLATE_NAME)
        self._xml = template.render(
            namespaces=namespaces,
            header=header,
            root_tag=root_tag,
            root_attributes=root_attributes,
            body=to_xml_text(self.body),
        )

        logger.debug(
            'Rendered SOAP %s envelope for action %r (%d characters)',
            '1.2' if self.version is SoapVersion.V1_2 else '1.1',
            self.operation.action,
            len(self._xml),
        )
        return self._xml

    def to_bytes(self) -> bytes:
        """Return the envelope encoded as UTF-8, ready to be sent."""
        return self.to_xml().encode('utf-8')

    def __str__(self) -> str:
        return self.to_xml()

    def __repr__(self) -> str:
        return (
            f'EnvelopeBuilder('
            f'action={self.operation.action!r}, '
            f'version={self.version.name}, '
            f'rendered={self._xml is not None}'
            f')'
        )
