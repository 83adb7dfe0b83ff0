# soapwire/utils/xml_tools.py
"""
XML conversion utilities for SOAP messages.

This module bridges structured Python mappings and XML text in both
directions:

- Outgoing: mappings are rendered to XML element fragments for SOAP
  headers and bodies (xmltodict conventions: '@name' keys become
  attributes, lists repeat an element, None gives an empty element).
- Incoming: response XML is converted to nested dictionaries whose keys
  have their namespace prefixes removed and are converted to snake_case,
  so callers can look up 'fault' or 'get_user_response' regardless of the
  prefixes a server chose.

The lxml document parser is kept here as well, for callers that want a
real element tree instead of a dictionary.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any
from xml.parsers.expat import ExpatError

import xmltodict
from lxml import etree

logger: logging.Logger = logging.getLogger(__name__)

_FIRST_CAP_PATTERN: re.Pattern[str] = re.compile(r'(.)([A-Z][a-z]+)')
_ALL_CAP_PATTERN: re.Pattern[str] = re.compile(r'([a-z0-9])([A-Z])')

# Leading '<?xml ... ?>' declaration of a document
_XML_DECLARATION_PATTERN: re.Pattern[str] = re.compile(r'^\s*<\?xml\b[^>]*\?>')

ATTRIBUTE_PREFIX: str = '@'
TEXT_KEY: str = '#text'


# --- Name Helpers ---


def local_name(name: str) -> str:
    """Strip a namespace prefix: 'soap:Body' -> 'Body'."""
    return name.rsplit(':', 1)[-1]


def snake_case(name: str) -> str:
    """
    Convert an XML element name to snake_case.

    Example:
        >>> snake_case('getUserResponse')
        'get_user_response'
        >>> snake_case('Fault')
        'fault'
    """
    partial: str = _FIRST_CAP_PATTERN.sub(r'\1_\2', name)
    return _ALL_CAP_PATTERN.sub(r'\1_\2', partial).replace('-', '_').lower()


def text_of(value: Any) -> str:
    """
    Return the text content of a parsed element value.

    Elements that carry attributes are parsed into dictionaries with the
    text stored under '#text'; plain elements are parsed into strings and
    empty elements into None.
    """
    if value is None:
        return ''
    if isinstance(value, Mapping):
        return str(value.get(TEXT_KEY) or '')
    return str(value)


# --- Outgoing: Mapping -> XML ---


def dict_to_xml(content: Mapping[str, Any] | None) -> str:
    """
    Render a mapping as a sequence of XML elements.

    Args:
        content: The mapping to render. Keys are element names, values are
                 text, nested mappings, lists (repeated elements) or None.

    Returns:
        The XML fragment without an XML declaration. An empty or missing
        mapping renders as an empty string.

    Example:
        >>> dict_to_xml({'id': 666})
        '<id>666</id>'
        >>> dict_to_xml({'user': {'@active': 'true', 'name': 'jo'}})
        '<user active="true"><name>jo</name></user>'
    """
    if not content:
        return ''
    return xmltodict.unparse(dict(content), full_document=False)


def to_xml_text(content: Mapping[str, Any] | str | None) -> str:
    """Render header or body content (mapping or raw XML text) to text."""
    if content is None:
        return ''
    if isinstance(content, str):
        return content
    return dict_to_xml(content)


# --- Incoming: XML -> Mapping ---


def _normalize_key(
    _path: list[tuple[str, dict[str, str] | None]],
    key: str,
    value: Any,
) -> tuple[str, Any] | None:
    """
    xmltodict postprocessor: drop xmlns declarations, strip prefixes, snake_case.

    Returning None removes the item from the parsed result.
    """
    if key == TEXT_KEY:
        return key, value

    if key.startswith(ATTRIBUTE_PREFIX):
        attribute_name: str = key[len(ATTRIBUTE_PREFIX):]
        if attribute_name == 'xmlns' or attribute_name.startswith('xmlns:'):
            return None
        return ATTRIBUTE_PREFIX + snake_case(local_name(attribute_name)), value

    return snake_case(local_name(key)), value


def strip_xml_declaration(xml: str | bytes) -> str | bytes:
    """
    Remove the XML declaration from already decoded text.

    The encoding named by a declaration describes bytes, so it no longer
    applies once the document is a str. Bytes are returned unchanged and
    decoded by the parser according to their declaration.
    """
    if isinstance(xml, str):
        return _XML_DECLARATION_PATTERN.sub('', xml, count=1)
    return xml


def parse_xml_to_dict(xml: str | bytes) -> dict[str, Any]:
    """
    Parse an XML document into a nested dictionary.

    Namespace declarations are dropped and all element and attribute names
    are reduced to their snake_case local names.

    Args:
        xml: The XML document as text or bytes.

    Returns:
        The parsed document, keyed by the root element's name.

    Raises:
        xml.parsers.expat.ExpatError: If the XML is malformed or empty.
    """
    parsed: dict[str, Any] = xmltodict.parse(
        strip_xml_declaration(xml), postprocessor=_normalize_key
    )
    return parsed


def find_soap_body(parsed: Mapping[str, Any]) -> dict[str, Any]:
    """
    Return the contents of the SOAP Body from a parsed envelope.

    Args:
        parsed: The result of parse_xml_to_dict() for a SOAP envelope.

    Returns:
        The Body's children as a dictionary, or an empty dictionary if the
        document has no envelope or the Body is empty.
    """
    if not parsed:
        return {}

    envelope: Any = next(iter(parsed.values()))
    if not isinstance(envelope, Mapping):
        return {}

    body: Any = envelope.get('body')
    if not isinstance(body, Mapping):
        return {}

    return dict(body)


def parse_soap_body(xml: str | bytes) -> dict[str, Any]:
    """
    Parse a SOAP response and return its Body as a dictionary.

    Parsing is lenient: malformed or empty XML yields an empty dictionary
    instead of an exception, because an error page returned by a proxy or
    web server is still a legitimate HTTP error response.

    Args:
        xml: The raw response body.

    Returns:
        The Body's children as a dictionary (possibly empty).
    """
    try:
        parsed: dict[str, Any] = parse_xml_to_dict(xml)
    except ExpatError as parse_error:
        logger.debug('Response body is not well-formed XML: %r', parse_error)
        return {}

    return find_soap_body(parsed)


def parse_soap_document(xml: str | bytes) -> etree._Element:
    """
    Parse a SOAP XML response into an lxml Element.

    Args:
        xml: The raw XML response from the SOAP API.

    Returns:
        The root element of the parsed XML tree.

    Raises:
        etree.XMLSyntaxError: If the XML is malformed.
    """
    return etree.fromstring(strip_xml_declaration(xml))
