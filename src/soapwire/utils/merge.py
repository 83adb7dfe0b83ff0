# soapwire/utils/merge.py
"""
Merging of configuration-wide and per-call namespaces and SOAP headers.

Every SOAP call combines two scopes: the defaults held by the client
configuration and the overrides passed for that one call. The functions
here are pure; they never modify their arguments.
"""

from collections.abc import Mapping
from typing import Any

from .xml_tools import to_xml_text

HeaderContent = Mapping[str, Any] | str | None

XMLNS: str = 'xmlns'


def namespace_attribute(key: str) -> str:
    """
    Normalise a namespace key to its attribute name.

    Both a bare prefix and the full attribute name are accepted:

        >>> namespace_attribute('wsdl')
        'xmlns:wsdl'
        >>> namespace_attribute('xmlns:wsdl')
        'xmlns:wsdl'
        >>> namespace_attribute('xmlns')
        'xmlns'
    """
    if key == XMLNS or key.startswith(f'{XMLNS}:'):
        return key
    return f'{XMLNS}:{key}'


def merge_namespaces(
    global_namespaces: Mapping[str, str] | None,
    call_namespaces: Mapping[str, str] | None,
) -> dict[str, str]:
    """
    Merge two namespace maps into one, keyed by attribute name.

    Per-call entries override configuration entries bound to the same
    prefix. All other entries from both maps are kept, in insertion order
    (configuration first).

    Args:
        global_namespaces: The configuration-wide namespace map.
        call_namespaces: The namespaces given for a single call.

    Returns:
        A new dictionary mapping 'xmlns:<prefix>' to namespace URI.
    """
    merged: dict[str, str] = {}
    for scope in (global_namespaces, call_namespaces):
        for key, uri in (scope or {}).items():
            merged[namespace_attribute(key)] = uri
    return merged


def merge_headers(
    global_header: HeaderContent,
    call_header: HeaderContent,
) -> dict[str, Any] | str:
    """
    Combine the configuration-wide and per-call SOAP header content.

    If both sides are mappings (or missing), they are merged key-wise and
    the per-call value wins on a key collision. If either side is raw XML
    text, both sides are rendered to text and concatenated, configuration
    content first.

    Args:
        global_header: Header content from the configuration.
        call_header: Header content given for a single call.

    Returns:
        A merged dictionary, or a string when raw XML was involved.

    Example:
        >>> merge_headers({'API-KEY': 'a', 'ID': '1'}, {'ID': '2'})
        {'API-KEY': 'a', 'ID': '2'}
        >>> merge_headers('<a>1</a>', {'b': 2})
        '<a>1</a><b>2</b>'
    """
    if isinstance(global_header, str) or isinstance(call_header, str):
        return to_xml_text(global_header) + to_xml_text(call_header)

    return {**(global_header or {}), **(call_header or {})}


def render_header(
    global_header: HeaderContent,
    call_header: HeaderContent,
    security_header: str = '',
) -> str:
    """
    Render the complete contents of the SOAP Header element.

    Returns:
        Merged header XML followed by the security fragment. An empty
        string means the envelope must not contain a Header element.
    """
    return to_xml_text(merge_headers(global_header, call_header)) + security_header
