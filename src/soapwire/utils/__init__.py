# soapwire/utils/__init__.py

from .datetime_utils import SOAP_DATETIME_FORMAT, SOAP_DATETIME_PATTERN, format_for_soap
from .merge import merge_headers, merge_namespaces, namespace_attribute, render_header
from .xml_tools import (
    dict_to_xml,
    find_soap_body,
    parse_soap_body,
    parse_soap_document,
    parse_xml_to_dict,
    snake_case,
    text_of,
)

__all__: list[str] = [
    # datetime_utils.py
    'SOAP_DATETIME_FORMAT',
    'SOAP_DATETIME_PATTERN',
    # xml_tools.py
    'dict_to_xml',
    'find_soap_body',
    # datetime_utils.py
    'format_for_soap',
    # merge.py
    'merge_headers',
    'merge_namespaces',
    'namespace_attribute',
    'parse_soap_body',
    'parse_soap_document',
    'parse_xml_to_dict',
    'render_header',
    'snake_case',
    'text_of',
]
