"""Tests for XML conversion utilities."""

import pytest
from lxml import etree

from soapwire.utils.xml_tools import (
    dict_to_xml,
    find_soap_body,
    local_name,
    parse_soap_body,
    parse_soap_document,
    parse_xml_to_dict,
    snake_case,
    strip_xml_declaration,
    text_of,
    to_xml_text,
)


class TestNameHelpers:
    """Tests for element name helpers."""

    @pytest.mark.parametrize(
        ('name', 'expected'),
        [
            ('getUserResponse', 'get_user_response'),
            ('Fault', 'fault'),
            ('faultcode', 'faultcode'),
            ('HTTPStatus', 'http_status'),
            ('user-name', 'user_name'),
            ('get_user', 'get_user'),
        ],
    )
    def test_snake_case(self, name: str, expected: str) -> None:
        assert snake_case(name) == expected

    def test_local_name(self) -> None:
        assert local_name('soap:Body') == 'Body'
        assert local_name('Body') == 'Body'

    def test_text_of(self) -> None:
        """Test text extraction from parsed element values."""
        assert text_of(None) == ''
        assert text_of('abc') == 'abc'
        assert text_of({'@lang': 'en', '#text': 'abc'}) == 'abc'
        assert text_of({'@lang': 'en'}) == ''


class TestDictToXml:
    """Tests for rendering mappings to XML fragments."""

    def test_simple_elements(self) -> None:
        assert dict_to_xml({'id': 666}) == '<id>666</id>'

    def test_nested_elements_and_attributes(self) -> None:
        xml = dict_to_xml({'user': {'@active': 'true', 'name': 'jo'}})
        assert xml == '<user active="true"><name>jo</name></user>'

    def test_list_repeats_element(self) -> None:
        assert dict_to_xml({'id': [1, 2]}) == '<id>1</id><id>2</id>'

    def test_multiple_roots(self) -> None:
        """Test that several top-level keys are rendered in order."""
        assert dict_to_xml({'a': 1, 'b': 2}) == '<a>1</a><b>2</b>'

    def test_text_is_escaped(self) -> None:
        assert dict_to_xml({'q': 'a < b & c'}) == '<q>a &lt; b &amp; c</q>'

    def test_empty_mapping(self) -> None:
        assert dict_to_xml({}) == ''
        assert dict_to_xml(None) == ''

    def test_to_xml_text(self) -> None:
        """Test that strings pass through and None renders as nothing."""
        assert to_xml_text('<raw/>') == '<raw/>'
        assert to_xml_text(None) == ''
        assert to_xml_text({'id': 1}) == '<id>1</id>'


class TestParsing:
    """Tests for parsing responses into dictionaries and documents."""

    def test_prefixes_removed_and_keys_snake_cased(self, mock_soap_response: str) -> None:
        """Test that namespace prefixes and xmlns attributes are removed."""
        parsed = parse_xml_to_dict(mock_soap_response)

        assert parsed == {
            'envelope': {
                'body': {
                    'get_user_response': {
                        'return': {'id': '666', 'user_name': 'jo'},
                    },
                },
            },
        }

    def test_attributes_kept(self) -> None:
        """Test that non-namespace attributes keep the '@' prefix."""
        parsed = parse_xml_to_dict('<a:Item xmlns:a="urn:x" a:itemId="7">x</a:Item>')
        assert parsed == {'item': {'@item_id': '7', '#text': 'x'}}

    def test_malformed_xml_raises_error(self) -> None:
        from xml.parsers.expat import ExpatError

        with pytest.raises(ExpatError):
            parse_xml_to_dict('<unclosed>')

    def test_find_soap_body(self) -> None:
        assert find_soap_body({'envelope': {'body': {'ok': '1'}}}) == {'ok': '1'}

    @pytest.mark.parametrize(
        'parsed',
        [{}, {'html': 'oops'}, {'envelope': {'header': None}}, {'envelope': {'body': None}}],
    )
    def test_find_soap_body_missing(self, parsed: dict) -> None:
        """Test that documents without a Body give an empty dictionary."""
        assert find_soap_body(parsed) == {}

    def test_parse_soap_body(self, mock_soap_response: str) -> None:
        body = parse_soap_body(mock_soap_response.encode('utf-8'))
        assert body['get_user_response']['return']['id'] == '666'

    @pytest.mark.parametrize('xml', ['', 'Internal Server Error', b'<html><body>'])
    def test_parse_soap_body_is_lenient(self, xml: str | bytes) -> None:
        """Test that malformed or empty bodies give an empty dictionary."""
        assert parse_soap_body(xml) == {}

    def test_parse_soap_document(self, mock_soap_response: str) -> None:
        """Test parsing into an lxml element."""
        root = parse_soap_document(mock_soap_response)
        assert root.tag == '{http://schemas.xmlsoap.org/soap/envelope/}Envelope'

    def test_parse_soap_document_malformed(self) -> None:
        with pytest.raises(etree.XMLSyntaxError):
            parse_soap_document(b'<unclosed>')


class TestXmlDeclaration:
    """Tests for text documents whose declaration names a non-UTF-8 encoding."""

    LATIN1_DOCUMENT: str = '<?xml version="1.0" encoding="ISO-8859-1"?>\n<r>café</r>'

    def test_strip_declaration_from_text(self) -> None:
        assert strip_xml_declaration(self.LATIN1_DOCUMENT) == '\n<r>café</r>'

    def test_bytes_unchanged(self) -> None:
        """Test that bytes keep the declaration that describes their encoding."""
        raw = self.LATIN1_DOCUMENT.encode('iso-8859-1')
        assert strip_xml_declaration(raw) is raw

    def test_parse_text_keeps_characters(self) -> None:
        assert parse_xml_to_dict(self.LATIN1_DOCUMENT) == {'r': 'café'}

    def test_parse_latin1_bytes(self) -> None:
        """Test that declared encodings are honoured for bytes."""
        assert parse_xml_to_dict(self.LATIN1_DOCUMENT.encode('iso-8859-1')) == {'r': 'café'}

    def test_document_from_text(self) -> None:
        assert parse_soap_document(self.LATIN1_DOCUMENT).text == 'café'
