"""Tests for SOAP envelope construction."""

from typing import Any

import pytest

from soapwire.envelope import EnvelopeBuilder
from soapwire.models import Operation, SoapVersion
from soapwire.utils.config_loader import SoapwireConfig
from soapwire.utils.xml_tools import parse_soap_document

SOAP11_NAMESPACE = 'http://schemas.xmlsoap.org/soap/envelope/'
SOAP12_NAMESPACE = 'http://www.w3.org/2003/05/soap-envelope'
AUTH_NAMESPACE = 'http://v1_0.ws.auth.order.example.com/'


def _config(**soap: Any) -> SoapwireConfig:
    return SoapwireConfig.model_validate({'soap': soap})


class TestEnvelopeStructure:
    """Tests for the overall envelope layout."""

    def test_soap11_envelope(self, authenticate_operation: Operation) -> None:
        """Test the complete SOAP 1.1 envelope for a simple call."""
        xml = EnvelopeBuilder(authenticate_operation, {'id': 666}).to_xml()

        assert xml == (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<env:Envelope xmlns:env="{SOAP11_NAMESPACE}" xmlns:wsdl="{AUTH_NAMESPACE}">'
            '<env:Body><wsdl:authenticate><id>666</id></wsdl:authenticate></env:Body>'
            '</env:Envelope>'
        )

    def test_soap12_envelope(self, authenticate_operation: Operation) -> None:
        """Test that SOAP 1.2 uses the 2003 envelope namespace."""
        builder = EnvelopeBuilder(authenticate_operation, {'id': 666}, version=2)
        xml = builder.to_xml()

        assert f'xmlns:env="{SOAP12_NAMESPACE}"' in xml
        assert SOAP11_NAMESPACE not in xml
        assert builder.content_type == 'application/soap+xml'

    def test_envelope_is_well_formed(self, authenticate_operation: Operation) -> None:
        """Test that the envelope parses and has the expected structure."""
        root = parse_soap_document(EnvelopeBuilder(authenticate_operation, {'id': 666}).to_xml())

        assert root.tag == f'{{{SOAP11_NAMESPACE}}}Envelope'
        body = root.find(f'{{{SOAP11_NAMESPACE}}}Body')
        assert body is not None
        call = body[0]
        assert call.tag == f'{{{AUTH_NAMESPACE}}}authenticate'
        assert call.findtext('id') == '666'

    def test_no_header_element_without_header_content(
        self, authenticate_operation: Operation
    ) -> None:
        assert 'env:Header' not in EnvelopeBuilder(authenticate_operation, {'id': 1}).to_xml()

    def test_empty_body(self, authenticate_operation: Operation) -> None:
        """Test that a call without body still writes the root element."""
        xml = EnvelopeBuilder(authenticate_operation).to_xml()
        assert '<env:Body><wsdl:authenticate></wsdl:authenticate></env:Body>' in xml

    def test_raw_xml_body(self, authenticate_operation: Operation) -> None:
        """Test that string bodies are inserted without escaping."""
        xml = EnvelopeBuilder(authenticate_operation, '<id>666</id>').to_xml()
        assert '<wsdl:authenticate><id>666</id></wsdl:authenticate>' in xml

    def test_to_bytes_and_str(self, authenticate_operation: Operation) -> None:
        builder = EnvelopeBuilder(authenticate_operation, {'id': 666})

        assert builder.to_bytes() == builder.to_xml().encode('utf-8')
        assert str(builder) == builder.to_xml()


class TestRootElement:
    """Tests for the Body's root element."""

    def test_input_with_attributes(self) -> None:
        """Test that input attributes are written in order."""
        operation = Operation(
            action='authenticate',
            input=('authenticate', {'protocol': 'tls', 'version': '1.2'}),
            target_namespace=AUTH_NAMESPACE,
        )
        xml = EnvelopeBuilder(operation, {'id': 666}).to_xml()

        assert (
            '<wsdl:authenticate protocol="tls" version="1.2"><id>666</id></wsdl:authenticate>'
            in xml
        )

    def test_input_name_differs_from_action(self) -> None:
        operation = Operation(
            action='getUser',
            input='GetUserRequest',
            target_namespace=AUTH_NAMESPACE,
        )
        xml = EnvelopeBuilder(operation, {'id': 1}).to_xml()

        assert '<wsdl:GetUserRequest><id>1</id></wsdl:GetUserRequest>' in xml
        assert 'getUser' not in xml

    def test_action_fallback_without_namespace(self) -> None:
        """Test that without a target namespace the root element is unprefixed."""
        xml = EnvelopeBuilder(Operation(action='authenticate'), {'id': 666}).to_xml()

        assert '<env:Body><authenticate><id>666</id></authenticate></env:Body>' in xml
        assert 'xmlns:wsdl' not in xml

    def test_no_root_element(self) -> None:
        """Test that without input and action the body is written directly."""
        xml = EnvelopeBuilder(Operation(), {'id': 666}).to_xml()
        assert '<env:Body><id>666</id></env:Body>' in xml

    def test_attribute_values_escaped(self) -> None:
        operation = Operation(action='search', input=('search', {'filter': 'a&b'}))
        xml = EnvelopeBuilder(operation).to_xml()
        assert '<search filter="a&amp;b">' in xml

    def test_qualified_input_name_kept(self) -> None:
        """Test that an already prefixed input name is not prefixed again."""
        operation = Operation(
            action='getUser',
            input='tns:getUser',
            target_namespace=AUTH_NAMESPACE,
        )
        xml = EnvelopeBuilder(
            operation, namespaces={'tns': AUTH_NAMESPACE}
        ).to_xml()

        assert '<tns:getUser></tns:getUser>' in xml


class TestVersionSelection:
    """Tests for SOAP version selection."""

    def test_config_version(self, authenticate_operation: Operation) -> None:
        builder = EnvelopeBuilder(authenticate_operation, config=_config(version=2))
        assert builder.version is SoapVersion.V1_2

    def test_per_call_version_overrides_config(self, authenticate_operation: Operation) -> None:
        builder = EnvelopeBuilder(
            authenticate_operation, config=_config(version=2), version='1.1'
        )

        assert builder.version is SoapVersion.V1_1
        assert builder.content_type == 'text/xml'

    @pytest.mark.parametrize('version', [3, '1.3', 'latest'])
    def test_unsupported_version_ignored(
        self, authenticate_operation: Operation, version: object
    ) -> None:
        """Test that an unsupported per-call version keeps the configured one."""
        builder = EnvelopeBuilder(
            authenticate_operation, config=_config(version=2), version=version
        )
        assert builder.version is SoapVersion.V1_2


class TestNamespaces:
    """Tests for namespace declarations."""

    def test_envelope_namespace_first(self, authenticate_operation: Operation) -> None:
        namespaces = EnvelopeBuilder(authenticate_operation).all_namespaces()

        assert list(namespaces) == ['xmlns:env', 'xmlns:wsdl']
        assert namespaces['xmlns:wsdl'] == AUTH_NAMESPACE

    def test_config_and_call_namespaces_merged(self, authenticate_operation: Operation) -> None:
        """Test that per-call namespaces extend and override configured ones."""
        builder = EnvelopeBuilder(
            authenticate_operation,
            config=_config(namespaces={'a': 'urn:global', 'b': 'urn:b'}),
            namespaces={'a': 'urn:call'},
        )
        namespaces = builder.all_namespaces()

        assert namespaces['xmlns:a'] == 'urn:call'
        assert namespaces['xmlns:b'] == 'urn:b'
        assert 'xmlns:a="urn:call"' in builder.to_xml()

    def test_explicit_wsdl_namespace_wins(self, authenticate_operation: Operation) -> None:
        """Test that a declared 'wsdl' prefix is not replaced by the target namespace."""
        builder = EnvelopeBuilder(authenticate_operation, namespaces={'wsdl': 'urn:other'})
        assert builder.all_namespaces()['xmlns:wsdl'] == 'urn:other'

    def test_envelope_namespace_cannot_be_overridden(
        self, authenticate_operation: Operation
    ) -> None:
        builder = EnvelopeBuilder(authenticate_operation, namespaces={'env': 'urn:bogus'})

        assert builder.all_namespaces()['xmlns:env'] == SOAP11_NAMESPACE
        assert 'urn:bogus' not in builder.to_xml()


class TestHeaders:
    """Tests for header merging in the envelope."""

    def test_mapping_headers_merged(self, authenticate_operation: Operation) -> None:
        """Test that per-call header keys override configured ones."""
        builder = EnvelopeBuilder(
            authenticate_operation,
            {'id': 1},
            config=_config(header={'API-KEY': 'secret', 'SOME-KEY': 'something'}),
            header={'SOME-KEY': 'somethingelse'},
        )
        xml = builder.to_xml()

        assert (
            '<env:Header><API-KEY>secret</API-KEY><SOME-KEY>somethingelse</SOME-KEY>'
            '</env:Header>' in xml
        )

    def test_string_headers_concatenated(self, authenticate_operation: Operation) -> None:
        builder = EnvelopeBuilder(
            authenticate_operation,
            config=_config(header='<API-KEY>secret</API-KEY>'),
            header='<SOME-KEY>somethingelse</SOME-KEY>',
        )

        assert (
            '<env:Header><API-KEY>secret</API-KEY><SOME-KEY>somethingelse</SOME-KEY>'
            '</env:Header>' in builder.to_xml()
        )

    def test_security_header_appended(self, authenticate_operation: Operation) -> None:
        builder = EnvelopeBuilder(
            authenticate_operation,
            header={'a': 1},
            security_header='<wsse:Security/>',
        )
        assert '<env:Header><a>1</a><wsse:Security/></env:Header>' in builder.to_xml()

    def test_security_header_only(self, authenticate_operation: Operation) -> None:
        builder = EnvelopeBuilder(authenticate_operation, security_header='<wsse:Security/>')
        assert '<env:Header><wsse:Security/></env:Header>' in builder.to_xml()


class TestRenderCaching:
    """Tests for the render-once behaviour."""

    def test_same_text_returned(self, authenticate_operation: Operation) -> None:
        builder = EnvelopeBuilder(authenticate_operation, {'id': 666})
        assert builder.to_xml() is builder.to_xml()

    def test_changes_after_render_ignored(self, authenticate_operation: Operation) -> None:
        """Test that mutating the body after the first render has no effect."""
        body = {'id': 666}
        builder = EnvelopeBuilder(authenticate_operation, body)
        first = builder.to_xml()

        body['id'] = 1
        builder.header = {'late': 'header'}

        assert builder.to_xml() == first
        assert '<id>666</id>' in builder.to_xml()

    def test_repr(self, authenticate_operation: Operation) -> None:
        builder = EnvelopeBuilder(authenticate_operation)
        assert repr(builder) == (
            "EnvelopeBuilder(action='authenticate', version=V1_1, rendered=False)"
        )
        builder.to_xml()
        assert 'rendered=True' in repr(builder)
