"""
Tests for OpenAPI Mocker Response Synthesizer

Tests turning match results into responses including:
- Compact JSON bodies for JSON media types
- Text bodies for other media types
- 404 diagnostics for misses
- 500 diagnostics for examples that can't be serialized
- Debug headers
"""

import datetime
import json
from pathlib import Path

import pytest

from openapi_mocker.contract import ContractLoader, build_contract
from openapi_mocker.mock.matcher import RequestMatcher
from openapi_mocker.mock.synthesizer import (
    ResponseSynthesizer,
    SerializationError,
    serialize_example,
)


PETSTORE = Path(__file__).parent / 'testdata' / 'petstore.yaml'


@pytest.fixture(scope='module')
def matcher():
    return RequestMatcher.from_contract(ContractLoader(str(PETSTORE)).load())


@pytest.fixture
def synthesizer():
    return ResponseSynthesizer()


class TestSerializeExample:
    """Test example serialization."""

    def test_compact_json(self):
        """Test JSON is emitted without extra whitespace."""
        body = serialize_example({'id': 1, 'tags': ['a', 'b']}, 'application/json')

        assert body == b'{"id":1,"tags":["a","b"]}'

    def test_json_keeps_unicode(self):
        """Test non-ASCII text is emitted as UTF-8."""
        body = serialize_example({'name': 'Daenerys Targaryen ❄'}, 'application/json')

        assert json.loads(body.decode('utf-8')) == {'name': 'Daenerys Targaryen ❄'}
        assert b'\\u' not in body

    def test_json_suffix_media_type(self):
        """Test structured +json types are serialized as JSON."""
        assert serialize_example({'title': 'x'}, 'application/problem+json') == b'{"title":"x"}'

    def test_json_string_and_null(self):
        """Test JSON scalars."""
        assert serialize_example('hi', 'application/json') == b'"hi"'
        assert serialize_example(None, 'application/json') == b'null'

    def test_json_date_fails(self):
        """Test values JSON can't represent."""
        with pytest.raises(SerializationError):
            serialize_example({'created': datetime.date(2024, 1, 1)}, 'application/json')

    def test_json_nan_fails(self):
        """Test NaN is not valid JSON."""
        with pytest.raises(SerializationError):
            serialize_example(float('nan'), 'application/json')

    def test_json_lone_surrogate_fails(self):
        """Test strings JSON can hold but UTF-8 can't."""
        with pytest.raises(SerializationError, match='UTF-8'):
            serialize_example({'message': '\ud800'}, 'application/json')

    def test_text_lone_surrogate_fails(self):
        """Test a text example that can't be encoded."""
        with pytest.raises(SerializationError, match='UTF-8'):
            serialize_example('half \ud83d', 'text/plain')

    def test_text_string(self):
        """Test strings are sent as-is for text types."""
        assert serialize_example('file contents', 'text/plain') == b'file contents'

    def test_text_bytes(self):
        """Test bytes are sent raw."""
        assert serialize_example(b'\x00\x01', 'application/octet-stream') == b'\x00\x01'

    def test_text_scalars(self):
        """Test scalars are rendered as their JSON text."""
        assert serialize_example(42, 'text/plain') == b'42'
        assert serialize_example(True, 'text/plain') == b'true'

    def test_text_object_fails(self):
        """Test objects can't be rendered as plain text."""
        with pytest.raises(SerializationError):
            serialize_example({'text': 'hello'}, 'text/plain')


class TestResponseSynthesizer:
    """Test building responses."""

    def test_resolved_json(self, matcher, synthesizer):
        """Test a resolved JSON example."""
        response = synthesizer.synthesize(matcher.find_match('GET', '/hello', 'name=sansa'))

        assert response.status_code == 200
        assert response.content_type == 'application/json'
        assert json.loads(response.body) == {'message': 'Sansa Stark'}

    def test_resolved_status(self, matcher, synthesizer):
        """Test the resolved status is served."""
        response = synthesizer.synthesize(matcher.find_match('GET', '/401/pets/5'))

        assert response.status_code == 401
        assert json.loads(response.body) == {'code': 401, 'message': 'error'}

    def test_status_only(self, matcher, synthesizer):
        """Test a response without content has no body."""
        response = synthesizer.synthesize(matcher.find_match('POST', '/201/pets'))

        assert response.status_code == 201
        assert response.body == b''
        assert response.content_type is None

    def test_bodiless_status(self, matcher, synthesizer):
        """Test 204 responses never carry a body."""
        response = synthesizer.synthesize(matcher.find_match('GET', '/204/ping'))

        assert response.status_code == 204
        assert response.body == b''

    @pytest.mark.parametrize('path, reason', [
        ('/nowhere', 'no_route'),
        ('/500/hello', 'no_response'),
        ('/401/pets/6', 'no_example'),
        ('/empty', 'no_response'),
    ])
    def test_miss_is_404(self, matcher, synthesizer, path, reason):
        """Test every miss becomes a 404 diagnostic."""
        response = synthesizer.synthesize(matcher.find_match('GET', path))

        assert response.status_code == 404
        assert response.content_type == 'application/json'
        data = json.loads(response.body)
        assert data['reason'] == reason
        assert data['request']['path'] == path
        assert response.headers == {'X-Mock-Matched': 'false'}

    def test_miss_names_route(self, matcher, synthesizer):
        """Test the diagnostic names the matched route when there is one."""
        data = json.loads(synthesizer.synthesize(matcher.find_match('GET', '/500/hello')).body)

        assert data['route'] == '/hello'
        assert data['request']['status'] == 500

    def test_custom_fallback_status(self, matcher):
        """Test configuring the status used for misses."""
        synthesizer = ResponseSynthesizer(fallback_status=501)

        assert synthesizer.synthesize(matcher.find_match('GET', '/nowhere')).status_code == 501

    def test_serialization_error_is_500(self, matcher, synthesizer):
        """Test a YAML date in a JSON example."""
        response = synthesizer.synthesize(matcher.find_match('GET', '/broken'))

        assert response.status_code == 500
        data = json.loads(response.body)
        assert data['route'] == '/broken'
        assert data['example'] == 'example'
        assert 'application/json' in data['detail']

    def test_unencodable_example_is_500(self, synthesizer):
        """Test an example string with a lone surrogate."""
        contract = build_contract({
            'openapi': '3.0.0',
            'paths': {'/echo': {'get': {'responses': {'200': {
                'content': {'application/json': {'example': {'message': '\udc80'}}}
            }}}}}
        })
        result = RequestMatcher.from_contract(contract).find_match('GET', '/echo')

        response = synthesizer.synthesize(result)

        assert response.status_code == 500
        assert 'UTF-8' in json.loads(response.body)['detail']

    def test_object_as_text_is_500(self, matcher, synthesizer):
        """Test an object example for a text media type."""
        response = synthesizer.synthesize(matcher.find_match('GET', '/201/broken'))

        assert response.status_code == 500

    def test_debug_headers(self, matcher, synthesizer):
        """Test headers describing the match."""
        response = synthesizer.synthesize(matcher.find_match('GET', '/pets/2'))

        assert response.headers == {
            'X-Mock-Matched': 'true',
            'X-Mock-Route': '/pets/{petId}',
            'X-Mock-Example': '/pets/2'
        }

    def test_debug_headers_disabled(self, matcher):
        """Test turning debug headers off."""
        synthesizer = ResponseSynthesizer(debug_headers=False)

        assert synthesizer.synthesize(matcher.find_match('GET', '/pets/2')).headers == {}
        assert synthesizer.synthesize(matcher.find_match('GET', '/nowhere')).headers == {}

    def test_debug_header_values_are_ascii(self, synthesizer):
        """Test non-ASCII example keys are percent-encoded."""
        contract = build_contract({'openapi': '3.0.0', 'paths': {'/café': {'get': {'responses': {'200': {
            'description': 'ok',
            'content': {'application/json': {'examples': {'/café': {'value': 1}}}}
        }}}}}})
        result = RequestMatcher.from_contract(contract).find_match('GET', '/café')

        response = synthesizer.synthesize(result)

        assert response.headers['X-Mock-Example'] == '/caf%C3%A9'
        assert response.body == b'1'
