"""
Tests for OpenAPI Mocker Contract Model

Tests the read-only contract model including:
- Example key classification (default, exact path, query, header)
- Selector clause parsing and specificity
- Example sets and their fallback
- Immutability of the built model
"""

import dataclasses

import pytest

from openapi_mocker.contract.models import (
    LEGACY_KEY,
    ContractModel,
    Example,
    ExampleKey,
    ExampleSet,
    ExampleSetKind,
    KeyKind,
    Operation,
    PathItem,
    ResponseDef,
    frozen_mapping,
)


class TestExampleKey:
    """Test example key parsing."""

    def test_default_key(self):
        """Test the default key."""
        key = ExampleKey.parse('default')

        assert key.kind is KeyKind.DEFAULT
        assert key.clauses == ()

    def test_exact_path_key(self):
        """Test that plain keys are exact paths."""
        key = ExampleKey.parse('/pets/2')

        assert key.kind is KeyKind.EXACT_PATH
        assert key.raw == '/pets/2'

    def test_query_key_single_clause(self):
        """Test query selector with one clause."""
        key = ExampleKey.parse('query:name=sansa')

        assert key.kind is KeyKind.QUERY
        assert key.clauses == (('name', 'sansa'),)
        assert key.specificity == 1

    def test_query_key_multiple_clauses(self):
        """Test query selector with several clauses."""
        key = ExampleKey.parse('query:limit=1&page=1')

        assert key.kind is KeyKind.QUERY
        assert key.clauses == (('limit', '1'), ('page', '1'))
        assert key.specificity == 2

    def test_query_key_percent_encoded_value(self):
        """Test that clause values are percent-decoded."""
        key = ExampleKey.parse('query:term=hot%20dog')

        assert key.clauses == (('term', 'hot dog'),)

    def test_query_key_empty_value(self):
        """Test that a clause may require an empty value."""
        key = ExampleKey.parse('query:flag=')

        assert key.kind is KeyKind.QUERY
        assert key.clauses == (('flag', ''),)

    def test_header_key_lowercases_name(self):
        """Test header selector names are lower-cased but values are kept."""
        key = ExampleKey.parse('header:X-Api-Key=ABC')

        assert key.kind is KeyKind.HEADER
        assert key.clauses == (('x-api-key', 'ABC'),)

    def test_malformed_selector_is_exact_path(self):
        """Test selectors without name=value clauses fall back to exact path."""
        assert ExampleKey.parse('query:').kind is KeyKind.EXACT_PATH
        assert ExampleKey.parse('query:name').kind is KeyKind.EXACT_PATH
        assert ExampleKey.parse('header:=1').kind is KeyKind.EXACT_PATH

    def test_keys_are_immutable(self):
        """Test parsed keys can't be changed."""
        key = ExampleKey.parse('default')

        with pytest.raises(dataclasses.FrozenInstanceError):
            key.raw = 'other'


class TestExampleSet:
    """Test example sets."""

    def test_empty(self):
        """Test a media type without examples."""
        examples = ExampleSet.empty()

        assert examples.kind is ExampleSetKind.NONE
        assert examples.has_fallback is False
        assert examples.keys() == []

    def test_single(self):
        """Test the legacy single example."""
        examples = ExampleSet.single({'id': 1})

        assert examples.kind is ExampleSetKind.SINGLE
        assert examples.fallback.value == {'id': 1}
        assert examples.fallback.key is LEGACY_KEY

    def test_single_null_value(self):
        """Test that a null single example is still an example."""
        examples = ExampleSet.single(None)

        assert examples.has_fallback is True
        assert examples.fallback.value is None

    def test_keyed_default_is_fallback(self):
        """Test the default key becomes the fallback."""
        examples = ExampleSet.keyed([
            Example(key=ExampleKey.parse('query:page=1'), value=[1]),
            Example(key=ExampleKey.parse('default'), value=[]),
            Example(key=ExampleKey.parse('/pets/2'), value=[2]),
        ])

        assert examples.kind is ExampleSetKind.KEYED
        assert examples.fallback.value == []
        assert [e.key.raw for e in examples.entries] == ['query:page=1', '/pets/2']
        assert examples.keys() == ['query:page=1', '/pets/2', 'default']

    def test_keyed_uses_single_without_default(self):
        """Test the single example backs keyed examples without default."""
        single = Example(key=LEGACY_KEY, value={'version': 1})
        examples = ExampleSet.keyed(
            [Example(key=ExampleKey.parse('query:v=2'), value={'version': 2})],
            single=single
        )

        assert examples.fallback is single

    def test_default_wins_over_single(self):
        """Test the default key takes precedence over the single example."""
        examples = ExampleSet.keyed(
            [Example(key=ExampleKey.parse('default'), value='keyed')],
            single=Example(key=LEGACY_KEY, value='single')
        )

        assert examples.fallback.value == 'keyed'

    def test_keyed_without_fallback(self):
        """Test keyed examples without default or single."""
        examples = ExampleSet.keyed([Example(key=ExampleKey.parse('/pets/5'), value={})])

        assert examples.has_fallback is False


class TestContractModel:
    """Test the contract model containers."""

    def _contract(self):
        get = Operation(method='get', path='/pets', responses=frozen_mapping({
            '200': ResponseDef(status='200')
        }))
        post = Operation(method='post', path='/pets')
        return ContractModel(
            openapi='3.0.0',
            title='Pets',
            paths=frozen_mapping({
                '/pets': PathItem(template='/pets', operations=frozen_mapping({'get': get, 'post': post}))
            })
        )

    def test_operations_in_document_order(self):
        """Test listing operations."""
        contract = self._contract()

        assert [op.method for op in contract.operations()] == ['get', 'post']

    def test_get_operation(self):
        """Test operation lookup by template and method."""
        contract = self._contract()

        assert contract.get_operation('/pets', 'GET').method == 'get'
        assert contract.get_operation('/pets', 'delete') is None
        assert contract.get_operation('/users', 'get') is None

    def test_get_response(self):
        """Test response lookup by status key."""
        operation = self._contract().get_operation('/pets', 'get')

        assert operation.get_response('200') is not None
        assert operation.get_response('404') is None
        assert operation.get_response('200').has_content is False

    def test_mappings_are_read_only(self):
        """Test that the model's mappings can't be mutated."""
        contract = self._contract()

        with pytest.raises(TypeError):
            contract.paths['/users'] = None
