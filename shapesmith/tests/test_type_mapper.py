"""Tests for mapping shapes to Python types."""

import pytest

from shapesmith.codegen.graph import ShapeGraphResolver
from shapesmith.codegen.type_mapper import TypeKind, TypeMapper
from shapesmith.exceptions import DuplicateIdempotencyTokenError, InvalidShapeError
from shapesmith.model.loader import load_model
from shapesmith.tests.fixtures import SERVICE_DESCRIPTION, make_description


def mapper_for(description):
    return TypeMapper(ShapeGraphResolver(load_model(description)).resolve())


@pytest.fixture(scope='module')
def mapper():
    return mapper_for(SERVICE_DESCRIPTION)


class TestScalars:
    @pytest.mark.parametrize(
        'shape,hint',
        [
            ('String', 'str'),
            ('Integer', 'int'),
            ('Boolean', 'bool'),
            ('Timestamp', 'datetime'),
            ('BigDecimal', 'Decimal'),
            ('Blob', 'bytes'),
            ('StreamingBlob', 'BinaryIO'),
        ],
    )
    def test_hints(self, mapper, shape, hint):
        resolved = mapper.map_type(shape)
        assert resolved.kind == TypeKind.SCALAR
        assert resolved.input_hint == resolved.builder_hint == resolved.value_hint == hint

    def test_imports(self, mapper):
        assert mapper.map_type('Timestamp').imports == {'datetime': frozenset({'datetime'})}
        assert mapper.map_type('BigDecimal').imports == {'decimal': frozenset({'Decimal'})}
        assert mapper.map_type('String').imports == {}

    def test_blobs_are_copied_streams_are_not(self, mapper):
        assert mapper.map_type('Blob').defensive_copy
        assert not mapper.map_type('StreamingBlob').defensive_copy
        assert mapper.map_type('StreamingBlob').streaming


class TestCollections:
    def test_list_hints(self, mapper):
        resolved = mapper.map_type('ListOfStrings')
        assert resolved.is_collection
        assert resolved.input_hint == 'Sequence[str]'
        assert resolved.builder_hint == 'list[str]'
        assert resolved.value_hint == 'tuple[str, ...]'
        assert resolved.element.shape_name == 'String'

    def test_nested_list_hints(self, mapper):
        resolved = mapper.map_type('ListOfListOfStrings')
        assert resolved.input_hint == 'Sequence[Sequence[str]]'
        assert resolved.value_hint == 'tuple[tuple[str, ...], ...]'

    def test_map_hints(self, mapper):
        resolved = mapper.map_type('MapOfStringToBlob')
        assert resolved.is_map
        assert resolved.input_hint == 'Mapping[str, bytes]'
        assert resolved.builder_hint == 'dict[str, bytes]'
        assert resolved.value_hint == 'Mapping[str, bytes]'
        assert resolved.key.shape_name == 'String'
        assert resolved.element.defensive_copy
        assert resolved.imports == {'collections.abc': frozenset({'Mapping'})}

    def test_list_of_structures_references_class(self, mapper):
        resolved = mapper.map_type('RecursiveNodeList')
        assert resolved.value_hint == 'tuple[RecursiveNode, ...]'
        assert resolved.references == {('RecursiveNode', 'recursive_node')}


class TestStructures:
    def test_generated_class(self, mapper):
        resolved = mapper.map_type('SimpleStruct')
        assert resolved.kind == TypeKind.STRUCTURE
        assert resolved.class_name == 'SimpleStruct'
        assert resolved.module_name == 'simple_struct'
        assert [p.attribute for p in resolved.properties] == ['value']

    def test_enum(self, mapper):
        resolved = mapper.map_type('Color')
        assert resolved.kind == TypeKind.ENUM
        assert resolved.value_hint == 'Color'
        assert resolved.properties == ()

    def test_property_contract(self, mapper):
        resolved = mapper.map_type('AllTypesRequest')
        contract = resolved.get_property('string_member')
        assert contract.member_name == 'StringMember'
        assert contract.required
        assert contract.documentation == 'A plain string.'
        assert contract.getter_name == 'get_string_member'
        assert contract.getter_signature == 'get_string_member(self) -> str | None'
        assert resolved.idempotency_token.attribute == 'client_token'

    def test_missing_property(self, mapper):
        with pytest.raises(KeyError):
            mapper.map_type('SimpleStruct').get_property('nope')

    def test_recursive_structure_maps_finitely(self, mapper):
        resolved = mapper.map_type('RecursiveNode')
        next_node = resolved.get_property('next')
        assert next_node.recursive
        assert next_node.type.class_name == 'RecursiveNode'
        assert next_node.type.properties == ()
        assert not resolved.get_property('value').recursive

    def test_memoised(self, mapper):
        assert mapper.map_type('AllTypesRequest') is mapper.map_type('AllTypesRequest')

    def test_map_all_covers_generated_shapes(self, mapper):
        mapped = mapper.map_all()
        assert 'EventStream' in mapped
        assert 'String' not in mapped


class TestIdempotencyTokens:
    def test_duplicate_tokens(self):
        mapper = mapper_for(
            make_description(
                {
                    'S': {
                        'type': 'structure',
                        'members': {
                            'TokenA': {'shape': 'String', 'idempotencyToken': True},
                            'TokenB': {'shape': 'String', 'idempotencyToken': True},
                        },
                    }
                }
            )
        )
        with pytest.raises(DuplicateIdempotencyTokenError) as exc_info:
            mapper.map_type('S')
        assert exc_info.value.members == ['TokenA', 'TokenB']

    def test_token_must_be_string(self):
        mapper = mapper_for(
            make_description(
                {
                    'Int': {'type': 'integer'},
                    'S': {
                        'type': 'structure',
                        'members': {'Token': {'shape': 'Int', 'idempotencyToken': True}},
                    },
                }
            )
        )
        with pytest.raises(InvalidShapeError, match='must target a string shape'):
            mapper.map_type('S')
