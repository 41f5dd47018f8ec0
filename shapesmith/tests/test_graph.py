"""Tests for shape graph resolution."""

import pytest

from shapesmith.codegen.graph import ScalarKind, ShapeGraphResolver, ShapeKind, resolve
from shapesmith.exceptions import (
    CyclicKeyError,
    InvalidShapeError,
    InvalidUnionError,
    NameCollisionError,
    UnresolvedReferenceError,
)
from shapesmith.model.loader import load_model
from shapesmith.tests.fixtures import SERVICE_DESCRIPTION, make_description, with_shapes


def resolve_description(description, service_name=None):
    return ShapeGraphResolver(load_model(description), service_name=service_name).resolve()


@pytest.fixture(scope='module')
def graph():
    return resolve_description(SERVICE_DESCRIPTION)


class TestClassification:
    """Test that shapes get the right kind and names."""

    @pytest.mark.parametrize(
        'name,kind',
        [
            ('String', ShapeKind.SCALAR),
            ('ListOfStrings', ShapeKind.LIST),
            ('MapOfStringToBlob', ShapeKind.MAP),
            ('Color', ShapeKind.ENUM),
            ('SimpleStruct', ShapeKind.STRUCTURE),
            ('EmptyModeledException', ShapeKind.EXCEPTION),
            ('EventStream', ShapeKind.EVENT_UNION),
            ('PingEvent', ShapeKind.EVENT_MEMBER),
        ],
    )
    def test_kinds(self, graph, name, kind):
        assert graph[name].kind == kind

    def test_scalar_kinds(self, graph):
        assert graph['Blob'].scalar == ScalarKind.BLOB
        assert graph['StreamingBlob'].scalar == ScalarKind.STREAMING_BLOB
        assert graph['BigDecimal'].scalar == ScalarKind.BIG_DECIMAL
        assert graph['SimpleStruct'].scalar is None

    def test_class_and_module_names(self, graph):
        shape = graph['AllTypesRequest']
        assert shape.class_name == 'AllTypesRequest'
        assert shape.module_name == 'all_types_request'
        assert graph['String'].class_name is None

    def test_member_attributes(self, graph):
        shape = graph['AllTypesRequest']
        assert shape.member('StringMember').attribute == 'string_member'
        assert shape.member('ClientToken').idempotency_token is True
        assert shape.member('StringMember').required is True
        assert shape.member('IntegerMember').required is False

    def test_streaming_member(self, graph):
        shape = graph['StreamEventsRequest']
        assert shape.streaming_member.name == 'Payload'
        assert graph['AllTypesRequest'].streaming_member is None

    def test_enum_constants(self, graph):
        color = graph['Color']
        assert color.enum_values == ('RED', 'green', 'light-blue')
        assert color.enum_constants == ('RED', 'GREEN', 'LIGHT_BLUE')

    def test_error_codes(self, graph):
        assert graph['ThrottledException'].error_code == 'Throttling'
        assert graph['ThrottledException'].http_status_code == 429
        assert graph['ThrottledException'].sender_fault
        assert not graph['EmptyModeledException'].sender_fault
        assert graph['EmptyModeledException'].error_code == 'EmptyModeledException'
        assert graph['SimpleStruct'].error_code is None

    def test_discriminator_is_an_attribute(self, graph):
        assert graph['Animal'].discriminator == 'kind'
        assert graph['Animal'].subtypes == ('Cat', 'Dog')

    def test_service_names(self, graph):
        service = graph.service
        assert service.service_id == 'JsonProtocolTests'
        assert service.base_names == (
            'JsonProtocolTestsException',
            'JsonProtocolTestsRequest',
            'JsonProtocolTestsResponse',
        )

    def test_service_name_override(self):
        graph = resolve_description(SERVICE_DESCRIPTION, service_name='my-service')
        assert graph.service.base_exception == 'MyServiceException'

    def test_operations(self, graph):
        operation = graph.operations['AllTypes']
        assert operation.input == 'AllTypesRequest'
        assert operation.errors == ('EmptyModeledException', 'ThrottledException')
        assert graph.input_shapes == {'AllTypesRequest', 'StreamEventsRequest'}
        assert 'ThrottledException' in graph.error_shapes

    def test_generated_shapes_in_document_order(self, graph):
        names = [shape.name for shape in graph.generated_shapes()]
        assert names[:3] == ['Color', 'SimpleStruct', 'AllTypesRequest']
        assert 'String' not in names
        assert graph.by_index(0).name == 'String'


class TestRecursion:
    """Test cycle detection and recursion points."""

    def test_recursion_points(self, graph):
        assert ('RecursiveNode', 'RecursiveNode') in graph.recursion_points
        assert ('RecursiveNodeList', 'RecursiveNode') in graph.recursion_points

    def test_recursive_members(self, graph):
        assert graph.is_recursive('RecursiveNode', 'Next')
        assert graph.is_recursive('RecursiveNode', 'Children')
        assert not graph.is_recursive('RecursiveNode', 'Value')
        assert not graph.is_recursive('AllTypesResponse', 'RecursiveStruct')

    def test_reaches(self, graph):
        assert graph.reaches('AllTypesResponse', 'RecursiveNode')
        assert not graph.reaches('RecursiveNode', 'AllTypesResponse')

    def test_cycle_through_collections_only(self):
        description = make_description(
            {
                'ListA': {'type': 'list', 'member': {'shape': 'ListB'}},
                'ListB': {'type': 'list', 'member': {'shape': 'ListA'}},
            }
        )
        with pytest.raises(CyclicKeyError) as exc_info:
            resolve_description(description)
        assert exc_info.value.cycle == ['ListA', 'ListB', 'ListA']

    def test_cycle_through_map_values_only(self):
        description = make_description(
            {'M': {'type': 'map', 'key': {'shape': 'String'}, 'value': {'shape': 'M'}}}
        )
        with pytest.raises(CyclicKeyError):
            resolve_description(description)

    def test_deep_reference_chain(self):
        depth = 1500
        shapes = {
            f'Node{i}': {'type': 'structure', 'members': {'Next': {'shape': f'Node{i + 1}'}}}
            for i in range(depth)
        }
        shapes[f'Node{depth}'] = {'type': 'structure', 'members': {'First': {'shape': 'Node0'}}}
        graph = resolve_description(make_description(shapes))
        assert graph.recursion_points == frozenset({(f'Node{depth}', 'Node0')})
        assert graph.is_recursive('Node0', 'Next')


class TestSharedOperationShapes:
    """Test operations whose input and output are the same structure."""

    @staticmethod
    def description(**extra_shapes):
        return make_description(
            {
                'Payload': {'type': 'structure', 'members': {'Value': {'shape': 'String'}}},
                **extra_shapes,
            },
            operations={
                'Echo': {'input': {'shape': 'Payload'}, 'output': {'shape': 'Payload'}},
                'Store': {'input': {'shape': 'Payload'}},
            },
        )

    def test_operations_get_their_own_shapes(self):
        graph = resolve_description(self.description())
        assert graph.operations['Echo'].input == 'EchoRequest'
        assert graph.operations['Echo'].output == 'EchoResponse'
        assert graph.operations['Store'].input == 'StoreRequest'
        assert graph.input_shapes == {'EchoRequest', 'StoreRequest'}
        assert graph.output_shapes == {'EchoResponse'}

    def test_copies_follow_the_shared_shape(self):
        graph = resolve_description(self.description())
        names = [shape.name for shape in graph.generated_shapes()]
        assert names == ['Payload', 'EchoRequest', 'EchoResponse', 'StoreRequest']
        assert graph['EchoResponse'].kind == ShapeKind.STRUCTURE
        assert [m.attribute for m in graph['EchoResponse'].members] == ['value']
        assert graph['Payload'].kind == ShapeKind.STRUCTURE

    def test_shape_used_by_one_role_is_kept(self, graph):
        assert graph.operations['AllTypes'].input == 'AllTypesRequest'
        assert 'AllTypesRequest' in graph.input_shapes

    def test_copy_name_taken(self):
        description = self.description(EchoRequest={'type': 'structure', 'members': {}})
        with pytest.raises(NameCollisionError) as exc_info:
            resolve_description(description)
        assert exc_info.value.identifier == 'EchoRequest'


class TestInvalidModels:
    """Test that each resolution rule rejects the documents it should."""

    def test_unresolved_member(self):
        description = make_description(
            {'S': {'type': 'structure', 'members': {'X': {'shape': 'Missing'}}}}
        )
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            resolve_description(description)
        assert exc_info.value.reference == 'Missing'
        assert exc_info.value.referrer == 'S.X'

    def test_unresolved_operation_input(self):
        description = make_description({}, operations={'Op': {'input': {'shape': 'Nope'}}})
        with pytest.raises(UnresolvedReferenceError, match='operation Op'):
            resolve_description(description)

    def test_conflicting_flags(self):
        description = make_description(
            {'S': {'type': 'structure', 'exception': True, 'event': True, 'members': {}}}
        )
        with pytest.raises(InvalidUnionError, match='mutually exclusive'):
            resolve_description(description)

    def test_event_outside_union(self):
        description = make_description(
            {
                'E': {'type': 'structure', 'event': True, 'members': {}},
                'S': {'type': 'structure', 'members': {'Event': {'shape': 'E'}}},
            }
        )
        with pytest.raises(InvalidUnionError):
            resolve_description(description)

    def test_union_member_not_an_event(self):
        description = make_description(
            {
                'U': {
                    'type': 'structure',
                    'eventstream': True,
                    'members': {'Text': {'shape': 'String'}},
                }
            }
        )
        with pytest.raises(InvalidUnionError, match='not an event'):
            resolve_description(description)

    def test_map_key_must_be_string(self):
        description = make_description(
            {
                'Int': {'type': 'integer'},
                'M': {'type': 'map', 'key': {'shape': 'Int'}, 'value': {'shape': 'String'}},
            }
        )
        with pytest.raises(InvalidShapeError, match='map keys must be strings'):
            resolve_description(description)

    def test_two_streaming_members(self):
        description = make_description(
            {
                'Stream': {'type': 'blob', 'streaming': True},
                'S': {
                    'type': 'structure',
                    'members': {'A': {'shape': 'Stream'}, 'B': {'shape': 'Stream'}},
                },
            }
        )
        with pytest.raises(InvalidShapeError, match='at most one streaming member'):
            resolve_description(description)

    def test_streaming_blob_in_list(self):
        description = make_description(
            {
                'Stream': {'type': 'blob', 'streaming': True},
                'L': {'type': 'list', 'member': {'shape': 'Stream'}},
            }
        )
        with pytest.raises(InvalidShapeError, match='streaming blobs may only be'):
            resolve_description(description)

    def test_operation_error_must_be_exception(self):
        description = make_description(
            {'S': {'type': 'structure', 'members': {}}},
            operations={'Op': {'errors': [{'shape': 'S'}]}},
        )
        with pytest.raises(InvalidShapeError, match='not an exception'):
            resolve_description(description)

    def test_operation_input_cannot_be_union(self):
        description = with_shapes()
        description['operations']['StreamEvents']['input'] = {'shape': 'EventStream'}
        with pytest.raises(InvalidUnionError):
            resolve_description(description)

    def test_class_name_collision(self):
        description = make_description(
            {
                'foo-bar': {'type': 'structure', 'members': {}},
                'FooBar': {'type': 'structure', 'members': {}},
            }
        )
        with pytest.raises(NameCollisionError) as exc_info:
            resolve_description(description)
        assert exc_info.value.identifier == 'FooBar'
        assert exc_info.value.names == ['FooBar', 'foo-bar']

    def test_class_name_collides_with_service_base(self):
        description = with_shapes(
            JsonProtocolTestsException={'type': 'structure', 'members': {}}
        )
        with pytest.raises(NameCollisionError):
            resolve_description(description)

    @pytest.mark.parametrize('name', ['MappingProxyType', 'BaseException', 'Decimal'])
    def test_class_name_shadows_generated_import(self, name):
        description = make_description({name: {'type': 'structure', 'members': {}}})
        with pytest.raises(NameCollisionError, match='reserved names'):
            resolve_description(description)

    def test_member_name_collision(self):
        description = make_description(
            {
                'S': {
                    'type': 'structure',
                    'members': {'fooBar': {'shape': 'String'}, 'FooBar': {'shape': 'String'}},
                }
            }
        )
        with pytest.raises(NameCollisionError, match="identifier 'foo_bar'"):
            resolve_description(description)

    def test_getter_collision(self):
        description = make_description(
            {
                'S': {
                    'type': 'structure',
                    'members': {'Name': {'shape': 'String'}, 'GetName': {'shape': 'String'}},
                }
            }
        )
        with pytest.raises(NameCollisionError):
            resolve_description(description)

    def test_reserved_member_name(self):
        description = make_description(
            {'S': {'type': 'structure', 'members': {'Build': {'shape': 'String'}}}}
        )
        with pytest.raises(NameCollisionError, match='reserved names of S'):
            resolve_description(description)

    def test_reserved_request_member(self):
        description = make_description(
            {
                'Req': {
                    'type': 'structure',
                    'members': {'OverrideConfiguration': {'shape': 'String'}},
                }
            },
            operations={'Op': {'input': {'shape': 'Req'}}},
        )
        with pytest.raises(NameCollisionError):
            resolve_description(description)

    def test_reserved_exception_member(self):
        description = make_description(
            {
                'Err': {
                    'type': 'structure',
                    'exception': True,
                    'members': {'RequestId': {'shape': 'String'}},
                }
            }
        )
        with pytest.raises(NameCollisionError):
            resolve_description(description)

    def test_enum_constant_collision(self):
        description = make_description(
            {'E': {'type': 'string', 'enum': ['light-blue', 'LIGHT_BLUE']}}
        )
        with pytest.raises(NameCollisionError, match='constants of E'):
            resolve_description(description)

    def test_enum_unknown_value_is_reserved(self):
        description = make_description(
            {'E': {'type': 'string', 'enum': ['UNKNOWN_TO_SDK_VERSION']}}
        )
        with pytest.raises(NameCollisionError):
            resolve_description(description)

    def test_module_function(self):
        graph = resolve(load_model(SERVICE_DESCRIPTION))
        assert 'SimpleStruct' in graph
        assert 'Nope' not in graph
