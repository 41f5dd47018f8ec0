"""Test fixtures for shapesmith tests.

This module provides sample service descriptions and small helpers for
building broken variants of them.
"""

import copy

METADATA = {
    'serviceId': 'JsonProtocolTests',
    'protocol': 'json',
    'apiVersion': '2024-01-01',
}

# A service exercising every shape kind the compiler supports
SERVICE_DESCRIPTION = {
    'metadata': METADATA,
    'operations': {
        'AllTypes': {
            'name': 'AllTypes',
            'http': {'method': 'POST', 'requestUri': '/'},
            'input': {'shape': 'AllTypesRequest'},
            'output': {'shape': 'AllTypesResponse'},
            'errors': [{'shape': 'EmptyModeledException'}, {'shape': 'ThrottledException'}],
        },
        'StreamEvents': {
            'name': 'StreamEvents',
            'http': {'method': 'POST', 'requestUri': '/events'},
            'input': {'shape': 'StreamEventsRequest'},
            'output': {'shape': 'StreamEventsResponse'},
        },
    },
    'shapes': {
        'String': {'type': 'string'},
        'Integer': {'type': 'integer'},
        'Boolean': {'type': 'boolean'},
        'Timestamp': {'type': 'timestamp'},
        'BigDecimal': {'type': 'bigDecimal'},
        'Blob': {'type': 'blob'},
        'StreamingBlob': {'type': 'blob', 'streaming': True},
        'ListOfStrings': {'type': 'list', 'member': {'shape': 'String'}},
        'ListOfListOfStrings': {'type': 'list', 'member': {'shape': 'ListOfStrings'}},
        'ListOfBlobs': {'type': 'list', 'member': {'shape': 'Blob'}},
        'ListOfListOfBlobs': {'type': 'list', 'member': {'shape': 'ListOfBlobs'}},
        'MapOfStringToBlob': {
            'type': 'map',
            'key': {'shape': 'String'},
            'value': {'shape': 'Blob'},
        },
        'Color': {
            'type': 'string',
            'enum': ['RED', 'green', 'light-blue'],
            'documentation': 'Colors a thing can be painted in.',
        },
        'SimpleStruct': {
            'type': 'structure',
            'members': {'Value': {'shape': 'String'}},
        },
        'AllTypesRequest': {
            'type': 'structure',
            'required': ['StringMember'],
            'members': {
                'StringMember': {'shape': 'String', 'documentation': 'A plain string.'},
                'IntegerMember': {'shape': 'Integer'},
                'BooleanMember': {'shape': 'Boolean'},
                'TimestampMember': {'shape': 'Timestamp'},
                'BigDecimalMember': {'shape': 'BigDecimal'},
                'BlobMember': {'shape': 'Blob'},
                'ListOfStrings': {'shape': 'ListOfStrings'},
                'ListOfListOfStrings': {'shape': 'ListOfListOfStrings'},
                'ListOfListOfBlobs': {'shape': 'ListOfListOfBlobs'},
                'MapOfStringToBlob': {'shape': 'MapOfStringToBlob'},
                'ColorMember': {'shape': 'Color'},
                'StructMember': {'shape': 'SimpleStruct'},
                'ClientToken': {'shape': 'String', 'idempotencyToken': True},
            },
        },
        'AllTypesResponse': {
            'type': 'structure',
            'members': {
                'StringMember': {'shape': 'String'},
                'RecursiveStruct': {'shape': 'RecursiveNode'},
            },
        },
        'RecursiveNode': {
            'type': 'structure',
            'members': {
                'Value': {'shape': 'String'},
                'Next': {'shape': 'RecursiveNode'},
                'Children': {'shape': 'RecursiveNodeList'},
            },
        },
        'RecursiveNodeList': {'type': 'list', 'member': {'shape': 'RecursiveNode'}},
        'EmptyModeledException': {
            'type': 'structure',
            'exception': True,
            'members': {},
        },
        'ThrottledException': {
            'type': 'structure',
            'exception': True,
            'error': {'code': 'Throttling', 'httpStatusCode': 429, 'senderFault': True},
            'required': ['Message'],
            'members': {
                'Message': {'shape': 'String'},
                'RetryAfterSeconds': {'shape': 'Integer'},
            },
        },
        'ThrottledSubException': {
            'type': 'structure',
            'exception': True,
            'parent': 'ThrottledException',
            'members': {'Reason': {'shape': 'String'}},
        },
        'StreamEventsRequest': {
            'type': 'structure',
            'members': {'Payload': {'shape': 'StreamingBlob'}},
        },
        'StreamEventsResponse': {
            'type': 'structure',
            'members': {'Events': {'shape': 'EventStream'}},
        },
        'EventStream': {
            'type': 'structure',
            'eventstream': True,
            'members': {
                'Ping': {'shape': 'PingEvent'},
                'Data': {'shape': 'DataEvent'},
            },
        },
        'PingEvent': {'type': 'structure', 'event': True, 'members': {}},
        'DataEvent': {
            'type': 'structure',
            'event': True,
            'members': {'Payload': {'shape': 'Blob'}},
        },
        'Animal': {
            'type': 'structure',
            'subtypes': ['Cat', 'Dog'],
            'discriminator': 'Kind',
            'members': {
                'Kind': {'shape': 'String'},
                'Name': {'shape': 'String'},
            },
        },
        'Cat': {
            'type': 'structure',
            'parent': 'Animal',
            'members': {'Lives': {'shape': 'Integer'}},
        },
        'Dog': {
            'type': 'structure',
            'members': {'GoodBoy': {'shape': 'Boolean'}},
        },
    },
}

# Smallest document the loader accepts
MINIMAL_DESCRIPTION = {
    'metadata': {'serviceId': 'Minimal', 'protocol': 'json'},
    'operations': {},
    'shapes': {},
}

SERVICE_DESCRIPTION_YAML = """
metadata:
  serviceId: YamlService
  protocol: rest-json
operations:
  Ping:
    input:
      shape: PingRequest
shapes:
  String:
    type: string
  PingRequest:
    type: structure
    members:
      Message:
        shape: String
"""


def make_description(shapes: dict, operations: dict | None = None) -> dict:
    """Build a document from a shape table, with a String shape always present."""
    return {
        'metadata': copy.deepcopy(METADATA),
        'operations': copy.deepcopy(operations or {}),
        'shapes': {'String': {'type': 'string'}, **copy.deepcopy(shapes)},
    }


def with_shapes(**shapes) -> dict:
    """Copy SERVICE_DESCRIPTION with some shapes replaced or added."""
    description = copy.deepcopy(SERVICE_DESCRIPTION)
    description['shapes'].update(copy.deepcopy(shapes))
    return description
