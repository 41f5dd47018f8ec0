"""shapesmith - Generate immutable, builder-based Python models from service descriptions.

shapesmith compiles a JSON or YAML service description (metadata, operations
and a table of shapes) into a package of Python classes: immutable values
with fluent builders, per-service exception, request and response bases,
closed event-stream unions and forward-compatible enums.

Quick Start:
    >>> from shapesmith import Codegen, DocumentConfig
    >>>
    >>> config = DocumentConfig(
    ...     source='./service.json',
    ...     output='./client'
    ... )
    >>> codegen = Codegen(config)
    >>> codegen.generate()

CLI Usage:
    $ shapesmith generate --config shapesmith.yaml
    $ shapesmith validate ./service.json
"""

from shapesmith.codegen.codegen import Codegen
from shapesmith.codegen.emitter import Emitter
from shapesmith.codegen.graph import ShapeGraphResolver
from shapesmith.codegen.type_mapper import TypeMapper
from shapesmith.config import CodegenConfig, DocumentConfig, get_config
from shapesmith.exceptions import (
    AmbiguousSubtypeError,
    CodeGenerationError,
    ConfigurationError,
    CyclicKeyError,
    DuplicateIdempotencyTokenError,
    EventUnionMemberError,
    InvalidShapeError,
    InvalidUnionError,
    MalformedModelError,
    MissingRequiredMemberError,
    ModelError,
    NameCollisionError,
    OutputError,
    ResolutionError,
    ShapesmithError,
    UnresolvedReferenceError,
)
from shapesmith.model.loader import ModelLoader

__all__ = [
    # Main classes
    'Codegen',
    'ModelLoader',
    'ShapeGraphResolver',
    'TypeMapper',
    'Emitter',
    # Configuration
    'CodegenConfig',
    'DocumentConfig',
    'get_config',
    # Exceptions
    'ShapesmithError',
    'ModelError',
    'MalformedModelError',
    'ResolutionError',
    'UnresolvedReferenceError',
    'CyclicKeyError',
    'InvalidUnionError',
    'InvalidShapeError',
    'NameCollisionError',
    'DuplicateIdempotencyTokenError',
    'AmbiguousSubtypeError',
    'CodeGenerationError',
    'ConfigurationError',
    'OutputError',
    'MissingRequiredMemberError',
    'EventUnionMemberError',
]

try:
    from shapesmith._version import version as __version__
except ImportError:
    __version__ = 'unknown'
