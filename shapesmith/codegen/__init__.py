"""Code generation module for shapesmith.

This module compiles a resolved service description into Python source.

Main Components:
    - Codegen: The orchestrator running every stage of a compilation
    - ShapeGraphResolver: Resolves a raw document into a ShapeGraph
    - TypeMapper: Maps shapes to Python type descriptors
    - HierarchyResolver: Resolves supertypes, event unions and subtypes
    - CodeModelBuilder: Assembles emission-ready CodeModels
    - Emitter: Renders CodeModels through replaceable templates
    - CodeEmitter: Handles output of the generated package

Example:
    >>> from shapesmith.codegen import Codegen
    >>> from shapesmith.config import DocumentConfig
    >>>
    >>> config = DocumentConfig(source='./service.json', output='./client')
    >>> Codegen(config).generate()
"""

from shapesmith.codegen.ast_utils import ImportCollector
from shapesmith.codegen.code_model import (
    ClassRef,
    CodeModel,
    CodeModelBuilder,
    CodeModelKind,
    CopyPlan,
    FieldModel,
)
from shapesmith.codegen.codegen import Codegen
from shapesmith.codegen.emitter import CodeEmitter, Emitter, FileEmitter, StringEmitter
from shapesmith.codegen.graph import (
    ResolvedMember,
    ResolvedOperation,
    ResolvedShape,
    ScalarKind,
    ServiceNames,
    ShapeGraph,
    ShapeGraphResolver,
    ShapeKind,
    resolve,
)
from shapesmith.codegen.hierarchy import (
    EdgeKind,
    Hierarchy,
    HierarchyResolver,
    InheritanceEdge,
    PolymorphicDescriptor,
    UnionDescriptor,
    UnionVariant,
)
from shapesmith.codegen.templates import DEFAULT_TEMPLATES, Template
from shapesmith.codegen.type_mapper import (
    PropertyContract,
    ResolvedType,
    TypeKind,
    TypeMapper,
)

__all__ = [
    # Orchestration
    'Codegen',
    # Shape graph
    'ShapeGraphResolver',
    'ShapeGraph',
    'ShapeKind',
    'ScalarKind',
    'ResolvedShape',
    'ResolvedMember',
    'ResolvedOperation',
    'ServiceNames',
    'resolve',
    # Types
    'TypeMapper',
    'TypeKind',
    'ResolvedType',
    'PropertyContract',
    # Hierarchy
    'HierarchyResolver',
    'Hierarchy',
    'EdgeKind',
    'InheritanceEdge',
    'UnionDescriptor',
    'UnionVariant',
    'PolymorphicDescriptor',
    # Code models
    'CodeModelBuilder',
    'CodeModel',
    'CodeModelKind',
    'ClassRef',
    'CopyPlan',
    'FieldModel',
    # Emission
    'Emitter',
    'Template',
    'DEFAULT_TEMPLATES',
    'CodeEmitter',
    'FileEmitter',
    'StringEmitter',
    'ImportCollector',
]
