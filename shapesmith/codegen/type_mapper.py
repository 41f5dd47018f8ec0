"""Mapping of resolved shapes to Python type descriptors.

Every type is described by three hints: the one accepted by a builder
setter, the one stored (and returned) by the builder, and the one exposed by
the immutable value. They differ only for collections: a setter accepts any
``Sequence``, the builder keeps a ``list`` of its own and the value exposes
a ``tuple``.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from shapesmith.codegen.graph import ResolvedShape, ScalarKind, ShapeGraph, ShapeKind
from shapesmith.exceptions import DuplicateIdempotencyTokenError, InvalidShapeError

logger = logging.getLogger(__name__)

__all__ = ['TypeKind', 'ResolvedType', 'PropertyContract', 'TypeMapper']

ImportMap = Mapping[str, frozenset[str]]

_EMPTY_IMPORTS: ImportMap = MappingProxyType({})

# kind -> (type hint, imports)
_PRIMITIVE_TYPE_MAP: dict[ScalarKind, tuple[str, dict[str, set[str]]]] = {
    ScalarKind.STRING: ('str', {}),
    ScalarKind.INTEGER: ('int', {}),
    ScalarKind.LONG: ('int', {}),
    ScalarKind.SHORT: ('int', {}),
    ScalarKind.BYTE: ('int', {}),
    ScalarKind.BIG_INTEGER: ('int', {}),
    ScalarKind.FLOAT: ('float', {}),
    ScalarKind.DOUBLE: ('float', {}),
    ScalarKind.BIG_DECIMAL: ('Decimal', {'decimal': {'Decimal'}}),
    ScalarKind.BOOLEAN: ('bool', {}),
    ScalarKind.TIMESTAMP: ('datetime', {'datetime': {'datetime'}}),
    ScalarKind.BLOB: ('bytes', {}),
    ScalarKind.STREAMING_BLOB: ('BinaryIO', {'typing': {'BinaryIO'}}),
}


class TypeKind(Enum):
    SCALAR = 'scalar'
    LIST = 'list'
    MAP = 'map'
    ENUM = 'enum'
    STRUCTURE = 'structure'


def _merge_imports(*maps: ImportMap | dict[str, set[str]]) -> ImportMap:
    merged: dict[str, set[str]] = {}
    for imports in maps:
        for module, names in imports.items():
            merged.setdefault(module, set()).update(names)
    return MappingProxyType({module: frozenset(names) for module, names in merged.items()})


@dataclass(frozen=True)
class ResolvedType:
    """Target type descriptor of one shape.

    Attributes:
        shape_name: The shape this type was mapped from.
        kind: Scalar, list, map, enum or generated structure.
        input_hint: Hint accepted by builder setters.
        builder_hint: Hint stored and returned by builders.
        value_hint: Hint exposed by the immutable value.
        element: Element type of a list, value type of a map.
        key: Key type of a map.
        class_name: Generated class for enums and structures.
        module_name: Module defining ``class_name``.
        nullable: Whether an unset value reads as ``None``.
        defensive_copy: Whether the value is a byte buffer that must be
            copied on every read and write.
        streaming: Whether the value is a stream rather than a buffer.
        imports: Modules and names the hints need, as ``{module: names}``.
        references: Generated ``(class_name, module_name)`` pairs the hints
            mention.
        properties: Builder contract, for structure-like shapes mapped through
            ``TypeMapper.map_type``.
    """

    shape_name: str
    kind: TypeKind
    input_hint: str
    builder_hint: str
    value_hint: str
    element: 'ResolvedType | None' = None
    key: 'ResolvedType | None' = None
    class_name: str | None = None
    module_name: str | None = None
    nullable: bool = True
    defensive_copy: bool = False
    streaming: bool = False
    imports: ImportMap = field(default_factory=lambda: _EMPTY_IMPORTS)
    references: frozenset[tuple[str, str]] = frozenset()
    properties: tuple['PropertyContract', ...] = ()

    @property
    def is_collection(self) -> bool:
        return self.kind == TypeKind.LIST

    @property
    def is_map(self) -> bool:
        return self.kind == TypeKind.MAP

    def get_property(self, attribute: str) -> 'PropertyContract':
        for contract in self.properties:
            if contract.attribute == attribute:
                return contract
        raise KeyError(attribute)

    @property
    def idempotency_token(self) -> 'PropertyContract | None':
        return next((p for p in self.properties if p.idempotency_token), None)


@dataclass(frozen=True)
class PropertyContract:
    """One settable property of a generated builder."""

    member_name: str
    attribute: str
    type: ResolvedType
    required: bool = False
    idempotency_token: bool = False
    streaming: bool = False
    recursive: bool = False
    documentation: str | None = None
    deprecated: bool = False

    @property
    def getter_name(self) -> str:
        return f'get_{self.attribute}'

    @property
    def setter_signature(self) -> str:
        return (
            f'{self.attribute}(self, {self.attribute}: {self.type.input_hint} | None)'
            f' -> Builder'
        )

    @property
    def getter_signature(self) -> str:
        return f'{self.getter_name}(self) -> {self.type.builder_hint} | None'


class TypeMapper:
    """Maps shapes of a ``ShapeGraph`` to ``ResolvedType`` descriptors.

    Mapping is pure and memoised per shape. Members referencing a structure
    receive a *reference* type without properties, so recursive structures
    map in finite time.

    Example:
        >>> mapper = TypeMapper(graph)
        >>> mapper.map_type('ListOfStrings').builder_hint
        'list[str]'
    """

    def __init__(self, graph: ShapeGraph):
        self.graph = graph
        self._types: dict[str, ResolvedType] = {}
        self._references: dict[str, ResolvedType] = {}

    def map_type(self, shape: ResolvedShape | str) -> ResolvedType:
        """Return the full type descriptor of a shape.

        Raises:
            DuplicateIdempotencyTokenError: A structure declares two
                idempotency-token members.
            InvalidShapeError: An idempotency token is not a string.
        """
        name = shape if isinstance(shape, str) else shape.name
        if name not in self._types:
            resolved = self._reference(name)
            if self.graph[name].kind.is_structure_like:
                resolved = self._with_properties(resolved, self.graph[name])
            self._types[name] = resolved
        return self._types[name]

    def map_all(self) -> dict[str, ResolvedType]:
        """Map every generated shape, in document order."""
        return {shape.name: self.map_type(shape) for shape in self.graph.generated_shapes()}

    def _reference(self, name: str) -> ResolvedType:
        if name not in self._references:
            self._references[name] = self._map_reference(self.graph[name])
        return self._references[name]

    def _map_reference(self, shape: ResolvedShape) -> ResolvedType:
        kind = shape.kind
        if kind == ShapeKind.SCALAR:
            hint, imports = _PRIMITIVE_TYPE_MAP[shape.scalar]
            return ResolvedType(
                shape_name=shape.name,
                kind=TypeKind.SCALAR,
                input_hint=hint,
                builder_hint=hint,
                value_hint=hint,
                defensive_copy=shape.scalar == ScalarKind.BLOB,
                streaming=shape.scalar == ScalarKind.STREAMING_BLOB,
                imports=_merge_imports(imports),
            )

        if kind == ShapeKind.LIST:
            element = self._reference(shape.element)
            return ResolvedType(
                shape_name=shape.name,
                kind=TypeKind.LIST,
                input_hint=f'Sequence[{element.input_hint}]',
                builder_hint=f'list[{element.builder_hint}]',
                value_hint=f'tuple[{element.value_hint}, ...]',
                element=element,
                imports=_merge_imports(element.imports, {'collections.abc': {'Sequence'}}),
                references=element.references,
            )

        if kind == ShapeKind.MAP:
            key = self._reference(shape.key)
            value = self._reference(shape.value)
            return ResolvedType(
                shape_name=shape.name,
                kind=TypeKind.MAP,
                input_hint=f'Mapping[{key.input_hint}, {value.input_hint}]',
                builder_hint=f'dict[{key.builder_hint}, {value.builder_hint}]',
                value_hint=f'Mapping[{key.value_hint}, {value.value_hint}]',
                element=value,
                key=key,
                imports=_merge_imports(
                    key.imports, value.imports, {'collections.abc': {'Mapping'}}
                ),
                references=key.references | value.references,
            )

        # enums and structure-like shapes become generated classes
        return ResolvedType(
            shape_name=shape.name,
            kind=TypeKind.ENUM if kind == ShapeKind.ENUM else TypeKind.STRUCTURE,
            input_hint=shape.class_name,
            builder_hint=shape.class_name,
            value_hint=shape.class_name,
            class_name=shape.class_name,
            module_name=shape.module_name,
            references=frozenset({(shape.class_name, shape.module_name)}),
        )

    def _with_properties(self, resolved: ResolvedType, shape: ResolvedShape) -> ResolvedType:
        tokens = [m.name for m in shape.members if m.idempotency_token]
        if len(tokens) > 1:
            raise DuplicateIdempotencyTokenError(shape.name, tokens)

        properties = []
        for member in shape.members:
            member_type = self._reference(member.target)
            if member.idempotency_token and member_type.builder_hint != 'str':
                raise InvalidShapeError(
                    shape.name,
                    f"idempotency token '{member.name}' must target a string shape",
                )
            properties.append(
                PropertyContract(
                    member_name=member.name,
                    attribute=member.attribute,
                    type=member_type,
                    required=member.required,
                    idempotency_token=member.idempotency_token,
                    streaming=member.streaming,
                    recursive=self.graph.is_recursive(shape.name, member.name),
                    documentation=member.documentation,
                    deprecated=member.deprecated,
                )
            )

        logger.debug(f'Mapped {shape.name} with {len(properties)} properties')
        return ResolvedType(
            shape_name=resolved.shape_name,
            kind=resolved.kind,
            input_hint=resolved.input_hint,
            builder_hint=resolved.builder_hint,
            value_hint=resolved.value_hint,
            class_name=resolved.class_name,
            module_name=resolved.module_name,
            imports=resolved.imports,
            references=resolved.references,
            properties=tuple(properties),
        )
