"""Shape graph resolution.

The resolver turns a structurally valid ``RawModel`` into an immutable
``ShapeGraph``: every reference checked, every shape classified, every
generated identifier assigned, and every cycle either recorded as a legal
recursion point or rejected.

Shapes live in an arena keyed by name; members hold the *name* of their
target rather than the target itself, so recursive structures never need an
inline, infinitely nested representation.
"""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from shapesmith.codegen.utils import (
    sanitize_identifier,
    sanitize_parameter_field_name,
    to_constant_name,
)
from shapesmith.exceptions import (
    CyclicKeyError,
    InvalidShapeError,
    InvalidUnionError,
    NameCollisionError,
    UnresolvedReferenceError,
)
from shapesmith.model.document import RawModel, RawShape, RawShapeRef, ShapeType
from shapesmith.runtime.enums import UNKNOWN_ENUM_VALUE

logger = logging.getLogger(__name__)

__all__ = [
    'ShapeKind',
    'ScalarKind',
    'ResolvedMember',
    'ResolvedShape',
    'ResolvedOperation',
    'ServiceNames',
    'ShapeGraph',
    'ShapeGraphResolver',
    'resolve',
]


class ShapeKind(Enum):
    SCALAR = 'scalar'
    STRUCTURE = 'structure'
    LIST = 'list'
    MAP = 'map'
    ENUM = 'enum'
    EXCEPTION = 'exception'
    EVENT_UNION = 'event_union'
    EVENT_MEMBER = 'event_member'

    @property
    def is_structure_like(self) -> bool:
        return self in (
            ShapeKind.STRUCTURE,
            ShapeKind.EXCEPTION,
            ShapeKind.EVENT_UNION,
            ShapeKind.EVENT_MEMBER,
        )

    @property
    def is_generated(self) -> bool:
        """Whether the shape becomes a class of its own."""
        return self.is_structure_like or self == ShapeKind.ENUM


class ScalarKind(Enum):
    STRING = 'string'
    INTEGER = 'integer'
    LONG = 'long'
    SHORT = 'short'
    BYTE = 'byte'
    BIG_INTEGER = 'bigInteger'
    FLOAT = 'float'
    DOUBLE = 'double'
    BIG_DECIMAL = 'bigDecimal'
    BOOLEAN = 'boolean'
    TIMESTAMP = 'timestamp'
    BLOB = 'blob'
    STREAMING_BLOB = 'blob-streaming'


# Names every generated structure or builder already defines, plus the names
# setter bodies read, which a parameter of the same name would shadow.
RESERVED_MEMBER_NAMES = frozenset({
    'build', 'builder', 'to_builder', 'member_values', 'self', 'super', 'property', 'classmethod',
    'check_required', 'copy_bytes', 'copy_list', 'copy_map', 'freeze_list',
    'freeze_map', 'new_idempotency_token', 'partial',
})

RESERVED_MEMBER_NAMES_BY_KIND = {
    ShapeKind.EXCEPTION: frozenset(
        {'cause', 'request_id', 'status_code', 'error_details', 'retryable', 'create',
         'args', 'with_traceback', 'add_note'}
    ),
    ShapeKind.EVENT_UNION: frozenset(
        {'type', 'value', 'is_unknown', 'unknown', 'unknown_tag', 'unknown_payload',
         'from_event'}
    ),
}

REQUEST_MEMBER_NAMES = frozenset({'override_configuration'})
RESPONSE_MEMBER_NAMES = frozenset(
    {'response_metadata', 'http_status_code', 'http_headers', 'request_id'}
)

# Names imported into every generated module; a class may not shadow them.
RESERVED_CLASS_NAMES = frozenset({
    'Any', 'BinaryIO', 'Callable', 'Decimal', 'Mapping', 'Sequence', 'TYPE_CHECKING',
    'ShapeModel', 'ShapeBuilder', 'ShapeEnum', 'EventUnion', 'EventMember',
    'ServiceException', 'ServiceRequest', 'ServiceResponse', 'ErrorDetails',
    'RequestOverrideConfiguration', 'check_required', 'copy_bytes', 'copy_list',
    'copy_map', 'freeze_list', 'freeze_map', 'new_idempotency_token', 'partial',
    'datetime', 'annotations', 'MappingProxyType', 'BaseException',
})

_SCALAR_KINDS = {
    ShapeType.string: ScalarKind.STRING,
    ShapeType.integer: ScalarKind.INTEGER,
    ShapeType.long: ScalarKind.LONG,
    ShapeType.short: ScalarKind.SHORT,
    ShapeType.byte: ScalarKind.BYTE,
    ShapeType.big_integer: ScalarKind.BIG_INTEGER,
    ShapeType.float: ScalarKind.FLOAT,
    ShapeType.double: ScalarKind.DOUBLE,
    ShapeType.big_decimal: ScalarKind.BIG_DECIMAL,
    ShapeType.boolean: ScalarKind.BOOLEAN,
    ShapeType.timestamp: ScalarKind.TIMESTAMP,
    ShapeType.blob: ScalarKind.BLOB,
}


@dataclass(frozen=True)
class ResolvedMember:
    name: str
    attribute: str
    target: str
    required: bool = False
    idempotency_token: bool = False
    streaming: bool = False
    documentation: str | None = None
    deprecated: bool = False


@dataclass(frozen=True)
class ResolvedShape:
    """A classified, named shape in the arena."""

    name: str
    index: int
    kind: ShapeKind
    class_name: str | None = None
    module_name: str | None = None
    scalar: ScalarKind | None = None
    members: tuple[ResolvedMember, ...] = ()
    element: str | None = None
    key: str | None = None
    value: str | None = None
    enum_values: tuple[str, ...] = ()
    enum_constants: tuple[str, ...] = ()
    error_code: str | None = None
    http_status_code: int | None = None
    sender_fault: bool = False
    parent: str | None = None
    subtypes: tuple[str, ...] = ()
    discriminator: str | None = None
    documentation: str | None = None
    deprecated: bool = False

    def member(self, name: str) -> ResolvedMember:
        for member in self.members:
            if member.name == name:
                return member
        raise KeyError(name)

    @property
    def streaming_member(self) -> ResolvedMember | None:
        return next((m for m in self.members if m.streaming), None)

    @property
    def children(self) -> tuple[str, ...]:
        """Names of the shapes this shape references, in declaration order."""
        if self.kind == ShapeKind.LIST:
            return (self.element,)
        if self.kind == ShapeKind.MAP:
            return (self.key, self.value)
        return tuple(m.target for m in self.members)


@dataclass(frozen=True)
class ResolvedOperation:
    name: str
    method: str
    request_uri: str
    input: str | None = None
    output: str | None = None
    errors: tuple[str, ...] = ()
    documentation: str | None = None
    deprecated: bool = False


@dataclass(frozen=True)
class ServiceNames:
    """Service identity and the names of the synthetic per-service base types."""

    service_id: str
    protocol: str
    base_exception: str
    base_request: str
    base_response: str
    api_version: str | None = None

    @property
    def base_names(self) -> tuple[str, str, str]:
        return (self.base_exception, self.base_request, self.base_response)


@dataclass(frozen=True)
class ShapeGraph:
    """The fully resolved, read-only shape table of one service.

    Attributes:
        service: Service identity and synthetic base type names.
        shapes: Arena of shapes addressed by name, in document order.
        operations: Resolved operations by name.
        recursion_points: Back edges ``(from, to)`` closing a legal cycle.
        recursive_members: ``(shape, member)`` pairs whose target can reach
            the owning shape again.
        input_shapes: Shapes used as an operation input.
        output_shapes: Shapes used as an operation output.
        error_shapes: Shapes listed as an operation error.
    """

    service: ServiceNames
    shapes: Mapping[str, ResolvedShape]
    operations: Mapping[str, ResolvedOperation]
    recursion_points: frozenset[tuple[str, str]] = frozenset()
    recursive_members: frozenset[tuple[str, str]] = frozenset()
    input_shapes: frozenset[str] = frozenset()
    output_shapes: frozenset[str] = frozenset()
    error_shapes: frozenset[str] = frozenset()
    _by_index: tuple[str, ...] = field(default=(), repr=False, compare=False)

    def __getitem__(self, name: str) -> ResolvedShape:
        return self.shapes[name]

    def __contains__(self, name: object) -> bool:
        return name in self.shapes

    def __iter__(self) -> Iterator[ResolvedShape]:
        return iter(self.shapes.values())

    def by_index(self, index: int) -> ResolvedShape:
        return self.shapes[self._by_index[index]]

    def generated_shapes(self) -> list[ResolvedShape]:
        """Shapes that become classes, in document order."""
        return [s for s in self.shapes.values() if s.kind.is_generated]

    def is_recursive(self, shape_name: str, member_name: str) -> bool:
        return (shape_name, member_name) in self.recursive_members

    def reaches(self, source: str, target: str) -> bool:
        """Whether ``target`` is reachable from ``source`` along references."""
        seen = set()
        stack = [source]
        while stack:
            name = stack.pop()
            if name == target:
                return True
            if name in seen:
                continue
            seen.add(name)
            stack.extend(self.shapes[name].children)
        return False


class _Color(Enum):
    IN_PROGRESS = 1
    DONE = 2


class ShapeGraphResolver:
    """Resolves a ``RawModel`` into a ``ShapeGraph``.

    Resolution happens in fixed phases, each relying on the previous one
    having fully succeeded: references, classification, usage rules, cycles
    and finally naming. Any failure aborts the whole resolution.

    Example:
        >>> graph = ShapeGraphResolver(raw).resolve()
        >>> graph['SimpleStruct'].kind
        <ShapeKind.STRUCTURE: 'structure'>
    """

    def __init__(self, raw: RawModel, service_name: str | None = None):
        """Initialize the resolver.

        Args:
            raw: The structurally validated document.
            service_name: Optional override for the service identifier used
                to name the synthetic base exception, request and response.
        """
        self.raw = raw
        self.service_name = service_name
        self._kinds: dict[str, ShapeKind] = {}

    def resolve(self) -> ShapeGraph:
        """Run every resolution phase and return the frozen graph.

        Raises:
            UnresolvedReferenceError: A reference names an unknown shape.
            InvalidUnionError: Conflicting event/exception classification or
                misplaced events.
            InvalidShapeError: A shape is used in a way its kind forbids.
            CyclicKeyError: A cycle runs only through lists and maps.
            NameCollisionError: Two names map to the same identifier.
        """
        self._check_references()
        self._split_shared_roots()
        self._classify()
        self._check_usage()
        recursion_points = self._detect_cycles()
        service = self._service_names()
        class_names, module_names = self._assign_class_names(service)

        shapes = {}
        for index, (name, raw_shape) in enumerate(self.raw.shapes.items()):
            shapes[name] = self._build_shape(
                name, index, raw_shape, class_names.get(name), module_names.get(name)
            )

        operations = {
            name: ResolvedOperation(
                name=op.name or name,
                method=op.http.method,
                request_uri=op.http.request_uri,
                input=op.input.shape if op.input else None,
                output=op.output.shape if op.output else None,
                errors=tuple(ref.shape for ref in op.errors),
                documentation=op.documentation,
                deprecated=op.deprecated,
            )
            for name, op in self.raw.operations.items()
        }

        graph = ShapeGraph(
            service=service,
            shapes=MappingProxyType(shapes),
            operations=MappingProxyType(operations),
            recursion_points=frozenset(recursion_points),
            input_shapes=frozenset(op.input for op in operations.values() if op.input),
            output_shapes=frozenset(op.output for op in operations.values() if op.output),
            error_shapes=frozenset(e for op in operations.values() for e in op.errors),
            _by_index=tuple(shapes),
        )
        graph = self._with_recursive_members(graph)
        logger.debug(
            f'Resolved {len(shapes)} shapes and {len(operations)} operations for '
            f'{service.service_id} ({len(recursion_points)} recursion points)'
        )
        return graph

    # ------------------------------------------------------------------
    # Phase 1: references
    # ------------------------------------------------------------------

    def _check_references(self) -> None:
        shapes = self.raw.shapes

        def check(reference: str | None, referrer: str) -> None:
            if reference is not None and reference not in shapes:
                raise UnresolvedReferenceError(reference, referrer)

        for name, shape in shapes.items():
            for member_name, member in (shape.members or {}).items():
                check(member.shape, f'{name}.{member_name}')
            if shape.member is not None:
                check(shape.member.shape, f'{name}.member')
            if shape.key is not None:
                check(shape.key.shape, f'{name}.key')
            if shape.value is not None:
                check(shape.value.shape, f'{name}.value')
            check(shape.parent, f'{name}.parent')
            for subtype in shape.subtypes or ():
                check(subtype, f'{name}.subtypes')

        for name, op in self.raw.operations.items():
            referrer = f'operation {name}'
            check(op.input.shape if op.input else None, referrer)
            check(op.output.shape if op.output else None, referrer)
            for ref in op.errors:
                check(ref.shape, referrer)

    def _split_shared_roots(self) -> None:
        """Give operations their own request and response shapes where needed.

        A structure used as both an operation input and an operation output
        cannot extend the service base request and base response at once.
        Every operation using it gets an ``<Operation>Request`` or
        ``<Operation>Response`` copy of its members instead, and the shared
        structure stays a plain structure.
        """
        raw = self.raw
        shared = {
            name
            for name in self._input_names() & self._output_names()
            if _is_plain_structure(raw.shapes[name])
        }
        if not shared:
            return

        taken = set(raw.shapes)
        copies: dict[str, list[tuple[str, RawShape]]] = {}
        operations = {}
        for name, op in raw.operations.items():
            update = {}
            for role, suffix in (('input', 'Request'), ('output', 'Response')):
                ref = getattr(op, role)
                if ref is None or ref.shape not in shared:
                    continue
                wrapper = f'{sanitize_identifier(op.name or name)}{suffix}'
                if wrapper in taken:
                    raise NameCollisionError(
                        wrapper, [wrapper, f'operation {name}'], scope='operation shapes'
                    )
                taken.add(wrapper)
                copies.setdefault(ref.shape, []).append((
                    wrapper,
                    raw.shapes[ref.shape].model_copy(
                        update={'parent': None, 'subtypes': None, 'discriminator': None}
                    ),
                ))
                update[role] = RawShapeRef(shape=wrapper)
            operations[name] = op.model_copy(update=update) if update else op

        shapes = {}
        for name, shape in raw.shapes.items():
            shapes[name] = shape
            shapes.update(copies.get(name, ()))
        self.raw = raw.model_copy(update={'shapes': shapes, 'operations': operations})
        logger.debug(
            f"Split {', '.join(sorted(shared))} into per-operation request and response shapes"
        )

    # ------------------------------------------------------------------
    # Phase 2: classification
    # ------------------------------------------------------------------

    def _classify(self) -> None:
        for name, shape in self.raw.shapes.items():
            self._kinds[name] = self._classify_shape(name, shape)

    def _classify_shape(self, name: str, shape: RawShape) -> ShapeKind:
        flags = [
            flag
            for flag in ('exception', 'event', 'eventstream')
            if getattr(shape, flag)
        ]
        if len(flags) > 1:
            raise InvalidUnionError(
                name, f"flags {' and '.join(flags)} are mutually exclusive"
            )
        if (flags or shape.error is not None) and not shape.is_structure:
            raise InvalidShapeError(
                name, f"only structures can be flagged {flags[0] if flags else 'error'}"
            )
        if (shape.parent or shape.subtypes) and not shape.is_structure:
            raise InvalidShapeError(name, 'only structures can take part in a hierarchy')

        if shape.type == ShapeType.structure:
            if shape.exception:
                return ShapeKind.EXCEPTION
            if shape.eventstream:
                return ShapeKind.EVENT_UNION
            if shape.event:
                return ShapeKind.EVENT_MEMBER
            if shape.error is not None:
                logger.warning(f"Shape '{name}' has an error trait but is not an exception")
            return ShapeKind.STRUCTURE
        if shape.type == ShapeType.list:
            return ShapeKind.LIST
        if shape.type == ShapeType.map:
            return ShapeKind.MAP
        if shape.enum is not None:
            return ShapeKind.ENUM
        return ShapeKind.SCALAR

    def _scalar_kind(self, name: str, shape: RawShape) -> ScalarKind | None:
        if self._kinds[name] != ShapeKind.SCALAR:
            return None
        if shape.type == ShapeType.blob and shape.streaming:
            return ScalarKind.STREAMING_BLOB
        return _SCALAR_KINDS[shape.type]

    # ------------------------------------------------------------------
    # Phase 3: usage rules
    # ------------------------------------------------------------------

    def _is_streaming_blob(self, name: str) -> bool:
        shape = self.raw.shapes[name]
        return shape.type == ShapeType.blob and shape.streaming

    def _check_usage(self) -> None:
        shapes = self.raw.shapes
        kinds = self._kinds

        def forbid_event(target: str, referrer: str) -> None:
            if kinds[target] == ShapeKind.EVENT_MEMBER:
                raise InvalidUnionError(
                    target, f'event shapes may only be members of an event stream, '
                    f'but {referrer} references it'
                )

        def forbid_streaming(target: str, referrer: str) -> None:
            if self._is_streaming_blob(target):
                raise InvalidShapeError(
                    target, f'streaming blobs may only be structure members, '
                    f'but {referrer} references it'
                )

        for name, shape in shapes.items():
            kind = kinds[name]

            if kind == ShapeKind.LIST:
                forbid_event(shape.member.shape, name)
                forbid_streaming(shape.member.shape, name)
            elif kind == ShapeKind.MAP:
                key_shape = shapes[shape.key.shape]
                if key_shape.type != ShapeType.string:
                    raise InvalidShapeError(
                        name,
                        f"map keys must be strings or enums, '{shape.key.shape}' is "
                        f'{key_shape.type.value}',
                    )
                forbid_event(shape.value.shape, name)
                forbid_streaming(shape.value.shape, name)
            elif kind.is_structure_like:
                self._check_structure_members(name, shape, forbid_event)

            if shape.parent is not None and kinds[shape.parent] == ShapeKind.EVENT_MEMBER \
                    and kind != ShapeKind.EVENT_MEMBER:
                raise InvalidUnionError(
                    shape.parent, f"event shapes cannot be the parent of '{name}'"
                )

        for name, op in self.raw.operations.items():
            referrer = f'operation {name}'
            for ref in (op.input, op.output):
                if ref is None:
                    continue
                forbid_event(ref.shape, referrer)
                if kinds[ref.shape] == ShapeKind.EVENT_UNION:
                    raise InvalidUnionError(
                        ref.shape, f'event streams cannot be the input or output of {referrer}'
                    )
                if not kinds[ref.shape].is_structure_like:
                    raise InvalidShapeError(
                        ref.shape, f'the input and output of {referrer} must be structures'
                    )
            for ref in op.errors:
                if kinds[ref.shape] != ShapeKind.EXCEPTION:
                    raise InvalidShapeError(
                        ref.shape, f'{referrer} lists it as an error but it is not an exception'
                    )

    def _check_structure_members(self, name: str, shape: RawShape, forbid_event) -> None:
        kinds = self._kinds
        kind = kinds[name]
        streaming = []
        for member_name, member in (shape.members or {}).items():
            target = member.shape
            referrer = f'{name}.{member_name}'
            if kind == ShapeKind.EVENT_UNION:
                if kinds[target] != ShapeKind.EVENT_MEMBER:
                    raise InvalidUnionError(
                        name, f"member '{member_name}' targets '{target}', which is not an event"
                    )
            else:
                forbid_event(target, referrer)

            if member.streaming and self.raw.shapes[target].type != ShapeType.blob:
                raise InvalidShapeError(
                    name, f"streaming member '{member_name}' must target a blob"
                )
            if member.streaming or self._is_streaming_blob(target):
                streaming.append(member_name)

        if len(streaming) > 1:
            raise InvalidShapeError(
                name, f"at most one streaming member is allowed, found {', '.join(streaming)}"
            )

    # ------------------------------------------------------------------
    # Phase 4: cycles
    # ------------------------------------------------------------------

    def _children(self, name: str) -> list[str]:
        shape = self.raw.shapes[name]
        if shape.type == ShapeType.list:
            return [shape.member.shape]
        if shape.type == ShapeType.map:
            return [shape.key.shape, shape.value.shape]
        return [member.shape for member in (shape.members or {}).values()]

    def _detect_cycles(self) -> set[tuple[str, str]]:
        """Three-color depth-first traversal over every shape reference.

        A back edge onto an in-progress shape closes a cycle; the cycle is
        legal when at least one shape on it is structure-like. The walk keeps
        its own stack of child iterators, so reference chains of any depth
        resolve.
        """
        color: dict[str, _Color] = {}
        path: list[str] = []
        pending: list[Iterator[str]] = []
        recursion_points: set[tuple[str, str]] = set()

        def enter(name: str) -> None:
            color[name] = _Color.IN_PROGRESS
            path.append(name)
            pending.append(iter(self._children(name)))

        for root in self.raw.shapes:
            if root in color:
                continue
            enter(root)
            while pending:
                child = next(pending[-1], None)
                if child is None:
                    pending.pop()
                    color[path.pop()] = _Color.DONE
                    continue
                state = color.get(child)
                if state is None:
                    enter(child)
                elif state == _Color.IN_PROGRESS:
                    cycle = path[path.index(child):] + [child]
                    if not any(self._kinds[n].is_structure_like for n in cycle):
                        raise CyclicKeyError(cycle)
                    recursion_points.add((path[-1], child))
                    logger.debug(f"Recursive reference {' -> '.join(cycle)}")
        return recursion_points

    def _with_recursive_members(self, graph: ShapeGraph) -> ShapeGraph:
        recursive = frozenset(
            (shape.name, member.name)
            for shape in graph
            if shape.kind.is_structure_like
            for member in shape.members
            if graph.reaches(member.target, shape.name)
        )
        return ShapeGraph(
            service=graph.service,
            shapes=graph.shapes,
            operations=graph.operations,
            recursion_points=graph.recursion_points,
            recursive_members=recursive,
            input_shapes=graph.input_shapes,
            output_shapes=graph.output_shapes,
            error_shapes=graph.error_shapes,
            _by_index=graph._by_index,
        )

    # ------------------------------------------------------------------
    # Phase 5: naming
    # ------------------------------------------------------------------

    def _service_names(self) -> ServiceNames:
        metadata = self.raw.metadata
        service_id = self.service_name or metadata.service_id
        prefix = sanitize_identifier(service_id)
        return ServiceNames(
            service_id=service_id,
            protocol=metadata.protocol,
            base_exception=f'{prefix}Exception',
            base_request=f'{prefix}Request',
            base_response=f'{prefix}Response',
            api_version=metadata.api_version,
        )

    def _assign_class_names(
        self, service: ServiceNames
    ) -> tuple[dict[str, str], dict[str, str]]:
        class_names = {
            name: sanitize_identifier(name)
            for name in self.raw.shapes
            if self._kinds[name].is_generated
        }
        owners = dict(class_names)
        for base in service.base_names:
            owners[f'<{base}>'] = base

        _check_collisions(owners, scope='generated classes')
        for name, class_name in class_names.items():
            if class_name in RESERVED_CLASS_NAMES:
                raise NameCollisionError(class_name, [name], scope='reserved names')

        module_names = {
            name: sanitize_parameter_field_name(class_name)
            for name, class_name in owners.items()
        }
        _check_collisions(module_names, scope='generated modules')
        return class_names, {
            name: module for name, module in module_names.items() if name in class_names
        }

    def _member_attributes(self, name: str, shape: RawShape) -> dict[str, str]:
        kind = self._kinds[name]
        attributes = {
            member_name: sanitize_parameter_field_name(member_name)
            for member_name in (shape.members or {})
        }
        _check_collisions(attributes, scope=f'members of {name}')

        getters = {f'get_{attr}': member for member, attr in attributes.items()}
        for member_name, attribute in attributes.items():
            clash = getters.get(attribute)
            if clash is not None:
                raise NameCollisionError(
                    attribute, [member_name, clash], scope=f'builder of {name}'
                )

        reserved = set(RESERVED_MEMBER_NAMES)
        reserved |= RESERVED_MEMBER_NAMES_BY_KIND.get(kind, frozenset())
        if name in self._input_names():
            reserved |= REQUEST_MEMBER_NAMES
        if name in self._output_names():
            reserved |= RESPONSE_MEMBER_NAMES
        for member_name, attribute in attributes.items():
            if attribute in reserved:
                raise NameCollisionError(attribute, [member_name], scope=f'reserved names of {name}')
        return attributes

    def _input_names(self) -> set[str]:
        return {op.input.shape for op in self.raw.operations.values() if op.input}

    def _output_names(self) -> set[str]:
        return {op.output.shape for op in self.raw.operations.values() if op.output}

    def _enum_constants(self, name: str, shape: RawShape) -> tuple[str, ...]:
        constants = {value: to_constant_name(value) for value in shape.enum}
        _check_collisions(constants, scope=f'constants of {name}')
        for value, constant in constants.items():
            if constant == UNKNOWN_ENUM_VALUE or value == UNKNOWN_ENUM_VALUE:
                raise NameCollisionError(constant, [value], scope=f'reserved names of {name}')
        return tuple(constants[value] for value in shape.enum)

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def _build_shape(
        self,
        name: str,
        index: int,
        shape: RawShape,
        class_name: str | None,
        module_name: str | None,
    ) -> ResolvedShape:
        kind = self._kinds[name]
        members: tuple[ResolvedMember, ...] = ()
        discriminator = None
        if kind.is_structure_like:
            attributes = self._member_attributes(name, shape)
            required = set(shape.required)
            members = tuple(
                ResolvedMember(
                    name=member_name,
                    attribute=attributes[member_name],
                    target=member.shape,
                    required=member_name in required,
                    idempotency_token=member.idempotency_token,
                    streaming=member.streaming or self._is_streaming_blob(member.shape),
                    documentation=member.documentation,
                    deprecated=member.deprecated,
                )
                for member_name, member in (shape.members or {}).items()
            )
            if shape.discriminator:
                discriminator = attributes[shape.discriminator]

        error = shape.error
        return ResolvedShape(
            name=name,
            index=index,
            kind=kind,
            class_name=class_name,
            module_name=module_name,
            scalar=self._scalar_kind(name, shape),
            members=members,
            element=shape.member.shape if shape.member else None,
            key=shape.key.shape if shape.key else None,
            value=shape.value.shape if shape.value else None,
            enum_values=tuple(shape.enum) if kind == ShapeKind.ENUM else (),
            enum_constants=self._enum_constants(name, shape) if kind == ShapeKind.ENUM else (),
            error_code=(error.code if error and error.code else name)
            if kind == ShapeKind.EXCEPTION else None,
            http_status_code=error.http_status_code if error else None,
            sender_fault=error.sender_fault if error else False,
            parent=shape.parent,
            subtypes=tuple(shape.subtypes or ()),
            discriminator=discriminator,
            documentation=shape.documentation,
            deprecated=shape.deprecated,
        )


def _is_plain_structure(shape: RawShape) -> bool:
    return shape.is_structure and not (shape.exception or shape.event or shape.eventstream)


def _check_collisions(names: Mapping[str, str], scope: str) -> None:
    """Raise NameCollisionError if two source names share an identifier.

    Identifiers are compared case-insensitively, since generated module
    names end up as files on case-insensitive file systems.
    """
    seen: dict[str, list[str]] = {}
    for source, identifier in names.items():
        seen.setdefault(identifier.lower(), []).append(source)
    for identifier, sources in seen.items():
        if len(sources) > 1:
            raise NameCollisionError(names[sources[0]], sources, scope=scope)


def resolve(raw: RawModel, service_name: str | None = None) -> ShapeGraph:
    """Resolve a raw model with a fresh ``ShapeGraphResolver``."""
    return ShapeGraphResolver(raw, service_name=service_name).resolve()
