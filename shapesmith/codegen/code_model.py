"""Emission-ready descriptors for every generated class.

A ``CodeModel`` carries everything a template needs and nothing it has to
compute: the supertype to extend, the properties inherited along the
supertype chain (so the builder can re-declare them with a covariant return
type), the class's own fields with their copy plans, and the flags that
decide what ``build()`` checks.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType

from shapesmith.codegen.graph import ShapeGraph, ShapeKind
from shapesmith.codegen.hierarchy import (
    EdgeKind,
    Hierarchy,
    HierarchyResolver,
    InheritanceEdge,
    UnionDescriptor,
)
from shapesmith.codegen.type_mapper import PropertyContract, ResolvedType, TypeKind, TypeMapper
from shapesmith.codegen.utils import sanitize_parameter_field_name
from shapesmith.exceptions import CodeGenerationError, NameCollisionError

logger = logging.getLogger(__name__)

__all__ = [
    'RUNTIME_MODULE',
    'CodeModelKind',
    'ClassRef',
    'CopyPlan',
    'FieldModel',
    'EnumConstant',
    'CodeModel',
    'CodeModelBuilder',
    'EXCEPTION_CAPABILITIES',
    'REQUEST_CAPABILITIES',
    'RESPONSE_CAPABILITIES',
]

RUNTIME_MODULE = 'shapesmith.runtime'


class CodeModelKind(Enum):
    STRUCTURE = 'structure'
    EXCEPTION = 'exception'
    EVENT_UNION = 'event_union'
    EVENT_MEMBER = 'event_member'
    ENUM = 'enum'
    BASE_EXCEPTION = 'base_exception'
    BASE_REQUEST = 'base_request'
    BASE_RESPONSE = 'base_response'


_KIND_BY_SHAPE = {
    ShapeKind.STRUCTURE: CodeModelKind.STRUCTURE,
    ShapeKind.EXCEPTION: CodeModelKind.EXCEPTION,
    ShapeKind.EVENT_UNION: CodeModelKind.EVENT_UNION,
    ShapeKind.EVENT_MEMBER: CodeModelKind.EVENT_MEMBER,
    ShapeKind.ENUM: CodeModelKind.ENUM,
}

_DEFAULT_BASES = {
    CodeModelKind.STRUCTURE: 'ShapeModel',
    CodeModelKind.EXCEPTION: 'ServiceException',
    CodeModelKind.EVENT_UNION: 'EventUnion',
    CodeModelKind.EVENT_MEMBER: 'EventMember',
    CodeModelKind.ENUM: 'ShapeEnum',
}


@dataclass(frozen=True)
class ClassRef:
    """A class to import: from the runtime package or a sibling module."""

    name: str
    module: str

    @property
    def is_runtime(self) -> bool:
        return self.module == RUNTIME_MODULE


@dataclass(frozen=True)
class CopyPlan:
    """How a value is copied when it crosses a builder/value boundary.

    ``function`` is a runtime helper applied to the value; ``item`` is the
    plan applied to each element of a list or each value of a map.
    """

    function: str
    item: 'CopyPlan | None' = None

    @property
    def functions(self) -> frozenset[str]:
        names = {self.function}
        if self.item is not None:
            names |= self.item.functions
        return frozenset(names)

    @property
    def depth(self) -> int:
        return 1 + (self.item.depth if self.item else 0)


@dataclass(frozen=True)
class FieldModel:
    """One member of a generated class and its builder."""

    name: str
    attribute: str
    input_hint: str
    builder_hint: str
    value_hint: str
    builder_copy: CopyPlan | None = None
    value_copy: CopyPlan | None = None
    read_copy: CopyPlan | None = None
    required: bool = False
    idempotency_token: bool = False
    streaming: bool = False
    recursive: bool = False
    documentation: str | None = None
    deprecated: bool = False
    imports: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    references: frozenset[ClassRef] = frozenset()

    @property
    def private_name(self) -> str:
        return f'_{self.attribute}'

    @property
    def getter_name(self) -> str:
        return f'get_{self.attribute}'


@dataclass(frozen=True)
class EnumConstant:
    name: str
    value: str


@dataclass(frozen=True)
class CodeModel:
    """Emission-ready description of one generated class.

    Attributes:
        kind: Selects the template.
        shape_name: The source shape, or the synthetic base type name.
        class_name: Name of the generated class.
        module_name: Module (file stem) the class is emitted into.
        supertype: Class the generated class extends.
        fields: Members declared by this class.
        inherited: Members declared along the supertype chain, root first.
            The builder re-declares each of them with a covariant return.
        service_name: Service identifier, for exception classes.
        error_code: Error code, for modeled exceptions.
        http_status_code: Default HTTP status, for modeled exceptions.
        sender_fault: Whether the error is the caller's fault, for modeled
            exceptions.
        enum_constants: Constants of an enum class.
        variants: ``(tag, attribute)`` pairs of an event union.
        subtypes: Class names of the closed subtypes of a polymorphic base.
        discriminator: Attribute naming the subtype of a polymorphic base.
        enforce_required: Whether ``build()`` checks required members.
        auto_fill_idempotency_token: Whether ``build()`` fills an unset
            idempotency token.
    """

    kind: CodeModelKind
    shape_name: str
    class_name: str
    module_name: str
    supertype: ClassRef
    fields: tuple[FieldModel, ...] = ()
    inherited: tuple[FieldModel, ...] = ()
    documentation: str | None = None
    deprecated: bool = False
    service_name: str | None = None
    error_code: str | None = None
    http_status_code: int | None = None
    sender_fault: bool = False
    enum_constants: tuple[EnumConstant, ...] = ()
    variants: tuple[tuple[str, str], ...] = ()
    subtypes: tuple[str, ...] = ()
    discriminator: str | None = None
    enforce_required: bool = True
    auto_fill_idempotency_token: bool = True

    @property
    def all_fields(self) -> tuple[FieldModel, ...]:
        return self.inherited + self.fields

    @property
    def members(self) -> tuple[str, ...]:
        names = tuple(f.attribute for f in self.all_fields)
        if self.kind == CodeModelKind.EVENT_UNION:
            return ('unknown_tag', 'unknown_payload', *names)
        return names

    @property
    def builder_setters(self) -> frozenset[str]:
        """Setter names the generated builder exposes."""
        return frozenset(f.attribute for f in self.all_fields)

    @property
    def required_fields(self) -> tuple[FieldModel, ...]:
        return tuple(f for f in self.all_fields if f.required)

    @property
    def idempotency_field(self) -> FieldModel | None:
        return next((f for f in self.all_fields if f.idempotency_token), None)

    @property
    def is_buildable(self) -> bool:
        return self.kind not in (CodeModelKind.BASE_REQUEST, CodeModelKind.BASE_RESPONSE)

    @property
    def is_exception(self) -> bool:
        return self.kind in (CodeModelKind.EXCEPTION, CodeModelKind.BASE_EXCEPTION)

    @property
    def references(self) -> frozenset[ClassRef]:
        """Sibling classes mentioned by field annotations, excluding itself."""
        refs = frozenset(ref for f in self.all_fields for ref in f.references)
        return frozenset(ref for ref in refs if ref.name != self.class_name)


def _capability(
    attribute: str,
    input_hint: str,
    builder_hint: str | None = None,
    value_hint: str | None = None,
    imports: dict[str, set[str]] | None = None,
) -> FieldModel:
    return FieldModel(
        name=attribute,
        attribute=attribute,
        input_hint=input_hint,
        builder_hint=builder_hint or input_hint,
        value_hint=value_hint or builder_hint or input_hint,
        imports=MappingProxyType(
            {module: frozenset(names) for module, names in (imports or {}).items()}
        ),
    )


# Properties every builder of a service exception exposes.
EXCEPTION_CAPABILITIES = (
    _capability('message', 'str'),
    _capability('cause', 'BaseException'),
    _capability('request_id', 'str'),
    _capability('status_code', 'int'),
    _capability('error_details', 'ErrorDetails', imports={RUNTIME_MODULE: {'ErrorDetails'}}),
)

REQUEST_CAPABILITIES = (
    _capability(
        'override_configuration',
        'RequestOverrideConfiguration | Callable[[RequestOverrideConfiguration.Builder], Any]',
        'RequestOverrideConfiguration',
        imports={
            RUNTIME_MODULE: {'RequestOverrideConfiguration'},
            'collections.abc': {'Callable'},
            'typing': {'Any'},
        },
    ),
)

RESPONSE_CAPABILITIES = (
    _capability(
        'response_metadata', 'Mapping[str, str]', 'dict[str, str]', 'Mapping[str, str]',
        imports={'collections.abc': {'Mapping'}},
    ),
    _capability('http_status_code', 'int'),
    _capability(
        'http_headers', 'Mapping[str, str]', 'dict[str, str]', 'Mapping[str, str]',
        imports={'collections.abc': {'Mapping'}},
    ),
)

_RUNTIME_CAPABILITIES = {
    'ServiceException': EXCEPTION_CAPABILITIES,
    'ServiceRequest': REQUEST_CAPABILITIES,
    'ServiceResponse': RESPONSE_CAPABILITIES,
}

_CAPABILITIES_BY_EDGE = {
    EdgeKind.REQUEST: REQUEST_CAPABILITIES,
    EdgeKind.RESPONSE: RESPONSE_CAPABILITIES,
}


def builder_copy_plan(resolved: ResolvedType) -> CopyPlan | None:
    """Plan copying a value into a builder: owned lists, dicts and bytes."""
    if resolved.defensive_copy:
        return CopyPlan('copy_bytes')
    if resolved.kind == TypeKind.LIST:
        return CopyPlan('copy_list', builder_copy_plan(resolved.element))
    if resolved.kind == TypeKind.MAP:
        return CopyPlan('copy_map', builder_copy_plan(resolved.element))
    return None


def value_copy_plan(resolved: ResolvedType) -> CopyPlan | None:
    """Plan copying a builder's value into an immutable value: tuples and proxies."""
    if resolved.defensive_copy:
        return CopyPlan('copy_bytes')
    if resolved.kind == TypeKind.LIST:
        return CopyPlan('freeze_list', value_copy_plan(resolved.element))
    if resolved.kind == TypeKind.MAP:
        return CopyPlan('freeze_map', value_copy_plan(resolved.element))
    return None


def read_copy_plan(resolved: ResolvedType) -> CopyPlan | None:
    """Plan copying a stored value on every read."""
    if resolved.defensive_copy:
        return CopyPlan('copy_bytes')
    return None


class CodeModelBuilder:
    """Assembles a ``CodeModel`` per generated class.

    Args:
        graph: The resolved shape graph.
        mapper: Type mapper over ``graph``; created if omitted.
        hierarchy: Resolved hierarchy; resolved if omitted.
        enforce_required_members: Compile required-member checks into every
            ``build()``. Applies to every shape alike.
        auto_fill_idempotency_tokens: Fill unset idempotency tokens with a
            fresh UUID in ``build()``.
    """

    def __init__(
        self,
        graph: ShapeGraph,
        mapper: TypeMapper | None = None,
        hierarchy: Hierarchy | None = None,
        enforce_required_members: bool = True,
        auto_fill_idempotency_tokens: bool = True,
    ):
        self.graph = graph
        self.mapper = mapper or TypeMapper(graph)
        self.hierarchy = hierarchy or HierarchyResolver(graph, self.mapper).resolve()
        self.enforce_required_members = enforce_required_members
        self.auto_fill_idempotency_tokens = auto_fill_idempotency_tokens

    def build_all(self) -> list[CodeModel]:
        """Build the service base classes, then every generated shape in order."""
        models = [
            self.build_base(CodeModelKind.BASE_EXCEPTION),
            self.build_base(CodeModelKind.BASE_REQUEST),
            self.build_base(CodeModelKind.BASE_RESPONSE),
        ]
        for shape in self.graph.generated_shapes():
            models.append(
                self.build(
                    self.mapper.map_type(shape),
                    self.hierarchy.chain(shape.name),
                    self.hierarchy.unions.get(shape.name),
                )
            )
        logger.debug(f'Built {len(models)} code models for {self.graph.service.service_id}')
        return models

    def build(
        self,
        resolved_type: ResolvedType,
        edges: Sequence[InheritanceEdge] = (),
        union: UnionDescriptor | None = None,
    ) -> CodeModel:
        """Build the code model of one shape.

        Args:
            resolved_type: The shape's full type descriptor.
            edges: The shape's supertype chain, nearest first.
            union: The union descriptor, for event streams.

        Raises:
            CodeGenerationError: The shape is not a generated kind, an event
                stream has no union descriptor, or the builder would miss a
                property its supertype chain requires.
            NameCollisionError: A member redeclares one its supertype chain
                already declares.
        """
        shape = self.graph[resolved_type.shape_name]
        kind = _KIND_BY_SHAPE.get(shape.kind)
        if kind is None:
            raise CodeGenerationError(
                f'{shape.kind.value} shapes do not become classes', context=shape.name
            )
        if kind == CodeModelKind.ENUM:
            return self._build_enum(resolved_type)
        if kind == CodeModelKind.EVENT_UNION and union is None:
            raise CodeGenerationError('event stream without a union descriptor', context=shape.name)

        own = []
        folded = {}
        for contract in resolved_type.properties:
            field_model = self._field(contract)
            if kind == CodeModelKind.EXCEPTION and contract.attribute == 'message':
                # merges into the inherited message property
                folded[contract.attribute] = field_model
                continue
            own.append(field_model)

        inherited = tuple(
            self._fold(field_model, folded.get(field_model.attribute))
            for field_model in self._inherited_fields(edges)
        )
        redeclared = sorted(
            {f.attribute for f in inherited} & {f.attribute for f in own}
        )
        if redeclared:
            raise NameCollisionError(
                redeclared[0], [shape.name, edges[0].supertype],
                scope=f'members inherited by {shape.name}',
            )

        model = CodeModel(
            kind=kind,
            shape_name=shape.name,
            class_name=shape.class_name,
            module_name=shape.module_name,
            supertype=self._supertype(kind, edges),
            fields=tuple(own),
            inherited=inherited,
            documentation=shape.documentation,
            deprecated=shape.deprecated,
            service_name=self.graph.service.service_id if kind == CodeModelKind.EXCEPTION else None,
            error_code=shape.error_code,
            http_status_code=shape.http_status_code,
            sender_fault=shape.sender_fault,
            variants=tuple((v.tag, v.attribute) for v in union.variants) if union else (),
            subtypes=tuple(self.graph[s].class_name for s in shape.subtypes),
            discriminator=shape.discriminator,
            enforce_required=self.enforce_required_members,
            auto_fill_idempotency_token=self.auto_fill_idempotency_tokens,
        )
        self._check_capabilities(model, edges)
        return model

    def build_base(self, kind: CodeModelKind) -> CodeModel:
        """Build one of the synthetic per-service base classes."""
        service = self.graph.service
        names = {
            CodeModelKind.BASE_EXCEPTION: service.base_exception,
            CodeModelKind.BASE_REQUEST: service.base_request,
            CodeModelKind.BASE_RESPONSE: service.base_response,
        }
        if kind not in names:
            raise CodeGenerationError(f'{kind.value} is not a service base kind')
        class_name = names[kind]
        edges = self.hierarchy.chain(class_name)
        model = CodeModel(
            kind=kind,
            shape_name=class_name,
            class_name=class_name,
            module_name=sanitize_parameter_field_name(class_name),
            supertype=self._supertype(kind, edges),
            inherited=self._inherited_fields(edges),
            documentation=_BASE_DOCS[kind].format(service=service.service_id),
            service_name=service.service_id if kind == CodeModelKind.BASE_EXCEPTION else None,
            enforce_required=self.enforce_required_members,
            auto_fill_idempotency_token=self.auto_fill_idempotency_tokens,
        )
        self._check_capabilities(model, edges)
        return model

    def _build_enum(self, resolved_type: ResolvedType) -> CodeModel:
        shape = self.graph[resolved_type.shape_name]
        return CodeModel(
            kind=CodeModelKind.ENUM,
            shape_name=shape.name,
            class_name=shape.class_name,
            module_name=shape.module_name,
            supertype=ClassRef(_DEFAULT_BASES[CodeModelKind.ENUM], RUNTIME_MODULE),
            documentation=shape.documentation,
            deprecated=shape.deprecated,
            enum_constants=tuple(
                EnumConstant(name, value)
                for name, value in zip(shape.enum_constants, shape.enum_values)
            ),
        )

    def _field(self, contract: PropertyContract) -> FieldModel:
        resolved = contract.type
        return FieldModel(
            name=contract.member_name,
            attribute=contract.attribute,
            input_hint=resolved.input_hint,
            builder_hint=resolved.builder_hint,
            value_hint=resolved.value_hint,
            builder_copy=builder_copy_plan(resolved),
            value_copy=value_copy_plan(resolved),
            read_copy=read_copy_plan(resolved),
            required=contract.required,
            idempotency_token=contract.idempotency_token,
            streaming=contract.streaming,
            recursive=contract.recursive,
            documentation=contract.documentation,
            deprecated=contract.deprecated,
            imports=resolved.imports,
            references=frozenset(
                ClassRef(class_name, f'.{module}') for class_name, module in resolved.references
            ),
        )

    @staticmethod
    def _fold(inherited: FieldModel, folded: FieldModel | None) -> FieldModel:
        if folded is None:
            return inherited
        return replace(
            inherited,
            name=folded.name,
            required=inherited.required or folded.required,
            documentation=folded.documentation or inherited.documentation,
        )

    def _own_fields(self, shape_name: str) -> tuple[FieldModel, ...]:
        shape = self.graph[shape_name]
        return tuple(
            self._field(contract)
            for contract in self.mapper.map_type(shape_name).properties
            if not (shape.kind == ShapeKind.EXCEPTION and contract.attribute == 'message')
        )

    def _inherited_fields(self, edges: Iterable[InheritanceEdge]) -> tuple[FieldModel, ...]:
        groups = []
        for edge in edges:
            if edge.supertype in self.graph:
                groups.append(self._own_fields(edge.supertype))
            elif edge.kind == EdgeKind.RUNTIME:
                groups.append(_RUNTIME_CAPABILITIES.get(edge.supertype, ()))
        return tuple(f for group in reversed(groups) for f in group)

    def _supertype(self, kind: CodeModelKind, edges: Sequence[InheritanceEdge]) -> ClassRef:
        if not edges:
            return ClassRef(_DEFAULT_BASES[kind], RUNTIME_MODULE)
        name = edges[0].supertype
        if name in self.graph:
            shape = self.graph[name]
            return ClassRef(shape.class_name, f'.{shape.module_name}')
        if edges[0].kind == EdgeKind.RUNTIME:
            return ClassRef(name, RUNTIME_MODULE)
        return ClassRef(name, f'.{sanitize_parameter_field_name(name)}')

    def _check_capabilities(
        self, model: CodeModel, edges: Sequence[InheritanceEdge]
    ) -> None:
        """Verify the builder re-declares every property its chain requires."""
        required: list[FieldModel] = []
        if model.is_exception:
            required += EXCEPTION_CAPABILITIES
        for edge in edges:
            required += _CAPABILITIES_BY_EDGE.get(edge.kind, ())
        missing = [f.attribute for f in required if f.attribute not in model.builder_setters]
        if missing:
            raise CodeGenerationError(
                f'builder of {model.class_name} does not expose inherited '
                f'properties {", ".join(missing)}',
                context=model.shape_name,
            )


_BASE_DOCS = {
    CodeModelKind.BASE_EXCEPTION: 'Base class for all service exceptions raised by {service}.',
    CodeModelKind.BASE_REQUEST: 'Base class for all {service} operation requests.',
    CodeModelKind.BASE_RESPONSE: 'Base class for all {service} operation responses.',
}
