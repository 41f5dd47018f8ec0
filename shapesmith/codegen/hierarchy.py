"""Inheritance and polymorphism resolution.

Every generated class gets at most one supertype. The resolver records it as
an explicit ``InheritanceEdge`` rather than leaving it to the emitted class
statement, so later stages can walk the chain and verify what a builder has
to expose:

- exceptions chain to their declared ``parent`` or to the service base
  exception, which itself extends ``ServiceException``;
- operation inputs extend the service base request, outputs the service base
  response;
- polymorphic structures extend the base that lists them in ``subtypes``.

Event streams are resolved into closed ``UnionDescriptor`` sum types with a
synthetic fallback for events the generated code does not know yet.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from shapesmith.codegen.graph import ServiceNames, ShapeGraph, ShapeKind
from shapesmith.codegen.type_mapper import ResolvedType, TypeMapper
from shapesmith.exceptions import AmbiguousSubtypeError
from shapesmith.runtime.events import UNKNOWN_EVENT

logger = logging.getLogger(__name__)

__all__ = [
    'EdgeKind',
    'InheritanceEdge',
    'UnionVariant',
    'UnionDescriptor',
    'PolymorphicDescriptor',
    'Hierarchy',
    'HierarchyResolver',
    'RUNTIME_ROOTS',
]


class EdgeKind(Enum):
    EXCEPTION = 'exception'
    POLYMORPHIC = 'polymorphic'
    REQUEST = 'request'
    RESPONSE = 'response'
    RUNTIME = 'runtime'


# Runtime classes the synthetic service bases extend.
RUNTIME_ROOTS = {
    'exception': 'ServiceException',
    'request': 'ServiceRequest',
    'response': 'ServiceResponse',
}


@dataclass(frozen=True)
class InheritanceEdge:
    subtype: str
    supertype: str
    kind: EdgeKind


@dataclass(frozen=True)
class UnionVariant:
    tag: str
    attribute: str
    type: ResolvedType


@dataclass(frozen=True)
class UnionDescriptor:
    """Closed set of events an event stream may carry, plus the fallback."""

    shape_name: str
    variants: tuple[UnionVariant, ...]
    unknown_variant: str = UNKNOWN_EVENT

    @property
    def tags(self) -> tuple[str, ...]:
        return tuple(v.tag for v in self.variants)


@dataclass(frozen=True)
class PolymorphicDescriptor:
    base: str
    subtypes: tuple[str, ...]
    discriminator: str | None = None


@dataclass(frozen=True)
class Hierarchy:
    """Resolved supertypes, event unions and polymorphic bases of a service."""

    service: ServiceNames
    edges: Mapping[str, InheritanceEdge]
    unions: Mapping[str, UnionDescriptor]
    polymorphic: Mapping[str, PolymorphicDescriptor]

    def supertype(self, name: str) -> InheritanceEdge | None:
        return self.edges.get(name)

    def chain(self, name: str) -> tuple[InheritanceEdge, ...]:
        """Edges from ``name`` up to its runtime root, nearest first."""
        edges = []
        edge = self.edges.get(name)
        while edge is not None:
            edges.append(edge)
            edge = self.edges.get(edge.supertype)
        return tuple(edges)

    def subtypes_of(self, name: str) -> tuple[str, ...]:
        return tuple(edge.subtype for edge in self.edges.values() if edge.supertype == name)


class HierarchyResolver:
    """Computes the ``Hierarchy`` of a resolved shape graph.

    Raises ``AmbiguousSubtypeError`` whenever a shape would need two
    supertypes or a hierarchy cannot be linearized.
    """

    def __init__(self, graph: ShapeGraph, mapper: TypeMapper | None = None):
        self.graph = graph
        self.mapper = mapper or TypeMapper(graph)
        self._edges: dict[str, InheritanceEdge] = {}

    def resolve(self) -> Hierarchy:
        service = self.graph.service
        self._edges = {}
        self._add(service.base_exception, RUNTIME_ROOTS['exception'], EdgeKind.RUNTIME)
        self._add(service.base_request, RUNTIME_ROOTS['request'], EdgeKind.RUNTIME)
        self._add(service.base_response, RUNTIME_ROOTS['response'], EdgeKind.RUNTIME)

        self._resolve_exceptions()
        polymorphic = self._resolve_polymorphic()
        self._resolve_operation_roots()
        self._check_acyclic()
        unions = self._resolve_unions()

        logger.debug(
            f'Resolved {len(self._edges)} inheritance edges, {len(unions)} event unions '
            f'and {len(polymorphic)} polymorphic bases'
        )
        return Hierarchy(
            service=service,
            edges=MappingProxyType(dict(self._edges)),
            unions=MappingProxyType(unions),
            polymorphic=MappingProxyType(polymorphic),
        )

    def _add(self, subtype: str, supertype: str, kind: EdgeKind) -> None:
        existing = self._edges.get(subtype)
        if existing is not None:
            raise AmbiguousSubtypeError(
                subtype,
                f"cannot extend both '{existing.supertype}' ({existing.kind.value}) and "
                f"'{supertype}' ({kind.value})",
            )
        self._edges[subtype] = InheritanceEdge(subtype, supertype, kind)

    def _resolve_exceptions(self) -> None:
        for shape in self.graph:
            if shape.kind != ShapeKind.EXCEPTION:
                continue
            if shape.subtypes:
                raise AmbiguousSubtypeError(
                    shape.name, 'exceptions extend their parent through parent, not subtypes'
                )
            if shape.parent is None:
                self._add(shape.name, self.graph.service.base_exception, EdgeKind.EXCEPTION)
                continue
            if self.graph[shape.parent].kind != ShapeKind.EXCEPTION:
                raise AmbiguousSubtypeError(
                    shape.name, f"parent '{shape.parent}' is not an exception"
                )
            self._add(shape.name, shape.parent, EdgeKind.EXCEPTION)

    def _resolve_polymorphic(self) -> dict[str, PolymorphicDescriptor]:
        listed_by: dict[str, str] = {}
        descriptors = {}
        for base in self.graph:
            if not base.subtypes or base.kind == ShapeKind.EXCEPTION:
                continue
            if base.kind == ShapeKind.EVENT_UNION:
                raise AmbiguousSubtypeError(base.name, 'event streams cannot declare subtypes')
            for subtype in base.subtypes:
                if subtype in listed_by:
                    raise AmbiguousSubtypeError(
                        subtype,
                        f"listed as a subtype of both '{listed_by[subtype]}' and '{base.name}'",
                    )
                listed_by[subtype] = base.name
                sub = self.graph[subtype]
                if sub.kind != base.kind:
                    raise AmbiguousSubtypeError(
                        subtype,
                        f"a {sub.kind.value} cannot extend the {base.kind.value} '{base.name}'",
                    )
                if sub.parent is not None and sub.parent != base.name:
                    raise AmbiguousSubtypeError(
                        subtype,
                        f"declares parent '{sub.parent}' but is listed by '{base.name}'",
                    )
            descriptors[base.name] = PolymorphicDescriptor(
                base=base.name, subtypes=base.subtypes, discriminator=base.discriminator
            )

        for shape in self.graph:
            if shape.kind == ShapeKind.EXCEPTION or shape.parent is None:
                continue
            if shape.name not in listed_by:
                if not self.graph[shape.parent].subtypes:
                    reason = f"parent '{shape.parent}' does not declare subtypes"
                else:
                    reason = f"parent '{shape.parent}' does not list it as a subtype"
                raise AmbiguousSubtypeError(shape.name, reason)

        for subtype, base in listed_by.items():
            self._add(subtype, base, EdgeKind.POLYMORPHIC)
        return descriptors

    def _resolve_operation_roots(self) -> None:
        graph = self.graph
        service = graph.service
        roots = [(n, service.base_request, EdgeKind.REQUEST) for n in graph.input_shapes]
        roots += [(n, service.base_response, EdgeKind.RESPONSE) for n in graph.output_shapes]
        for name, base, kind in sorted(roots, key=lambda root: graph[root[0]].index):
            if graph[name].kind == ShapeKind.EXCEPTION:
                raise AmbiguousSubtypeError(
                    name, f'an exception cannot be an operation {kind.value}'
                )
            self._add(name, base, kind)

    def _check_acyclic(self) -> None:
        for start in self._edges:
            seen = [start]
            edge = self._edges.get(start)
            while edge is not None:
                if edge.supertype in seen:
                    cycle = seen[seen.index(edge.supertype):] + [edge.supertype]
                    raise AmbiguousSubtypeError(
                        start, f"cyclic hierarchy {' -> '.join(cycle)}"
                    )
                seen.append(edge.supertype)
                edge = self._edges.get(edge.supertype)

    def _resolve_unions(self) -> dict[str, UnionDescriptor]:
        unions = {}
        for shape in self.graph:
            if shape.kind != ShapeKind.EVENT_UNION:
                continue
            resolved = self.mapper.map_type(shape)
            unions[shape.name] = UnionDescriptor(
                shape_name=shape.name,
                variants=tuple(
                    UnionVariant(tag=p.member_name, attribute=p.attribute, type=p.type)
                    for p in resolved.properties
                ),
            )
        return unions
