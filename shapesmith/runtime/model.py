"""Base classes and copy helpers shared by every generated shape.

Generated value types are immutable and constructed only through their
builders. Byte sequences are copied on every read and write, and collections
are copied into builders and frozen into values, so a builder can never reach
into an already-built value.
"""

import uuid
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any, ClassVar

from shapesmith.runtime.errors import MissingRequiredMemberError

__all__ = [
    'Immutable',
    'ShapeModel',
    'ShapeBuilder',
    'check_required',
    'copy_bytes',
    'copy_list',
    'copy_map',
    'freeze_list',
    'freeze_map',
    'new_idempotency_token',
]

Copier = Callable[[Any], Any]


def copy_bytes(value: bytes | bytearray | memoryview | None) -> bytes | None:
    """Return an owned, immutable copy of a byte buffer."""
    if value is None:
        return None
    return bytes(value)


def copy_list(value: Iterable[Any] | None, item: Copier | None = None) -> list | None:
    """Copy a sequence into a new list, applying ``item`` to every element."""
    if value is None:
        return None
    if item is None:
        return list(value)
    return [item(v) for v in value]


def copy_map(value: Mapping[Any, Any] | None, item: Copier | None = None) -> dict | None:
    """Copy a mapping into a new dict, applying ``item`` to every value."""
    if value is None:
        return None
    if item is None:
        return dict(value)
    return {k: item(v) for k, v in value.items()}


def freeze_list(value: Iterable[Any] | None, item: Copier | None = None) -> tuple | None:
    """Copy a sequence into a tuple, applying ``item`` to every element."""
    if value is None:
        return None
    if item is None:
        return tuple(value)
    return tuple(item(v) for v in value)


def freeze_map(
    value: Mapping[Any, Any] | None, item: Copier | None = None
) -> Mapping[Any, Any] | None:
    """Copy a mapping into a read-only view, applying ``item`` to every value."""
    if value is None:
        return None
    return MappingProxyType(copy_map(value, item))


def new_idempotency_token() -> str:
    return str(uuid.uuid4())


def check_required(shape_name: str, values: Mapping[str, Any]) -> None:
    """Raise MissingRequiredMemberError naming every unset required member."""
    missing = [name for name, value in values.items() if value is None]
    if missing:
        raise MissingRequiredMemberError(shape_name, missing)


def _hashable(value: Any) -> Any:
    if isinstance(value, Mapping):
        return frozenset((k, _hashable(v)) for k, v in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(_hashable(v) for v in value)
    return value


class Immutable:
    """Blocks attribute assignment once an instance has been constructed.

    Members are written once, from the builder, through ``_init_member``.
    Dunder attributes stay writable so exception machinery (tracebacks,
    chained causes, notes) keeps working on generated exception types.
    """

    __slots__ = ()

    SHAPE_NAME: ClassVar[str] = ''
    MEMBERS: ClassVar[tuple[str, ...]] = ()

    def _init_member(self, name: str, value: Any) -> None:
        object.__setattr__(self, f'_{name}', value)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith('__') and name.endswith('__'):
            super().__setattr__(name, value)
            return
        raise AttributeError(
            f'{type(self).__name__} is immutable; use to_builder() to derive a modified copy'
        )

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f'{type(self).__name__} is immutable')

    def member_values(self) -> dict[str, Any]:
        """Return every observable member, in declaration order."""
        return {name: getattr(self, name) for name in self.MEMBERS}


class ShapeModel(Immutable):
    """Base class for generated structures: value equality, hashing and repr."""

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.member_values() == other.member_values()

    def __hash__(self) -> int:
        return hash((type(self), _hashable(tuple(self.member_values().values()))))

    def __repr__(self) -> str:
        fields = ', '.join(
            f'{name}={value!r}'
            for name, value in self.member_values().items()
            if value is not None
        )
        return f'{type(self).__name__}({fields})'

    def to_builder(self) -> 'ShapeBuilder':
        raise NotImplementedError


class ShapeBuilder:
    """Base class for generated builders."""

    def __init__(self, model: Any = None) -> None:
        pass

    def build(self) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        fields = ', '.join(
            f'{name.lstrip("_")}={value!r}'
            for name, value in vars(self).items()
            if value is not None
        )
        return f'{type(self).__qualname__}({fields})'
