"""Event-stream unions: closed sum types with a forward-compatible fallback."""

import logging
from collections.abc import Mapping
from typing import Any, ClassVar

from shapesmith.runtime.errors import EventUnionMemberError
from shapesmith.runtime.model import ShapeBuilder, ShapeModel

logger = logging.getLogger(__name__)

__all__ = ['UNKNOWN_EVENT', 'EventMember', 'EventUnion']

UNKNOWN_EVENT = 'UNKNOWN_TO_SDK_VERSION'


class EventMember(ShapeModel):
    """Base type of structures that travel as a single event on a stream."""

    __slots__ = ()


class EventUnion(ShapeModel):
    """A tagged union carrying exactly one event per wire message.

    ``VARIANTS`` maps each wire tag to the generated member attribute. An
    event whose tag is not listed becomes the unknown variant: every member
    accessor returns ``None``, ``type`` is ``UNKNOWN_EVENT`` and the raw tag
    and payload are kept so a stream consumer can skip it and carry on.
    """

    SHAPE_NAME = 'EventUnion'
    MEMBERS = ('unknown_tag', 'unknown_payload')
    VARIANTS: ClassVar[Mapping[str, str]] = {}

    def __init__(self, builder: 'EventUnion.Builder') -> None:
        self._init_member('unknown_tag', builder.get_unknown_tag())
        self._init_member('unknown_payload', builder.get_unknown_payload())

    @property
    def unknown_tag(self) -> str | None:
        return self._unknown_tag

    @property
    def unknown_payload(self) -> Any:
        return self._unknown_payload

    @property
    def is_unknown(self) -> bool:
        return self._unknown_tag is not None

    @property
    def type(self) -> str:
        """The wire tag of the populated variant, or ``UNKNOWN_EVENT``."""
        for tag, attribute in self.VARIANTS.items():
            if getattr(self, attribute) is not None:
                return tag
        return UNKNOWN_EVENT

    @property
    def value(self) -> Any:
        """The populated event, or the raw payload of an unknown event."""
        for attribute in self.VARIANTS.values():
            event = getattr(self, attribute)
            if event is not None:
                return event
        return self._unknown_payload

    @classmethod
    def from_event(cls, tag: str, payload: Any) -> 'EventUnion':
        """Wrap a received event; unrecognised tags yield the unknown variant."""
        builder = cls.builder()
        attribute = cls.VARIANTS.get(tag)
        if attribute is None:
            logger.debug(f"Unknown event '{tag}' received for {cls.SHAPE_NAME}")
            return builder.unknown(tag, payload).build()
        getattr(builder, attribute)(payload)
        return builder.build()

    @classmethod
    def builder(cls) -> 'EventUnion.Builder':
        raise NotImplementedError

    class Builder(ShapeBuilder):
        def __init__(self, model: 'EventUnion | None' = None) -> None:
            super().__init__(model)
            self._unknown_tag: str | None = None
            self._unknown_payload: Any = None
            if model is not None:
                self._unknown_tag = model.unknown_tag
                self._unknown_payload = model.unknown_payload

        def unknown(self, tag: str, payload: Any = None) -> 'EventUnion.Builder':
            self._unknown_tag = tag
            self._unknown_payload = payload
            return self

        def get_unknown_tag(self) -> str | None:
            return self._unknown_tag

        def get_unknown_payload(self) -> Any:
            return self._unknown_payload

        def _check_single_variant(self, shape_name: str, values: Mapping[str, Any]) -> None:
            populated = [name for name, value in values.items() if value is not None]
            if self._unknown_tag is not None:
                if populated:
                    raise EventUnionMemberError(shape_name, [self._unknown_tag, *populated])
                return
            if len(populated) != 1:
                raise EventUnionMemberError(shape_name, populated)
