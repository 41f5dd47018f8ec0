"""Base type for generated enums."""

from enum import Enum

__all__ = ['UNKNOWN_ENUM_VALUE', 'ShapeEnum']

UNKNOWN_ENUM_VALUE = 'UNKNOWN_TO_SDK_VERSION'


class ShapeEnum(str, Enum):
    """String enum whose unrecognised values map to ``UNKNOWN_TO_SDK_VERSION``.

    Generated enums declare that member last, so values added to the service
    after generation still parse.
    """

    @classmethod
    def _missing_(cls, value):
        return cls.__members__.get(UNKNOWN_ENUM_VALUE)

    @classmethod
    def known_values(cls) -> tuple[str, ...]:
        return tuple(
            member.value for name, member in cls.__members__.items()
            if name != UNKNOWN_ENUM_VALUE
        )

    def __str__(self) -> str:
        return self.value
