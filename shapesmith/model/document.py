"""Pydantic records for the raw service description document.

These models validate the *structure* of a document: required sections,
field types and per-shape consistency (a list has a member, an enum has
unique literals, ...). References between shapes are deliberately left
unchecked; resolving them is the job of the shape graph resolver.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = [
    'ShapeType',
    'SCALAR_TYPES',
    'RawShapeRef',
    'RawMember',
    'RawErrorTrait',
    'RawShape',
    'RawHttpBinding',
    'RawOperation',
    'RawMetadata',
    'RawModel',
]


class ShapeType(Enum):
    structure = 'structure'
    list = 'list'
    map = 'map'
    string = 'string'
    integer = 'integer'
    long = 'long'
    short = 'short'
    byte = 'byte'
    float = 'float'
    double = 'double'
    boolean = 'boolean'
    timestamp = 'timestamp'
    blob = 'blob'
    big_integer = 'bigInteger'
    big_decimal = 'bigDecimal'


SCALAR_TYPES = frozenset(
    t for t in ShapeType if t not in (ShapeType.structure, ShapeType.list, ShapeType.map)
)


class RawShapeRef(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True, frozen=True)

    shape: str = Field(..., description='Name of the referenced shape.')


class RawMember(RawShapeRef):
    documentation: str | None = None
    idempotency_token: bool = Field(False, alias='idempotencyToken')
    streaming: bool = Field(
        False, description='Marks the member as the streaming payload of its structure.'
    )
    deprecated: bool = False


class RawErrorTrait(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True, frozen=True)

    code: str | None = Field(None, description='Explicit error code override.')
    http_status_code: int | None = Field(None, alias='httpStatusCode')
    sender_fault: bool = Field(False, alias='senderFault')


class RawShape(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True, frozen=True)

    type: ShapeType
    documentation: str | None = None
    deprecated: bool = False

    # structure
    members: dict[str, RawMember] | None = None
    required: list[str] = Field(default_factory=list)

    # list / map
    member: RawShapeRef | None = None
    key: RawShapeRef | None = None
    value: RawShapeRef | None = None

    # string enum
    enum: list[str] | None = None

    # classification flags
    exception: bool = False
    error: RawErrorTrait | None = None
    event: bool = False
    eventstream: bool = False
    streaming: bool = False

    # polymorphism
    parent: str | None = Field(None, description='Explicit supertype shape.')
    subtypes: list[str] | None = Field(
        None, description='Closed set of legal subtypes of a polymorphic base.'
    )
    discriminator: str | None = None

    @model_validator(mode='after')
    def _check_kind_fields(self) -> 'RawShape':
        if self.type == ShapeType.structure:
            members = self.members or {}
            unknown = [name for name in self.required if name not in members]
            if unknown:
                raise ValueError(f'required names unknown members: {", ".join(unknown)}')
            if self.discriminator and self.discriminator not in members:
                raise ValueError(
                    f"discriminator '{self.discriminator}' is not a member"
                )
        elif self.members is not None or self.required:
            raise ValueError(f"'{self.type.value}' shapes cannot declare members")

        if self.type == ShapeType.list and self.member is None:
            raise ValueError("list shapes require a 'member'")
        if self.type == ShapeType.map and (self.key is None or self.value is None):
            raise ValueError("map shapes require a 'key' and a 'value'")

        if self.enum is not None:
            if self.type != ShapeType.string:
                raise ValueError('only string shapes can declare enum literals')
            if not self.enum:
                raise ValueError('enum literals must not be empty')
            duplicates = sorted({v for v in self.enum if self.enum.count(v) > 1})
            if duplicates:
                raise ValueError(f'duplicate enum literals: {", ".join(duplicates)}')

        if self.streaming and self.type != ShapeType.blob:
            raise ValueError('only blob shapes can be streaming')
        return self

    @property
    def is_structure(self) -> bool:
        return self.type == ShapeType.structure


class RawHttpBinding(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True, frozen=True)

    method: str = 'POST'
    request_uri: str = Field('/', alias='requestUri')
    response_code: int | None = Field(None, alias='responseCode')


class RawOperation(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True, frozen=True)

    name: str | None = None
    http: RawHttpBinding = Field(default_factory=RawHttpBinding)
    input: RawShapeRef | None = None
    output: RawShapeRef | None = None
    errors: list[RawShapeRef] = Field(default_factory=list)
    documentation: str | None = None
    deprecated: bool = False


class RawMetadata(BaseModel):
    model_config = ConfigDict(extra='allow', populate_by_name=True, frozen=True)

    service_id: str = Field(..., alias='serviceId')
    protocol: str
    api_version: str | None = Field(None, alias='apiVersion')
    service_full_name: str | None = Field(None, alias='serviceFullName')
    endpoint_prefix: str | None = Field(None, alias='endpointPrefix')


class RawModel(BaseModel):
    """A structurally valid, not yet resolved service description."""

    model_config = ConfigDict(extra='ignore', frozen=True)

    metadata: RawMetadata
    operations: dict[str, RawOperation]
    shapes: dict[str, RawShape]
    documentation: str | None = None
