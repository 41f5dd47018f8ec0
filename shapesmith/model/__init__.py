"""Raw service description documents and their loader."""

from shapesmith.model.document import (
    RawErrorTrait,
    RawHttpBinding,
    RawMember,
    RawMetadata,
    RawModel,
    RawOperation,
    RawShape,
    RawShapeRef,
    ShapeType,
)
from shapesmith.model.loader import ModelLoader, load_model

__all__ = [
    'ModelLoader',
    'load_model',
    'RawModel',
    'RawMetadata',
    'RawOperation',
    'RawHttpBinding',
    'RawShape',
    'RawShapeRef',
    'RawMember',
    'RawErrorTrait',
    'ShapeType',
]
