"""Code generation module for shapesmith.

This module provides the main Codegen class that runs a service description
through every stage of the compiler and writes the generated package.
"""

import logging

from upath import UPath

from shapesmith.codegen.code_model import CodeModel, CodeModelBuilder
from shapesmith.codegen.emitter import CodeEmitter, Emitter, FileEmitter
from shapesmith.codegen.graph import ShapeGraph, ShapeGraphResolver
from shapesmith.codegen.hierarchy import Hierarchy, HierarchyResolver
from shapesmith.codegen.type_mapper import TypeMapper
from shapesmith.config import DocumentConfig
from shapesmith.model.document import RawModel
from shapesmith.model.loader import ModelLoader

logger = logging.getLogger(__name__)


class Codegen:
    """Main code generator turning a service description into a package.

    The stages run strictly in order: load, resolve the shape graph, map
    types, resolve the hierarchy, build code models, render. Only rendering
    runs in parallel. Every stage fails the whole run on its first error and
    nothing is written until every module rendered.

    Attributes:
        config: The DocumentConfig with source, output and codegen switches.
        raw: The loaded document (populated by ``load``).
        graph: The resolved shape graph (populated by ``resolve``).
        hierarchy: The resolved hierarchy (populated by ``resolve``).

    Example:
        >>> from shapesmith.config import DocumentConfig
        >>> from shapesmith.codegen.codegen import Codegen
        >>>
        >>> config = DocumentConfig(source='./service.json', output='./client')
        >>> Codegen(config).generate()
        # Creates one module per generated class plus __init__.py in ./client/
    """

    def __init__(
        self,
        config: DocumentConfig,
        loader: ModelLoader | None = None,
        emitter: Emitter | None = None,
    ):
        """Initialize the code generator.

        Args:
            config: Configuration specifying the source and output location.
            loader: Optional custom model loader.
            emitter: Optional emitter, for example with replaced templates.
        """
        self.config = config
        self.raw: RawModel | None = None
        self.graph: ShapeGraph | None = None
        self.mapper: TypeMapper | None = None
        self.hierarchy: Hierarchy | None = None
        self._loader = loader or ModelLoader()
        self._emitter = emitter or Emitter()

    def load(self) -> RawModel:
        self.raw = self._loader.load(self.config.source)
        return self.raw

    def resolve(self) -> ShapeGraph:
        """Resolve the loaded document into a shape graph and hierarchy."""
        if self.raw is None:
            self.load()
        self.graph = ShapeGraphResolver(self.raw, service_name=self.config.service_name).resolve()
        self.mapper = TypeMapper(self.graph)
        self.hierarchy = HierarchyResolver(self.graph, self.mapper).resolve()
        return self.graph

    def build_models(self) -> list[CodeModel]:
        if self.graph is None:
            self.resolve()
        builder = CodeModelBuilder(
            self.graph,
            mapper=self.mapper,
            hierarchy=self.hierarchy,
            enforce_required_members=self.config.enforce_required_members,
            auto_fill_idempotency_tokens=self.config.auto_fill_idempotency_tokens,
        )
        return builder.build_all()

    def render(self) -> tuple[dict[str, str], dict[str, list[str]]]:
        """Render every module in memory.

        Returns:
            ``({module_name: source}, {module_name: exported names})``.
        """
        models = self.build_models()
        sources = self._emitter.emit_all(models, max_workers=self.config.max_workers)
        exports = {model.module_name: [model.class_name] for model in models}
        return sources, exports

    def generate(self, sink: CodeEmitter | None = None) -> list[str]:
        """Compile the configured document and write the package.

        Args:
            sink: Where to write; a ``FileEmitter`` on ``config.output`` if
                omitted.

        Returns:
            The written files (or module names, for in-memory sinks).
        """
        sources, exports = self.render()
        sink = sink or FileEmitter(
            UPath(self.config.output),
            format_code=self.config.format_code,
            validate_syntax=self.config.validate_syntax,
        )
        written = sink.emit_package(sources, exports)
        logger.info(
            f'Generated {len(sources)} modules for {self.graph.service.service_id} '
            f'from {self.config.source}'
        )
        return written
