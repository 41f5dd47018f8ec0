"""Rendering of code models to source and writing of the generated package.

``Emitter`` turns each ``CodeModel`` into module source through a registry of
templates, one per ``CodeModelKind``. Rendering is pure, so ``emit_all`` can
fan it out over a thread pool: every worker owns the string it produces and
the results are merged by module name once all of them finished.

``CodeEmitter`` implementations decide where the merged modules go. They only
ever receive a complete set of sources, so a failed render never leaves a
half-written package behind.
"""

import ast
import logging
import subprocess
import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from upath import UPath

from shapesmith.codegen.code_model import CodeModel, CodeModelKind
from shapesmith.codegen.templates import DEFAULT_TEMPLATES, Template
from shapesmith.exceptions import CodeGenerationError, OutputError

logger = logging.getLogger(__name__)

__all__ = ['HEADER', 'Emitter', 'CodeEmitter', 'FileEmitter', 'StringEmitter']

HEADER = '# Generated by shapesmith. Do not edit.'


class Emitter:
    """Renders code models to Python source.

    Example:
        >>> emitter = Emitter()
        >>> emitter.register_template(CodeModelKind.ENUM, my_enum_template)
        >>> sources = emitter.emit_all(models, max_workers=4)
    """

    def __init__(self, templates: Mapping[CodeModelKind, Template] | None = None):
        self._templates: dict[CodeModelKind, Template] = dict(DEFAULT_TEMPLATES)
        if templates:
            self._templates.update(templates)

    def register_template(self, kind: CodeModelKind, template: Template) -> None:
        """Replace the template used for one kind of class."""
        self._templates[kind] = template

    def template_for(self, kind: CodeModelKind) -> Template:
        try:
            return self._templates[kind]
        except KeyError:
            raise CodeGenerationError(f'no template registered for {kind.value}') from None

    def render(self, model: CodeModel) -> ast.Module:
        module = self.template_for(model.kind)(model)
        return ast.fix_missing_locations(module)

    def emit(self, model: CodeModel) -> str:
        """Render one code model to module source.

        Raises:
            CodeGenerationError: No template is registered for the model's
                kind, or the template failed.
        """
        try:
            module = self.render(model)
            source = ast.unparse(module)
        except CodeGenerationError:
            raise
        except Exception as e:
            raise CodeGenerationError(
                'failed to render module', context=model.class_name, cause=e
            ) from e
        return f'{HEADER}\n{source}\n'

    def emit_all(
        self, models: Iterable[CodeModel], max_workers: int | None = None
    ) -> dict[str, str]:
        """Render every model, in parallel, into ``{module_name: source}``.

        The mapping keeps the order of ``models``. The first failing render
        aborts the run.

        Raises:
            CodeGenerationError: A render failed or two models target the
                same module.
        """
        models = list(models)
        seen: dict[str, str] = {}
        for model in models:
            if model.module_name in seen:
                raise CodeGenerationError(
                    f"module '{model.module_name}' is claimed by both "
                    f'{seen[model.module_name]} and {model.class_name}'
                )
            seen[model.module_name] = model.class_name

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [(model, executor.submit(self.emit, model)) for model in models]
            sources = {model.module_name: future.result() for model, future in futures}

        logger.debug(f'Rendered {len(sources)} modules')
        return sources


class CodeEmitter(ABC):
    """Destination for a rendered package.

    A CodeEmitter receives the complete set of module sources and the names
    each module exports, and outputs them (files on disk, strings, ...).
    """

    @abstractmethod
    def emit_module(self, name: str, source: str) -> str:
        """Output one module and return where it went."""
        pass

    @abstractmethod
    def emit_init(self, exports: Mapping[str, Iterable[str]]) -> str:
        """Output the package ``__init__`` re-exporting ``{module: names}``."""
        pass

    def emit_package(
        self, sources: Mapping[str, str], exports: Mapping[str, Iterable[str]]
    ) -> list[str]:
        """Output every module followed by the package ``__init__``."""
        written = [self.emit_module(name, source) for name, source in sources.items()]
        written.append(self.emit_init(exports))
        return written

    @staticmethod
    def build_init(exports: Mapping[str, Iterable[str]]) -> str:
        body: list[ast.stmt] = []
        names: list[str] = []
        for module, module_names in exports.items():
            module_names = sorted(module_names)
            body.append(
                ast.ImportFrom(
                    module=module,
                    names=[ast.alias(name=name) for name in module_names],
                    level=1,
                )
            )
            names += module_names
        body.append(
            ast.Assign(
                targets=[ast.Name(id='__all__', ctx=ast.Store())],
                value=ast.List(elts=[ast.Constant(value=n) for n in names], ctx=ast.Load()),
            )
        )
        module = ast.fix_missing_locations(ast.Module(body=body, type_ignores=[]))
        return f'{HEADER}\n{ast.unparse(module)}\n'


class FileEmitter(CodeEmitter):
    """Writes the generated package to a directory.

    The directory may be anything universal-pathlib understands (a local
    path, ``memory://``, ``s3://`` ...). Sources are checked and formatted
    before the first file is written.
    """

    def __init__(
        self,
        output_dir: str | Path | UPath,
        format_code: bool = True,
        validate_syntax: bool = True,
        create_py_typed: bool = True,
    ):
        """Initialize the file emitter.

        Args:
            output_dir: Package directory the modules are written into.
            format_code: Whether to format code with ruff or black.
            validate_syntax: Whether to compile every module before writing.
            create_py_typed: Whether to write a PEP 561 ``py.typed`` marker.
        """
        self.output_dir = UPath(output_dir)
        self.format_code = format_code
        self.validate_syntax = validate_syntax
        self.create_py_typed = create_py_typed

    def emit_module(self, name: str, source: str) -> str:
        return self._write_file(f'{name}.py', self._prepare(name, source))

    def emit_init(self, exports: Mapping[str, Iterable[str]]) -> str:
        return self._write_file('__init__.py', self._prepare('__init__', self.build_init(exports)))

    def emit_package(
        self, sources: Mapping[str, str], exports: Mapping[str, Iterable[str]]
    ) -> list[str]:
        """Write the whole package, replacing any previous one.

        Every file goes into a sibling staging directory first. Only once all
        of them are written does the staging directory take the place of
        ``output_dir``, so a failed write leaves the previous package intact.
        """
        files = {f'{name}.py': self._prepare(name, source) for name, source in sources.items()}
        files['__init__.py'] = self._prepare('__init__', self.build_init(exports))
        if self.create_py_typed:
            files['py.typed'] = ''

        if self.output_dir.exists() and not self._is_generated_package(self.output_dir):
            raise OutputError(
                str(self.output_dir),
                FileExistsError('the directory exists and is not a generated package'),
            )

        staging = self._sibling('tmp')
        try:
            for filename, content in files.items():
                self._write_file(filename, content, directory=staging)
            self._replace_output(staging)
        finally:
            self._discard(staging)

        written = [str(self.output_dir / filename) for filename in files]
        logger.info(f'Wrote {len(written)} files to {self.output_dir}')
        return written

    def _prepare(self, name: str, source: str) -> str:
        if self.validate_syntax:
            self._validate_syntax(source, name)
        if self.format_code:
            source = self._format_source(source)
        return source

    def _write_file(self, filename: str, content: str, directory: UPath | None = None) -> str:
        directory = self.output_dir if directory is None else directory
        file_path = directory / filename
        try:
            directory.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding='utf-8')
        except OSError as e:
            raise OutputError(str(file_path), e) from e
        logger.debug(f'Wrote {file_path}')
        return str(file_path)

    def _sibling(self, suffix: str) -> UPath:
        return self.output_dir.with_name(
            f'.{self.output_dir.name}.{uuid.uuid4().hex[:8]}.{suffix}'
        )

    def _replace_output(self, staging: UPath) -> None:
        output = self.output_dir
        previous = None
        try:
            if output.exists():
                previous = output.rename(self._sibling('old'))
            staging.rename(output)
        except OSError as e:
            if previous is not None and not output.exists():
                previous.rename(output)
            raise OutputError(str(output), e) from e
        if previous is not None:
            self._discard(previous)

    @staticmethod
    def _is_generated_package(path: UPath) -> bool:
        if not path.is_dir():
            return False
        init = path / '__init__.py'
        if init.exists():
            return init.read_text(encoding='utf-8').startswith(HEADER)
        return not any(path.iterdir())

    @staticmethod
    def _discard(path: UPath) -> None:
        try:
            if path.exists():
                _remove_tree(path)
        except OSError as e:
            logger.warning(f'Could not remove {path}: {e}')

    @staticmethod
    def _validate_syntax(source: str, name: str) -> None:
        try:
            compile(source, f'{name}.py', 'exec')
        except SyntaxError as e:
            raise CodeGenerationError(
                'generated code has invalid syntax', context=name, cause=e
            ) from e

    @staticmethod
    def _format_source(source: str) -> str:
        """Format source with ruff, falling back to black, else leave it."""
        try:
            result = subprocess.run(
                ['ruff', 'format', '-'],
                input=source,
                capture_output=True,
                text=True,
            )
            if result.returncode == 0:
                return result.stdout
            logger.debug(f'ruff format exited with {result.returncode}: {result.stderr}')
        except (FileNotFoundError, subprocess.SubprocessError) as e:
            logger.debug(f'ruff unavailable: {e}')

        try:
            import black

            return black.format_str(source, mode=black.Mode(string_normalization=False))
        except ImportError:
            logger.debug('black unavailable, leaving generated code unformatted')
        except black.InvalidInput as e:
            logger.warning(f'black could not format generated code: {e}')
        return source


class StringEmitter(CodeEmitter):
    """Collects the generated package in memory.

    Useful for tests or for post-processing the code before writing it.
    """

    def __init__(self):
        self._modules: dict[str, str] = {}

    def emit_module(self, name: str, source: str) -> str:
        self._modules[name] = source
        return name

    def emit_init(self, exports: Mapping[str, Iterable[str]]) -> str:
        return self.emit_module('__init__', self.build_init(exports))

    def get_module(self, name: str) -> str | None:
        return self._modules.get(name)

    def get_all_modules(self) -> dict[str, str]:
        return self._modules.copy()


def _remove_tree(path: UPath) -> None:
    for child in path.iterdir():
        if child.is_dir():
            _remove_tree(child)
        else:
            child.unlink()
    path.rmdir()
