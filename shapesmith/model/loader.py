"""Loading of service description documents.

This module reads a service description from a URL, a local file, raw
JSON/YAML text or an already-parsed mapping, and validates its structure
into a ``RawModel``. Duplicate keys anywhere in the document (most
importantly a shape name declared twice) are rejected while parsing, before
the later of the two declarations could silently win.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
import yaml
from pydantic import ValidationError

from shapesmith.exceptions import MalformedModelError
from shapesmith.model.document import RawModel

logger = logging.getLogger(__name__)

__all__ = ['ModelLoader', 'load_model']

REQUIRED_SECTIONS = ('metadata', 'operations', 'shapes')


class DuplicateKeyError(ValueError):
    """Raised while parsing when a mapping declares the same key twice."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"duplicate key '{key}'")


def _unique_pairs(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise DuplicateKeyError(key)
        result[key] = value
    return result


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses mappings with repeated keys."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicate = key in seen
            except TypeError as e:
                raise yaml.constructor.ConstructorError(
                    'while constructing a mapping',
                    node.start_mark,
                    f'found unhashable key ({e})',
                    key_node.start_mark,
                ) from e
            if duplicate:
                raise DuplicateKeyError(key)
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def parse_json(text: str) -> Any:
    return json.loads(text, object_pairs_hook=_unique_pairs)


def parse_yaml(text: str) -> Any:
    return yaml.load(text, Loader=_UniqueKeyLoader)


class ModelLoader:
    """Loads service descriptions from URLs, files, text or mappings.

    Example:
        >>> loader = ModelLoader()
        >>> raw = loader.load('./service-2.json')
        >>> raw.metadata.service_id
        'JsonProtocolTests'
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        base_path: str | Path | None = None,
    ):
        """Initialize the model loader.

        Args:
            http_client: Optional HTTP client used for URL sources.
            base_path: Base path for relative file sources. Defaults to the
                current working directory.
        """
        self._http_client = http_client
        self._base_path = Path(base_path) if base_path else Path.cwd()

    def load(self, document: str | Path | Mapping[str, Any]) -> RawModel:
        """Load and structurally validate a service description.

        Args:
            document: A URL, a file path, raw JSON or YAML text, or a mapping
                that has already been parsed.

        Returns:
            The validated, not yet resolved model.

        Raises:
            MalformedModelError: If the document cannot be read or parsed, has
                duplicate keys, or does not have the expected structure.
        """
        source = self._describe(document)
        logger.debug(f'Loading service description from {source}')
        try:
            if isinstance(document, Mapping):
                content = document
            elif isinstance(document, Path):
                content = self._load_from_file(document)
            elif self._is_text(document):
                content = self._parse_text(document)
            elif self._is_url(document):
                content = self._load_from_url(document)
            else:
                content = self._load_from_file(Path(document))
            return self._validate(content, source)

        except MalformedModelError:
            raise
        except DuplicateKeyError as e:
            raise MalformedModelError(source, errors=[str(e)])
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise MalformedModelError(source, errors=[f'cannot parse document: {e}'])
        except UnicodeDecodeError as e:
            raise MalformedModelError(source, errors=[f'cannot decode document: {e}'])
        except httpx.HTTPError as e:
            raise MalformedModelError(source, errors=[f'cannot fetch document: {e}'])
        except OSError as e:
            raise MalformedModelError(source, errors=[f'cannot read document: {e}'])

    @staticmethod
    def _describe(document: Any) -> str:
        if isinstance(document, Mapping):
            return '<mapping>'
        text = str(document)
        if ModelLoader._is_text(text):
            return '<text>'
        return text

    @staticmethod
    def _is_text(document: str) -> bool:
        stripped = document.lstrip()
        return '\n' in stripped or stripped.startswith(('{', '['))

    @staticmethod
    def _is_url(text: str) -> bool:
        try:
            return urlparse(text).scheme in ('http', 'https')
        except ValueError:
            return False

    def _parse_text(self, text: str) -> Any:
        if text.lstrip().startswith(('{', '[')):
            return parse_json(text)
        return parse_yaml(text)

    def _load_from_url(self, url: str) -> Any:
        if self._http_client:
            response = self._http_client.get(url)
        else:
            response = httpx.get(url, follow_redirects=True, timeout=30.0)
        response.raise_for_status()

        content_type = response.headers.get('content-type', '')
        if 'yaml' in content_type or url.endswith(('.yaml', '.yml')):
            return parse_yaml(response.text)
        return parse_json(response.text)

    def _load_from_file(self, path: Path) -> Any:
        if not path.is_absolute():
            path = self._base_path / path
        if not path.exists():
            raise MalformedModelError(str(path), errors=['file not found'])

        text = path.read_text(encoding='utf-8')
        if path.suffix.lower() in ('.yaml', '.yml'):
            return parse_yaml(text)
        return parse_json(text)

    def _validate(self, content: Any, source: str) -> RawModel:
        if not isinstance(content, Mapping):
            raise MalformedModelError(
                source, errors=['document root must be a mapping']
            )
        missing = [section for section in REQUIRED_SECTIONS if section not in content]
        if missing:
            raise MalformedModelError(
                source,
                errors=[f"missing required section '{section}'" for section in missing],
            )

        try:
            model = RawModel.model_validate(content)
        except ValidationError as e:
            raise MalformedModelError(
                source,
                errors=[
                    f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                    for error in e.errors()
                ],
            )

        logger.debug(
            f'Loaded {len(model.shapes)} shapes and {len(model.operations)} '
            f'operations from {source}'
        )
        return model


def load_model(document: str | Path | Mapping[str, Any]) -> RawModel:
    """Load a service description with a default ``ModelLoader``."""
    return ModelLoader().load(document)
