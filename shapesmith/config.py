import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from shapesmith.exceptions import ConfigurationError

DEFAULT_FILENAMES = ['shapesmith.yaml', 'shapesmith.yml']


class DocumentConfig(BaseModel):
    """Represents a single service description to be compiled."""

    source: str = Field(..., description='Path or URL to the service description.')

    output: str = Field(..., description='Output package directory for the generated code.')

    service_name: str | None = Field(
        None,
        description='Optional override for the service identifier used to name the '
        'service base classes. Defaults to metadata.serviceId.',
    )

    enforce_required_members: bool = Field(
        True, description='Whether build() rejects unset required members.'
    )

    auto_fill_idempotency_tokens: bool = Field(
        True, description='Whether build() fills unset idempotency tokens with a UUID.'
    )

    format_code: bool = Field(
        True, description='Whether to format generated code with ruff or black.'
    )

    validate_syntax: bool = Field(
        True, description='Whether to compile every generated module before writing it.'
    )

    max_workers: int | None = Field(
        None, gt=0, description='Number of emitter threads; defaults to the executor default.'
    )


class CodegenConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='SHAPESMITH_')

    documents: list[DocumentConfig] = Field(
        ..., description='List of service descriptions to process.'
    )


def load_yaml(path: str | Path) -> dict:
    import yaml

    return yaml.safe_load(Path(path).read_text())


def _validate(data: dict, path: Path) -> CodegenConfig:
    try:
        return CodegenConfig.model_validate(data)
    except ValidationError as e:
        error = e.errors()[0]
        field = '.'.join(str(part) for part in error['loc']) or None
        raise ConfigurationError(error['msg'], config_path=str(path), field=field) from e


def get_config(path: str | None = None) -> CodegenConfig:
    """Load configuration from a file or from the current directory.

    Looks for ``shapesmith.yaml``/``shapesmith.yml`` first, then for a
    ``[tool.shapesmith]`` table in ``pyproject.toml``.

    Raises:
        FileNotFoundError: No configuration was found.
        ConfigurationError: The configuration is invalid.
    """
    if path:
        return _validate(load_yaml(path), Path(path))

    cwd = os.getcwd()

    for filename in DEFAULT_FILENAMES:
        config_path = Path(cwd) / filename
        if config_path.exists():
            return _validate(load_yaml(config_path), config_path)

    config_path = Path(cwd) / 'pyproject.toml'

    if config_path.exists():
        import tomllib

        pyproject = tomllib.loads(config_path.read_text())
        tools = pyproject.get('tool', {})

        if 'shapesmith' in tools:
            return _validate(tools['shapesmith'], config_path)

    raise FileNotFoundError('config not found')
