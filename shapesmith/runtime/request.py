"""Base request/response types and per-request override configuration."""

from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import Any

import httpx

from shapesmith.runtime.model import (
    ShapeBuilder,
    ShapeModel,
    copy_map,
    freeze_list,
    freeze_map,
)

__all__ = [
    'ApiName',
    'HeaderView',
    'RequestOverrideConfiguration',
    'ServiceRequest',
    'ServiceResponse',
]


class HeaderView(Mapping[str, tuple[str, ...]]):
    """Read-only, case-insensitive view over multi-valued headers.

    Lookups ignore case; iteration yields each header name once, in the
    casing it was first set with.
    """

    def __init__(self, headers: Mapping[str, Sequence[str]]):
        self._headers = httpx.Headers(
            [(name, value) for name, values in headers.items() for value in values]
        )
        self._names = {name.lower(): name for name in headers}

    def __getitem__(self, name: str) -> tuple[str, ...]:
        if name.lower() not in self._names:
            raise KeyError(name)
        return tuple(self._headers.get_list(name))

    def __iter__(self) -> Iterator[str]:
        return iter(self._names.values())

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f'HeaderView({dict(self.items())!r})'

    def to_httpx(self) -> httpx.Headers:
        """Return a copy usable by an httpx transport."""
        return self._headers.copy()


class ApiName(ShapeModel):
    """Name and version of a library or tool issuing the request."""

    SHAPE_NAME = 'ApiName'
    MEMBERS = ('name', 'version')

    def __init__(self, builder: 'ApiName.Builder') -> None:
        self._init_member('name', builder.get_name())
        self._init_member('version', builder.get_version())

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def version(self) -> str | None:
        return self._version

    def to_builder(self) -> 'ApiName.Builder':
        return ApiName.Builder(self)

    @classmethod
    def builder(cls) -> 'ApiName.Builder':
        return ApiName.Builder()

    class Builder(ShapeBuilder):
        def __init__(self, model: 'ApiName | None' = None) -> None:
            super().__init__(model)
            self._name: str | None = None
            self._version: str | None = None
            if model is not None:
                self._name = model.name
                self._version = model.version

        def name(self, name: str | None) -> 'ApiName.Builder':
            self._name = name
            return self

        def get_name(self) -> str | None:
            return self._name

        def version(self, version: str | None) -> 'ApiName.Builder':
            self._version = version
            return self

        def get_version(self) -> str | None:
            return self._version

        def build(self) -> 'ApiName':
            return ApiName(self)


def _pop_case_insensitive(headers: dict[str, list[str]], name: str) -> None:
    for existing in [k for k in headers if k.lower() == name.lower()]:
        del headers[existing]


class RequestOverrideConfiguration(ShapeModel):
    """Per-request additions to headers, query parameters and API names.

    Adding the same header or query parameter twice keeps only the last
    values; setting a whole collection replaces everything added before.
    """

    SHAPE_NAME = 'RequestOverrideConfiguration'
    MEMBERS = ('headers', 'raw_query_parameters', 'api_names')

    def __init__(self, builder: 'RequestOverrideConfiguration.Builder') -> None:
        self._init_member('headers', HeaderView(builder.get_headers()))
        self._init_member(
            'raw_query_parameters',
            freeze_map(builder.get_raw_query_parameters(), freeze_list),
        )
        self._init_member('api_names', freeze_list(builder.get_api_names()))

    @property
    def headers(self) -> HeaderView:
        return self._headers

    @property
    def raw_query_parameters(self) -> Mapping[str, tuple[str, ...]]:
        return self._raw_query_parameters

    @property
    def api_names(self) -> tuple[ApiName, ...]:
        return self._api_names

    def to_builder(self) -> 'RequestOverrideConfiguration.Builder':
        return RequestOverrideConfiguration.Builder(self)

    @classmethod
    def builder(cls) -> 'RequestOverrideConfiguration.Builder':
        return RequestOverrideConfiguration.Builder()

    class Builder(ShapeBuilder):
        def __init__(self, model: 'RequestOverrideConfiguration | None' = None) -> None:
            super().__init__(model)
            self._headers: dict[str, list[str]] = {}
            self._raw_query_parameters: dict[str, list[str]] = {}
            self._api_names: list[ApiName] = []
            if model is not None:
                self._headers = {k: list(v) for k, v in model.headers.items()}
                self._raw_query_parameters = {
                    k: list(v) for k, v in model.raw_query_parameters.items()
                }
                self._api_names = list(model.api_names)

        def header(
            self, name: str, values: str | Sequence[str]
        ) -> 'RequestOverrideConfiguration.Builder':
            if isinstance(values, str):
                values = [values]
            _pop_case_insensitive(self._headers, name)
            self._headers[name] = list(values)
            return self

        def headers(
            self, headers: Mapping[str, Sequence[str]]
        ) -> 'RequestOverrideConfiguration.Builder':
            self._headers = {}
            for name, values in headers.items():
                self.header(name, values)
            return self

        def get_headers(self) -> dict[str, list[str]]:
            return self._headers

        def raw_query_parameter(
            self, name: str, values: str | Sequence[str]
        ) -> 'RequestOverrideConfiguration.Builder':
            if isinstance(values, str):
                values = [values]
            self._raw_query_parameters[name] = list(values)
            return self

        def raw_query_parameters(
            self, raw_query_parameters: Mapping[str, Sequence[str]]
        ) -> 'RequestOverrideConfiguration.Builder':
            self._raw_query_parameters = copy_map(raw_query_parameters, list)
            return self

        def get_raw_query_parameters(self) -> dict[str, list[str]]:
            return self._raw_query_parameters

        def api_name(
            self, api_name: ApiName | Callable[[ApiName.Builder], Any]
        ) -> 'RequestOverrideConfiguration.Builder':
            if not isinstance(api_name, ApiName):
                builder = ApiName.builder()
                api_name(builder)
                api_name = builder.build()
            self._api_names.append(api_name)
            return self

        def get_api_names(self) -> list[ApiName]:
            return self._api_names

        def build(self) -> 'RequestOverrideConfiguration':
            return RequestOverrideConfiguration(self)


class ServiceRequest(ShapeModel):
    """Base type of every generated operation input."""

    SHAPE_NAME = 'ServiceRequest'
    MEMBERS = ('override_configuration',)

    def __init__(self, builder: 'ServiceRequest.Builder') -> None:
        self._init_member('override_configuration', builder.get_override_configuration())

    @property
    def override_configuration(self) -> RequestOverrideConfiguration | None:
        return self._override_configuration

    class Builder(ShapeBuilder):
        def __init__(self, model: 'ServiceRequest | None' = None) -> None:
            super().__init__(model)
            self._override_configuration: RequestOverrideConfiguration | None = None
            if model is not None:
                self._override_configuration = model.override_configuration

        def override_configuration(
            self,
            override_configuration: RequestOverrideConfiguration
            | Callable[[RequestOverrideConfiguration.Builder], Any]
            | None,
        ) -> 'ServiceRequest.Builder':
            if override_configuration is not None and not isinstance(
                override_configuration, RequestOverrideConfiguration
            ):
                builder = RequestOverrideConfiguration.builder()
                override_configuration(builder)
                override_configuration = builder.build()
            self._override_configuration = override_configuration
            return self

        def get_override_configuration(self) -> RequestOverrideConfiguration | None:
            return self._override_configuration


class ServiceResponse(ShapeModel):
    """Base type of every generated operation output."""

    SHAPE_NAME = 'ServiceResponse'
    MEMBERS = ('response_metadata', 'http_status_code', 'http_headers')

    def __init__(self, builder: 'ServiceResponse.Builder') -> None:
        self._init_member('response_metadata', freeze_map(builder.get_response_metadata()))
        self._init_member('http_status_code', builder.get_http_status_code())
        self._init_member('http_headers', freeze_map(builder.get_http_headers()))

    @property
    def response_metadata(self) -> Mapping[str, str] | None:
        return self._response_metadata

    @property
    def http_status_code(self) -> int | None:
        return self._http_status_code

    @property
    def http_headers(self) -> Mapping[str, str] | None:
        return self._http_headers

    @property
    def request_id(self) -> str | None:
        if self._response_metadata is None:
            return None
        return self._response_metadata.get('request_id')

    class Builder(ShapeBuilder):
        def __init__(self, model: 'ServiceResponse | None' = None) -> None:
            super().__init__(model)
            self._response_metadata: dict[str, str] | None = None
            self._http_status_code: int | None = None
            self._http_headers: dict[str, str] | None = None
            if model is not None:
                self._response_metadata = copy_map(model.response_metadata)
                self._http_status_code = model.http_status_code
                self._http_headers = copy_map(model.http_headers)

        def response_metadata(
            self, response_metadata: Mapping[str, str] | None
        ) -> 'ServiceResponse.Builder':
            self._response_metadata = copy_map(response_metadata)
            return self

        def get_response_metadata(self) -> dict[str, str] | None:
            return self._response_metadata

        def http_status_code(self, http_status_code: int | None) -> 'ServiceResponse.Builder':
            self._http_status_code = http_status_code
            return self

        def get_http_status_code(self) -> int | None:
            return self._http_status_code

        def http_headers(
            self, http_headers: Mapping[str, str] | None
        ) -> 'ServiceResponse.Builder':
            self._http_headers = copy_map(http_headers)
            return self

        def get_http_headers(self) -> dict[str, str] | None:
            return self._http_headers
