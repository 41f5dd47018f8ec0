"""Structured error-details carrier attached to every service exception."""

from collections.abc import Mapping

from shapesmith.runtime.model import ShapeBuilder, ShapeModel, copy_bytes, freeze_map

__all__ = ['ErrorDetails', 'complete_error_details']


class ErrorDetails(ShapeModel):
    """Service name, error code, message, headers and raw body of an error.

    ``raw_response`` is copied on every write and every read, so neither the
    buffer handed to the builder nor the one returned here can alter the
    carrier.
    """

    SHAPE_NAME = 'ErrorDetails'
    MEMBERS = ('service_name', 'error_code', 'error_message', 'headers', 'raw_response')

    def __init__(self, builder: 'ErrorDetails.Builder') -> None:
        self._init_member('service_name', builder.get_service_name())
        self._init_member('error_code', builder.get_error_code())
        self._init_member('error_message', builder.get_error_message())
        self._init_member('headers', freeze_map(builder.get_headers()))
        self._init_member('raw_response', copy_bytes(builder.get_raw_response()))

    @property
    def service_name(self) -> str | None:
        """Name of the service that sent the error response."""
        return self._service_name

    @property
    def error_code(self) -> str | None:
        return self._error_code

    @property
    def error_message(self) -> str | None:
        """Human-readable error message provided by the service."""
        return self._error_message

    @property
    def headers(self) -> Mapping[str, str] | None:
        return self._headers

    @property
    def raw_response(self) -> bytes | None:
        """The response payload; a fresh copy on every call."""
        return copy_bytes(self._raw_response)

    def to_builder(self) -> 'ErrorDetails.Builder':
        return ErrorDetails.Builder(self)

    @classmethod
    def builder(cls) -> 'ErrorDetails.Builder':
        return ErrorDetails.Builder()

    class Builder(ShapeBuilder):
        def __init__(self, model: 'ErrorDetails | None' = None) -> None:
            super().__init__(model)
            self._service_name: str | None = None
            self._error_code: str | None = None
            self._error_message: str | None = None
            self._headers: dict[str, str] | None = None
            self._raw_response: bytes | None = None
            if model is not None:
                self._service_name = model.service_name
                self._error_code = model.error_code
                self._error_message = model.error_message
                self._headers = dict(model.headers) if model.headers is not None else None
                self._raw_response = model.raw_response

        def service_name(self, service_name: str | None) -> 'ErrorDetails.Builder':
            self._service_name = service_name
            return self

        def get_service_name(self) -> str | None:
            return self._service_name

        def error_code(self, error_code: str | None) -> 'ErrorDetails.Builder':
            self._error_code = error_code
            return self

        def get_error_code(self) -> str | None:
            return self._error_code

        def error_message(self, error_message: str | None) -> 'ErrorDetails.Builder':
            self._error_message = error_message
            return self

        def get_error_message(self) -> str | None:
            return self._error_message

        def headers(self, headers: Mapping[str, str] | None) -> 'ErrorDetails.Builder':
            self._headers = dict(headers) if headers is not None else None
            return self

        def get_headers(self) -> dict[str, str] | None:
            return self._headers

        def raw_response(
            self, raw_response: bytes | bytearray | memoryview | None
        ) -> 'ErrorDetails.Builder':
            self._raw_response = copy_bytes(raw_response)
            return self

        def get_raw_response(self) -> bytes | None:
            return copy_bytes(self._raw_response)

        def build(self) -> 'ErrorDetails':
            return ErrorDetails(self)


def complete_error_details(
    details: ErrorDetails | None,
    service_name: str | None,
    error_code: str | None,
    error_message: str | None,
) -> ErrorDetails:
    """Fill the unset fields of ``details`` with the values known at build time.

    Values already present on ``details`` always win, so completing an
    already complete carrier returns an equal carrier.
    """
    builder = details.to_builder() if details is not None else ErrorDetails.builder()
    if builder.get_service_name() is None:
        builder.service_name(service_name)
    if builder.get_error_code() is None:
        builder.error_code(error_code)
    if builder.get_error_message() is None:
        builder.error_message(error_message)
    return builder.build()
