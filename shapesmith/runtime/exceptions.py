"""Exception base types that generated service exceptions extend.

``ServiceError`` is the root of everything a generated client raises. Client
side failures (the request never produced a service response) derive from
``ClientError``; errors returned by the service derive from
``ServiceException``, which every generated service base exception extends.

Every type is immutable and built through its own ``Builder``; a subtype
builder accepts every property of its supertype builders and ``build()``
always returns the subtype.
"""

from typing import ClassVar

from shapesmith.runtime.error_details import ErrorDetails, complete_error_details
from shapesmith.runtime.model import Immutable, ShapeBuilder

__all__ = [
    'ServiceError',
    'ClientError',
    'AbortedError',
    'ClientTimeoutError',
    'ResetError',
    'RetryableError',
    'ServiceException',
]


class ServiceError(Immutable, Exception):
    """Base type for all errors raised by generated clients."""

    SHAPE_NAME = 'ServiceError'
    MEMBERS = ('message', 'cause')

    def __init__(self, builder: 'ServiceError.Builder') -> None:
        super().__init__(builder.get_message())
        self.__cause__ = builder.get_cause()

    @property
    def message(self) -> str | None:
        return self.args[0] if self.args else None

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__

    def retryable(self) -> bool:
        """Whether repeating the request could succeed."""
        return False

    def to_builder(self) -> 'ServiceError.Builder':
        return type(self).Builder(self)

    @classmethod
    def builder(cls) -> 'ServiceError.Builder':
        return cls.Builder()

    @classmethod
    def create(cls, message: str, cause: BaseException | None = None) -> 'ServiceError':
        return cls.builder().message(message).cause(cause).build()

    class Builder(ShapeBuilder):
        def __init__(self, model: 'ServiceError | None' = None) -> None:
            super().__init__(model)
            self._message: str | None = None
            self._cause: BaseException | None = None
            if model is not None:
                self._message = model.message
                self._cause = model.cause

        def message(self, message: str | None) -> 'ServiceError.Builder':
            self._message = message
            return self

        def get_message(self) -> str | None:
            return self._message

        def cause(self, cause: BaseException | None) -> 'ServiceError.Builder':
            self._cause = cause
            return self

        def get_cause(self) -> BaseException | None:
            return self._cause

        def build(self) -> 'ServiceError':
            return ServiceError(self)


class ClientError(ServiceError):
    """The client failed before or while talking to the service."""

    SHAPE_NAME = 'ClientError'

    class Builder(ServiceError.Builder):
        def build(self) -> 'ClientError':
            return ClientError(self)


class AbortedError(ClientError):
    """The request was aborted, typically because the calling thread was interrupted."""

    SHAPE_NAME = 'AbortedError'

    class Builder(ClientError.Builder):
        def build(self) -> 'AbortedError':
            return AbortedError(self)


class ClientTimeoutError(ClientError):
    """The whole client execution exceeded its configured timeout."""

    SHAPE_NAME = 'ClientTimeoutError'

    class Builder(ClientError.Builder):
        def build(self) -> 'ClientTimeoutError':
            return ClientTimeoutError(self)


class ResetError(ClientError):
    """A request body stream could not be reset for a retry."""

    SHAPE_NAME = 'ResetError'

    class Builder(ClientError.Builder):
        def build(self) -> 'ResetError':
            return ResetError(self)


class RetryableError(ServiceError):
    """A failure that is always safe to retry."""

    SHAPE_NAME = 'RetryableError'

    def retryable(self) -> bool:
        return True

    class Builder(ServiceError.Builder):
        def build(self) -> 'RetryableError':
            return RetryableError(self)


class ServiceException(ServiceError):
    """An error response returned by the service.

    Generated exceptions set ``SERVICE_NAME``, ``ERROR_CODE`` and
    ``HTTP_STATUS_CODE``; on construction these fill any field of the error
    details carrier that the builder left unset. ``SENDER_FAULT`` marks errors
    the service blames on the caller.
    """

    SHAPE_NAME = 'ServiceException'
    MEMBERS = ('message', 'cause', 'request_id', 'status_code', 'error_details')

    SERVICE_NAME: ClassVar[str | None] = None
    ERROR_CODE: ClassVar[str | None] = None
    HTTP_STATUS_CODE: ClassVar[int | None] = None
    SENDER_FAULT: ClassVar[bool] = False

    def __init__(self, builder: 'ServiceException.Builder') -> None:
        super().__init__(builder)
        status_code = builder.get_status_code()
        if status_code is None:
            status_code = type(self).HTTP_STATUS_CODE
        self._init_member('request_id', builder.get_request_id())
        self._init_member('status_code', status_code)
        self._init_member(
            'error_details',
            complete_error_details(
                builder.get_error_details(),
                service_name=type(self).SERVICE_NAME,
                error_code=type(self).ERROR_CODE,
                error_message=builder.get_message(),
            ),
        )

    @property
    def request_id(self) -> str | None:
        return self._request_id

    @property
    def status_code(self) -> int | None:
        return self._status_code

    @property
    def error_details(self) -> ErrorDetails:
        return self._error_details

    def retryable(self) -> bool:
        return self._status_code is not None and (
            self._status_code >= 500 or self._status_code == 429
        )

    def __str__(self) -> str:
        parts = []
        if self._error_details.service_name:
            parts.append(f'Service: {self._error_details.service_name}')
        if self._status_code is not None:
            parts.append(f'Status Code: {self._status_code}')
        if self._request_id:
            parts.append(f'Request ID: {self._request_id}')
        message = self.message or ''
        if not parts:
            return message
        return f'{message} ({", ".join(parts)})'.lstrip()

    class Builder(ServiceError.Builder):
        def __init__(self, model: 'ServiceException | None' = None) -> None:
            super().__init__(model)
            self._request_id: str | None = None
            self._status_code: int | None = None
            self._error_details: ErrorDetails | None = None
            if model is not None:
                self._request_id = model.request_id
                self._status_code = model.status_code
                self._error_details = model.error_details

        def request_id(self, request_id: str | None) -> 'ServiceException.Builder':
            self._request_id = request_id
            return self

        def get_request_id(self) -> str | None:
            return self._request_id

        def status_code(self, status_code: int | None) -> 'ServiceException.Builder':
            self._status_code = status_code
            return self

        def get_status_code(self) -> int | None:
            return self._status_code

        def error_details(
            self, error_details: ErrorDetails | None
        ) -> 'ServiceException.Builder':
            self._error_details = error_details
            return self

        def get_error_details(self) -> ErrorDetails | None:
            return self._error_details

        def build(self) -> 'ServiceException':
            return ServiceException(self)
