"""Runtime support imported by shapesmith-generated code.

Generated modules only ever import names from this package, never from the
compiler modules, so the runtime API is the whole contract between a
generated client and shapesmith.
"""

from shapesmith.runtime.enums import UNKNOWN_ENUM_VALUE, ShapeEnum
from shapesmith.runtime.error_details import ErrorDetails, complete_error_details
from shapesmith.runtime.errors import EventUnionMemberError, MissingRequiredMemberError
from shapesmith.runtime.events import UNKNOWN_EVENT, EventMember, EventUnion
from shapesmith.runtime.exceptions import (
    AbortedError,
    ClientError,
    ClientTimeoutError,
    ResetError,
    RetryableError,
    ServiceError,
    ServiceException,
)
from shapesmith.runtime.model import (
    Immutable,
    ShapeBuilder,
    ShapeModel,
    check_required,
    copy_bytes,
    copy_list,
    copy_map,
    freeze_list,
    freeze_map,
    new_idempotency_token,
)
from shapesmith.runtime.request import (
    ApiName,
    HeaderView,
    RequestOverrideConfiguration,
    ServiceRequest,
    ServiceResponse,
)

__all__ = [
    # Value types and builders
    'Immutable',
    'ShapeModel',
    'ShapeBuilder',
    'ShapeEnum',
    'UNKNOWN_ENUM_VALUE',
    # Copy helpers
    'check_required',
    'copy_bytes',
    'copy_list',
    'copy_map',
    'freeze_list',
    'freeze_map',
    'new_idempotency_token',
    # Requests and responses
    'ApiName',
    'HeaderView',
    'RequestOverrideConfiguration',
    'ServiceRequest',
    'ServiceResponse',
    # Events
    'UNKNOWN_EVENT',
    'EventMember',
    'EventUnion',
    # Errors
    'ErrorDetails',
    'complete_error_details',
    'ServiceError',
    'ClientError',
    'AbortedError',
    'ClientTimeoutError',
    'ResetError',
    'RetryableError',
    'ServiceException',
    'MissingRequiredMemberError',
    'EventUnionMemberError',
]
