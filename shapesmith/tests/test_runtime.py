"""Tests for the runtime support package used by generated code."""

from types import MappingProxyType

import httpx
import pytest

from shapesmith.runtime import (
    UNKNOWN_ENUM_VALUE,
    ApiName,
    ClientError,
    ErrorDetails,
    HeaderView,
    MissingRequiredMemberError,
    RequestOverrideConfiguration,
    RetryableError,
    ServiceError,
    ServiceException,
    ShapeEnum,
    check_required,
    complete_error_details,
    copy_bytes,
    copy_list,
    copy_map,
    freeze_list,
    freeze_map,
    new_idempotency_token,
)
from shapesmith.runtime.errors import EventUnionMemberError


class TestCopyHelpers:
    def test_copy_bytes(self):
        buffer = bytearray(b'abc')
        copied = copy_bytes(buffer)
        buffer[0] = ord('z')
        assert copied == b'abc'
        assert isinstance(copied, bytes)
        assert copy_bytes(memoryview(b'xy')) == b'xy'
        assert copy_bytes(None) is None

    def test_copy_list(self):
        source = [bytearray(b'a')]
        copied = copy_list(source, copy_bytes)
        source[0][0] = ord('b')
        assert copied == [b'a']
        assert copy_list((1, 2)) == [1, 2]
        assert copy_list(None) is None

    def test_copy_map(self):
        assert copy_map({'a': bytearray(b'1')}, copy_bytes) == {'a': b'1'}
        assert copy_map(None) is None

    def test_freeze(self):
        assert freeze_list([1, 2]) == (1, 2)
        frozen = freeze_map({'a': [1]}, freeze_list)
        assert isinstance(frozen, MappingProxyType)
        assert frozen['a'] == (1,)
        with pytest.raises(TypeError):
            frozen['b'] = 2
        assert freeze_list(None) is None and freeze_map(None) is None

    def test_idempotency_tokens_are_unique(self):
        assert new_idempotency_token() != new_idempotency_token()

    def test_check_required(self):
        check_required('Shape', {'a': 1, 'b': ''})
        with pytest.raises(MissingRequiredMemberError) as exc_info:
            check_required('Shape', {'a': None, 'b': 1, 'c': None})
        assert exc_info.value.members == ['a', 'c']
        assert exc_info.value.shape_name == 'Shape'
        assert "Cannot build 'Shape'" in str(exc_info.value)


class TestEnums:
    class Size(ShapeEnum):
        SMALL = 'small'
        LARGE = 'large'
        UNKNOWN_TO_SDK_VERSION = 'UNKNOWN_TO_SDK_VERSION'

    def test_known_value(self):
        assert self.Size('small') is self.Size.SMALL
        assert str(self.Size.LARGE) == 'large'
        assert self.Size.SMALL == 'small'

    def test_unknown_value(self):
        assert self.Size('medium') is self.Size.UNKNOWN_TO_SDK_VERSION
        assert self.Size('medium').value == UNKNOWN_ENUM_VALUE

    def test_known_values(self):
        assert self.Size.known_values() == ('small', 'large')


class TestImmutability:
    def test_values_reject_assignment(self):
        name = ApiName.builder().name('tool').version('1.0').build()
        with pytest.raises(AttributeError, match='immutable'):
            name.name = 'other'
        with pytest.raises(AttributeError):
            del name._name

    def test_value_semantics(self):
        first = ApiName.builder().name('tool').build()
        second = ApiName.builder().name('tool').build()
        assert first == second
        assert hash(first) == hash(second)
        assert repr(first) == "ApiName(name='tool')"
        assert first.to_builder().version('2').build() != first


class TestErrorDetails:
    def test_raw_response_is_copied(self):
        raw = bytearray(b'payload')
        details = ErrorDetails.builder().raw_response(raw).build()
        raw[0] = ord('X')
        assert details.raw_response == b'payload'

    def test_complete_keeps_existing_values(self):
        details = ErrorDetails.builder().error_code('Custom').build()
        completed = complete_error_details(details, 'Svc', 'Default', 'msg')
        assert completed.error_code == 'Custom'
        assert completed.service_name == 'Svc'
        assert completed.error_message == 'msg'
        assert complete_error_details(completed, 'Other', 'Other', 'Other') == completed

    def test_complete_from_nothing(self):
        completed = complete_error_details(None, 'Svc', None, None)
        assert completed.service_name == 'Svc'
        assert completed.error_code is None


class TestExceptions:
    def test_service_error(self):
        cause = OSError('disk')
        error = ServiceError.create('failed', cause)
        assert error.message == 'failed'
        assert error.cause is cause
        assert not error.retryable()
        with pytest.raises(ServiceError):
            raise error

    def test_subtype_builders_return_subtype(self):
        error = ClientError.builder().message('no network').build()
        assert type(error) is ClientError
        assert type(error.to_builder().build()) is ClientError
        assert RetryableError.builder().build().retryable()

    def test_service_exception(self):
        error = (
            ServiceException.builder()
            .message('Bad thing')
            .status_code(503)
            .request_id('req-1')
            .build()
        )
        assert error.retryable()
        assert str(error) == 'Bad thing (Status Code: 503, Request ID: req-1)'
        assert error.error_details.error_message == 'Bad thing'

    def test_service_exception_not_retryable(self):
        assert not ServiceException.builder().status_code(400).build().retryable()
        assert not ServiceException.builder().build().retryable()

    def test_exception_machinery_still_works(self):
        error = ServiceException.builder().message('x').build()
        error.add_note('context')
        try:
            raise error
        except ServiceException as caught:
            assert caught.__traceback__ is not None
            assert caught.__notes__ == ['context']


class TestRequestOverrides:
    def test_headers_are_case_insensitive(self):
        config = (
            RequestOverrideConfiguration.builder()
            .header('X-Trace', 'a')
            .header('x-trace', ['b', 'c'])
            .build()
        )
        assert list(config.headers) == ['x-trace']
        assert config.headers['X-TRACE'] == ('b', 'c')
        assert isinstance(config.headers.to_httpx(), httpx.Headers)

    def test_headers_replace_all(self):
        config = (
            RequestOverrideConfiguration.builder()
            .header('A', '1')
            .headers({'B': ['2']})
            .build()
        )
        assert dict(config.headers) == {'B': ('2',)}
        with pytest.raises(KeyError):
            config.headers['A']

    def test_query_parameters_and_api_names(self):
        config = (
            RequestOverrideConfiguration.builder()
            .raw_query_parameter('q', 'x')
            .api_name(lambda b: b.name('tool').version('1'))
            .build()
        )
        assert config.raw_query_parameters == {'q': ('x',)}
        assert config.api_names == (ApiName.builder().name('tool').version('1').build(),)
        rebuilt = config.to_builder().build()
        assert rebuilt.raw_query_parameters == config.raw_query_parameters
        assert rebuilt.api_names == config.api_names

    def test_header_view(self):
        view = HeaderView({'Content-Type': ['application/json']})
        assert view['content-type'] == ('application/json',)
        assert len(view) == 1


class TestRuntimeErrors:
    def test_event_union_error_message(self):
        assert 'no member is populated' in str(EventUnionMemberError('Stream', []))
        error = EventUnionMemberError('Stream', ['a', 'b'])
        assert error.populated == ['a', 'b']
        assert 'got 2 populated members (a, b)' in str(error)
