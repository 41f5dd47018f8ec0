"""Test suite for the shapesmith exception hierarchy."""

import pytest

from shapesmith.exceptions import (
    AmbiguousSubtypeError,
    CodeGenerationError,
    ConfigurationError,
    CyclicKeyError,
    DuplicateIdempotencyTokenError,
    EventUnionMemberError,
    InvalidShapeError,
    InvalidUnionError,
    MalformedModelError,
    MissingRequiredMemberError,
    ModelError,
    NameCollisionError,
    OutputError,
    ResolutionError,
    ShapesmithError,
    UnresolvedReferenceError,
)


class TestHierarchy:
    """Test that every compiler error can be caught through its bases."""

    @pytest.mark.parametrize(
        'error',
        [
            UnresolvedReferenceError('A', 'B.c'),
            CyclicKeyError(['A', 'B', 'A']),
            InvalidUnionError('A', 'bad'),
            InvalidShapeError('A', 'bad'),
            NameCollisionError('a', ['A', 'a']),
            DuplicateIdempotencyTokenError('A', ['X', 'Y']),
            AmbiguousSubtypeError('A', 'bad'),
        ],
    )
    def test_resolution_errors(self, error):
        assert isinstance(error, ResolutionError)
        assert isinstance(error, ModelError)
        assert isinstance(error, ShapesmithError)

    def test_other_errors(self):
        assert isinstance(MalformedModelError('doc'), ModelError)
        assert isinstance(CodeGenerationError('x'), ShapesmithError)
        assert isinstance(ConfigurationError('x'), ShapesmithError)
        assert isinstance(OutputError('out'), ShapesmithError)

    def test_runtime_errors_are_not_compiler_errors(self):
        assert not issubclass(MissingRequiredMemberError, ShapesmithError)
        assert issubclass(MissingRequiredMemberError, ValueError)
        assert issubclass(EventUnionMemberError, ValueError)


class TestMessages:
    """Test the formatted messages and attributes."""

    def test_malformed_model(self):
        error = MalformedModelError('service.json', ['a', 'b'])
        assert str(error) == "Malformed service model 'service.json': a; b"
        assert MalformedModelError('service.json').errors == []

    def test_unresolved_reference(self):
        error = UnresolvedReferenceError('Missing', 'S.X')
        assert error.shape_name == 'S.X'
        assert str(error) == "Cannot resolve shape 'S.X': references unknown shape 'Missing'"

    def test_cyclic_key(self):
        error = CyclicKeyError(['A', 'B', 'A'])
        assert error.cycle == ['A', 'B', 'A']
        assert 'A -> B -> A' in str(error)

    def test_name_collision(self):
        error = NameCollisionError('foo_bar', ['fooBar', 'FooBar'], scope='members of S')
        assert error.names == ['FooBar', 'fooBar']
        assert str(error).endswith("all map to identifier 'foo_bar' in members of S")

    def test_code_generation(self):
        cause = ValueError('boom')
        error = CodeGenerationError('failed', context='Thing', cause=cause)
        assert str(error) == 'failed (while generating Thing): boom'
        assert error.cause is cause

    def test_configuration(self):
        error = ConfigurationError('bad value', config_path='shapesmith.yaml', field='documents')
        assert str(error) == "bad value in 'shapesmith.yaml' (field: documents)"

    def test_output(self):
        error = OutputError('/tmp/out.py', OSError('denied'))
        assert str(error) == "Failed to write output to '/tmp/out.py': denied"

    def test_message_attribute(self):
        assert ShapesmithError('plain').message == 'plain'
