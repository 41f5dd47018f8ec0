"""Custom exceptions for shapesmith.

This module defines the hierarchy of exceptions raised while compiling a
service description into generated code. Every compile-time error is fatal to
the run: no partial model and no partial output is ever produced.

Errors raised by *generated* code at runtime (for example a missing required
member at ``build()`` time) live in :mod:`shapesmith.runtime.errors` and are
re-exported here for convenience.
"""

from shapesmith.runtime.errors import EventUnionMemberError, MissingRequiredMemberError


class ShapesmithError(Exception):
    """Base exception for all shapesmith errors.

    All exceptions raised by the compiler inherit from this class, making it
    easy to catch every compilation failure with a single except clause.

    Example:
        try:
            codegen.generate()
        except ShapesmithError as e:
            print(f"shapesmith error: {e}")
    """

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class ModelError(ShapesmithError):
    """Base exception for errors in the service description itself."""

    pass


class MalformedModelError(ModelError):
    """The service description document is structurally invalid.

    Raised by the model loader when the document cannot be parsed, is missing
    one of the required top-level sections, or declares a shape twice.

    Attributes:
        source: The source path, URL or a short description of the document.
        errors: List of structural error messages.
    """

    def __init__(self, source: str, errors: list[str] | None = None):
        self.source = source
        self.errors = errors or []
        message = f"Malformed service model '{source}'"
        if errors:
            message += f': {"; ".join(errors)}'
        super().__init__(message)


class ResolutionError(ModelError):
    """A shape could not be resolved into a consistent model.

    Attributes:
        shape_name: The shape that failed to resolve.
        reason: Explanation of the failure.
    """

    def __init__(self, shape_name: str, reason: str):
        self.shape_name = shape_name
        self.reason = reason
        super().__init__(f"Cannot resolve shape '{shape_name}': {reason}")


class UnresolvedReferenceError(ResolutionError):
    """A shape or operation references a name absent from the shape table.

    Attributes:
        reference: The shape name that could not be found.
        referrer: The shape or operation holding the dangling reference.
    """

    def __init__(self, reference: str, referrer: str):
        self.reference = reference
        self.referrer = referrer
        super().__init__(
            referrer, f"references unknown shape '{reference}'"
        )


class CyclicKeyError(ResolutionError):
    """A cycle runs only through list and map shapes.

    Recursive shapes are legal only when the cycle passes through a structure;
    a list of a list of itself has no finite representation.

    Attributes:
        cycle: The shape names forming the cycle, first name repeated last.
    """

    def __init__(self, cycle: list[str]):
        self.cycle = list(cycle)
        super().__init__(
            cycle[0],
            f"illegal cycle through list/map shapes: {' -> '.join(cycle)}",
        )


class InvalidUnionError(ResolutionError):
    """A shape carries conflicting classification flags or misuses events."""

    pass


class InvalidShapeError(ResolutionError):
    """A shape is structurally inconsistent with the way it is referenced."""

    pass


class NameCollisionError(ResolutionError):
    """Two names map to the same generated identifier.

    Attributes:
        identifier: The colliding generated identifier.
        names: The source names that collide.
    """

    def __init__(self, identifier: str, names: list[str], scope: str | None = None):
        self.identifier = identifier
        self.names = sorted(names)
        self.scope = scope
        where = f' in {scope}' if scope else ''
        super().__init__(
            self.names[0],
            f"names {', '.join(repr(n) for n in self.names)} all map to "
            f"identifier '{identifier}'{where}",
        )


class DuplicateIdempotencyTokenError(ResolutionError):
    """A structure declares more than one idempotency-token member.

    Attributes:
        members: The member names flagged as idempotency tokens.
    """

    def __init__(self, shape_name: str, members: list[str]):
        self.members = list(members)
        super().__init__(
            shape_name,
            f"only one idempotency token member is allowed, found {', '.join(members)}",
        )


class AmbiguousSubtypeError(ResolutionError):
    """An exception or polymorphic hierarchy cannot be linearized."""

    pass


class CodeGenerationError(ShapesmithError):
    """Error during code model building or emission.

    Attributes:
        context: Additional context about what was being generated.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self, message: str, context: str | None = None, cause: Exception | None = None
    ):
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f'{message} (while generating {context})'
        if cause:
            full_message += f': {cause}'
        super().__init__(full_message)


class ConfigurationError(ShapesmithError):
    """Error in configuration.

    Attributes:
        config_path: The path to the configuration file, if applicable.
        field: The specific configuration field that is invalid.
    """

    def __init__(
        self, message: str, config_path: str | None = None, field: str | None = None
    ):
        self.config_path = config_path
        self.field = field
        full_message = message
        if config_path:
            full_message = f"{message} in '{config_path}'"
        if field:
            full_message += f' (field: {field})'
        super().__init__(full_message)


class OutputError(ShapesmithError):
    """Error writing generated output.

    Attributes:
        output_path: The path where output was being written.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, output_path: str, cause: Exception | None = None):
        self.output_path = output_path
        self.cause = cause
        message = f"Failed to write output to '{output_path}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


__all__ = [
    'ShapesmithError',
    'ModelError',
    'MalformedModelError',
    'ResolutionError',
    'UnresolvedReferenceError',
    'CyclicKeyError',
    'InvalidUnionError',
    'InvalidShapeError',
    'NameCollisionError',
    'DuplicateIdempotencyTokenError',
    'AmbiguousSubtypeError',
    'CodeGenerationError',
    'ConfigurationError',
    'OutputError',
    'MissingRequiredMemberError',
    'EventUnionMemberError',
]
