"""Errors raised by generated code at runtime.

These are ordinary, recoverable failures surfaced to the caller of the
generated API. They are not failures of the compiler.
"""


class MissingRequiredMemberError(ValueError):
    """A builder was asked to ``build()`` while required members are unset.

    The caller can recover by supplying the missing values on the same builder
    and calling ``build()`` again.

    Attributes:
        shape_name: The shape whose builder failed.
        members: The required members that were not set.
    """

    def __init__(self, shape_name: str, members: list[str]):
        self.shape_name = shape_name
        self.members = list(members)
        super().__init__(
            f"Cannot build '{shape_name}': missing required member(s) "
            f"{', '.join(self.members)}"
        )


class EventUnionMemberError(ValueError):
    """An event union was built with zero or several populated variants.

    Attributes:
        shape_name: The event union shape.
        populated: The variant members that were set.
    """

    def __init__(self, shape_name: str, populated: list[str]):
        self.shape_name = shape_name
        self.populated = list(populated)
        if populated:
            detail = f"got {len(populated)} populated members ({', '.join(populated)})"
        else:
            detail = 'no member is populated'
        super().__init__(
            f"Event union '{shape_name}' must carry exactly one event: {detail}"
        )
