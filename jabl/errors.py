"""
Exceptions raised by the boundary layer model.

All of them derive from ValueError, so code that already guards model setup
with ``except ValueError`` keeps working.
"""


class InvalidInput(ValueError):
    """A grid or field does not satisfy the shape preconditions of an operator."""


class InvalidConfig(ValueError):
    """Unknown closure, missing closure parameter or inconsistent run settings."""


class DegenerateInput(ValueError):
    """Numerical precondition violated, e.g. a diffusivity profile with no positive value."""
