"""
Solver failure taxonomy.

Solver entry points return one of these instances as the failure arm of
their result instead of raising it, so callers branch on the value:

    result = solve_resistors_for_capacitors(1000, 0.707, 1e-9, 1e-9)
    if is_error(result):
        print(result.kind, result)

The series generator is the only engine function that raises (with
InvalidRangeError), since its bounds come from code rather than from a user.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    INVALID_RANGE = "invalid_range"
    INVALID_INPUT = "invalid_input"
    IMAGINARY_ROOT = "imaginary_root"
    DEGENERATE = "degenerate"
    NOT_FOUND = "not_found"


class SolverError(ValueError):
    """Base class for every solver failure. Carries a human-readable cause."""

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, SolverError):
            return NotImplemented
        return self.kind == other.kind and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.kind, self.message))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class InvalidRangeError(SolverError):
    """Malformed series bounds (min <= 0, max < min, or non-finite)."""
    kind = ErrorKind.INVALID_RANGE


class InvalidInputError(SolverError):
    """Non-positive or non-finite target parameters."""
    kind = ErrorKind.INVALID_INPUT


class ImaginaryRootError(SolverError):
    """Requested Q is unreachable with the chosen capacitors at unity gain."""
    kind = ErrorKind.IMAGINARY_ROOT


class DegenerateSolutionError(SolverError):
    """Resistor solve produced non-positive or non-finite values."""
    kind = ErrorKind.DEGENERATE


class SolutionNotFoundError(SolverError):
    """The search evaluated every pair and none was feasible."""
    kind = ErrorKind.NOT_FOUND


def is_error(result: Any) -> bool:
    """True when a solver result is the failure arm."""
    return isinstance(result, SolverError)
