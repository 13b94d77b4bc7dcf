"""Error types raised by lens view/set functions."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator


class LensError(Exception):
    """Base class for failures inside a lens view or set.

    ``operation`` is ``"view"`` or ``"set"``; ``lens_name`` names the
    constructor call that produced the failing lens, e.g. ``index_l(3)``.
    """

    def __init__(self, message: str, *, operation: str | None = None, lens_name: str | None = None):
        self.message = message
        self.operation = operation
        self.lens_name = lens_name
        super().__init__(message)

    def __str__(self) -> str:
        if self.lens_name and self.operation:
            return f"{self.lens_name} {self.operation}: {self.message}"
        if self.lens_name:
            return f"{self.lens_name}: {self.message}"
        return self.message


class OutOfRangeError(LensError, IndexError):
    """Positional index beyond the bounds of a sequence."""


class MissingKeyError(LensError, KeyError):
    """Named field absent from a keyed structure."""


class CardinalityMismatchError(LensError, ValueError):
    """Replacement collection does not match the number of foci."""

    def __init__(self, message: str, *, expected: int, actual: int, **kwargs):
        self.expected = expected
        self.actual = actual
        super().__init__(message, **kwargs)


class TypeMismatchError(LensError, TypeError):
    """Structure is not a container kind the lens knows how to focus into."""


def check_count(expected: int, actual: int, what: str = "values") -> None:
    """Raise CardinalityMismatchError unless ``actual == expected``."""
    if expected != actual:
        raise CardinalityMismatchError(
            f"expected {expected} {what}, got {actual}", expected=expected, actual=actual
        )


@contextmanager
def reporting(operation: str, lens_name: str) -> Iterator[None]:
    """Attach the operation and lens name to lens errors raised in the block.

    Errors already tagged by an inner lens keep their original tag.
    """
    try:
        yield
    except LensError as exc:
        if exc.operation is None:
            exc.operation = operation
        if exc.lens_name is None:
            exc.lens_name = lens_name
        raise
