"""Traversals: lenses whose focus is a collection of inner foci."""

from __future__ import annotations

from typing import Any

from framelens.containers import elements, rebuild
from framelens.core import BaseLens, IllegalLens, Lens
from framelens.errors import TypeMismatchError, check_count, reporting


def map_l(inner: BaseLens) -> BaseLens:
    """Promote ``inner`` to act on every element of a collection.

    The focus is a list holding ``inner``'s focus for each element, in
    order. ``set`` needs exactly one value per element and returns a
    container of the same kind (list, tuple, Series, array or dict values).
    """
    if not isinstance(inner, BaseLens):
        raise TypeError(f"map_l expects a lens, got {type(inner).__name__}")
    name = f"map_l({inner.name})"

    def view_fn(data):
        with reporting("view", name):
            return [inner.view(item) for item in elements(data)]

    def set_fn(data, values):
        with reporting("set", name):
            items = elements(data)
            if isinstance(values, (str, bytes)) or not hasattr(values, "__len__"):
                raise TypeMismatchError(f"expected a sequence of {len(items)} values")
            values = list(values)
            check_count(len(items), len(values))
            return rebuild(data, [inner.set(item, value) for item, value in zip(items, values)])

    kind = IllegalLens if isinstance(inner, IllegalLens) else Lens
    return kind(view_fn, set_fn, name)


def c_l(*lenses: BaseLens) -> BaseLens:
    """Combine several lenses into one whose focus is the tuple of their foci.

    Writes happen in argument order, so the result is only well-behaved when
    the component foci do not overlap.
    """
    if not lenses:
        raise ValueError("c_l needs at least one lens.")
    name = f"c_l({', '.join(part.name for part in lenses)})"

    def view_fn(data: Any) -> tuple:
        with reporting("view", name):
            return tuple(part.view(data) for part in lenses)

    def set_fn(data: Any, values: Any) -> Any:
        with reporting("set", name):
            values = tuple(values)
            check_count(len(lenses), len(values))
        for part, value in zip(lenses, values):
            data = part.set(data, value)
        return data

    kind = IllegalLens if any(isinstance(part, IllegalLens) for part in lenses) else Lens
    return kind(view_fn, set_fn, name)
