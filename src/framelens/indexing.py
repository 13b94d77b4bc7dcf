"""Lenses onto single elements, fields, attributes and field names.

Positions are 0-based, negative positions count from the end. Int keys on a
Series or DataFrame are positional; any other key is a label.
"""

from __future__ import annotations

from typing import Any, Hashable, Sequence

from framelens.containers import field_names, get_attr, get_item, rename_fields, set_attr, set_item
from framelens.core import Lens
from framelens.errors import TypeMismatchError, check_count, reporting


def index_l(key: Hashable) -> Lens:
    """Lens onto the element at position or key ``key``.

    Viewing a missing position raises OutOfRangeError, a missing key raises
    MissingKeyError. Setting a new key on a dict, Series or DataFrame adds
    it; positions are never created.
    """
    name = f"index_l({key!r})"

    def view_fn(data):
        with reporting("view", name):
            return get_item(data, key)

    def set_fn(data, value):
        with reporting("set", name):
            return set_item(data, key, value)

    return Lens(view_fn, set_fn, name)


index = index_l


def indexes_l(keys: Sequence[Hashable]) -> Lens:
    """Lens onto several elements at once; the focus is a list in key order."""
    keys = list(keys)
    name = f"indexes_l({keys!r})"

    def view_fn(data):
        with reporting("view", name):
            return [get_item(data, key) for key in keys]

    def set_fn(data, values):
        with reporting("set", name):
            if isinstance(values, (str, bytes)) or not hasattr(values, "__len__"):
                raise TypeMismatchError(f"expected a sequence of {len(keys)} values")
            values = list(values)
            check_count(len(keys), len(values))
            for key, value in zip(keys, values):
                data = set_item(data, key, value)
            return data

    return Lens(view_fn, set_fn, name)


def attr_l(attr: str) -> Lens:
    """Lens onto an object attribute.

    Dataclasses are copied with ``dataclasses.replace`` and namedtuples with
    ``_replace``; other objects are shallow-copied before the write.
    """
    name = f"attr_l({attr!r})"

    def view_fn(data):
        with reporting("view", name):
            return get_attr(data, attr)

    def set_fn(data, value):
        with reporting("set", name):
            return set_attr(data, attr, value)

    return Lens(view_fn, set_fn, name)


def _names_view(data: Any) -> list:
    with reporting("view", "names_l"):
        return field_names(data)


def _names_set(data: Any, names: Sequence[Hashable]) -> Any:
    with reporting("set", "names_l"):
        return rename_fields(data, names)


names_l = Lens(_names_view, _names_set, "names_l")
