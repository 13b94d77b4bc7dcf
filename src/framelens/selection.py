"""Lenses onto sub-collections: selected fields and filtered rows."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any, Callable, Hashable, Iterable, Sequence

import numpy as np
import pandas as pd

from framelens.containers import column_values, put_rows, replace_series_values, take_rows
from framelens.core import Lens
from framelens.errors import CardinalityMismatchError, MissingKeyError, TypeMismatchError, reporting
from framelens.tabular import row_mask, select_fields, subset_fields


def _describe(spec: Iterable[Any]) -> str:
    return ", ".join(repr(item) for item in spec)


def _new_field_names(new: Any) -> list:
    if isinstance(new, pd.DataFrame):
        return list(new.columns)
    if isinstance(new, pd.Series):
        return list(new.index)
    if isinstance(new, Mapping):
        return list(new.keys())
    raise TypeMismatchError(
        f"replacement fields must be a mapping, Series, DataFrame or scalar, got {type(new).__name__}"
    )


def merge_fields(data: Any, selected: Sequence[Hashable], new: Any) -> Any:
    """Return a copy of ``data`` with ``selected`` fields taken from ``new``.

    ``new`` is matched by field name; a scalar is broadcast to every
    selected field. Unselected fields keep their values and positions.
    """
    if pd.api.types.is_scalar(new):
        incoming = {name: new for name in selected}
    else:
        available = _new_field_names(new)
        missing = [name for name in selected if name not in available]
        if missing:
            raise MissingKeyError(f"replacement lacks fields {missing!r}")
        if len(available) != len(selected):
            extra = [name for name in available if name not in selected]
            raise CardinalityMismatchError(
                f"replacement has unselected fields {extra!r}",
                expected=len(selected),
                actual=len(available),
            )
        incoming = {name: new[name] for name in selected}

    if isinstance(data, pd.DataFrame):
        out = data.copy()
        for name, value in incoming.items():
            out[name] = column_values(data, value)
        return out
    if isinstance(data, pd.Series):
        hits = [(pos, incoming[label]) for pos, label in enumerate(data.index) if label in incoming]
        return replace_series_values(data, [pos for pos, _ in hits], [value for _, value in hits])
    if isinstance(data, dict):
        out = copy.copy(data)
        out.update(incoming)
        return out
    raise TypeMismatchError(f"cannot write fields of {type(data).__name__}")


def select_l(*spec: Any) -> Lens:
    """Lens onto the fields chosen by ``spec``.

    Works on dicts and Series (records) and on DataFrames (columns). Spec
    items are field names, collections of names, ``"first:last"`` ranges or
    selectors such as :func:`framelens.tabular.matches`; the selection is
    their union, kept in the structure's field order.

    Example:
        select_l("a", "c") on {"a": 1, "b": 2, "c": 3} views {"a": 1, "c": 3}
    """
    if not spec:
        raise ValueError("select_l needs at least one field selector.")
    name = f"select_l({_describe(spec)})"

    def view_fn(data):
        with reporting("view", name):
            return subset_fields(data, select_fields(data, spec))

    def set_fn(data, new):
        with reporting("set", name):
            return merge_fields(data, select_fields(data, spec), new)

    return Lens(view_fn, set_fn, name)


def filter_l(predicate: Callable[[Any], Any] | str) -> Lens:
    """Lens onto the rows satisfying ``predicate``.

    On a DataFrame the predicate receives the whole frame (so it may use
    any column) and returns a boolean mask; a string is evaluated with
    ``DataFrame.eval``. On lists and tuples it is called per element.

    ``set`` computes the match once on the structure it is given and writes
    the i-th replacement row into the i-th matching row, so replacements
    that no longer satisfy the predicate still land in the rows that were
    matched.
    """
    label = predicate if isinstance(predicate, str) else getattr(predicate, "__name__", "predicate")
    name = f"filter_l({label!r})" if isinstance(predicate, str) else f"filter_l({label})"

    def view_fn(data):
        with reporting("view", name):
            return take_rows(data, row_mask(data, predicate))

    def set_fn(data, new):
        with reporting("set", name):
            return put_rows(data, row_mask(data, predicate), new)

    return Lens(view_fn, set_fn, name)


def rows_l(labels: Iterable[Hashable]) -> Lens:
    """Lens onto the rows of a DataFrame or Series with the given index labels.

    Rows are viewed in index order; every label must be present.
    """
    labels = list(labels)
    name = f"rows_l({labels!r})"

    def _mask(data):
        if not isinstance(data, (pd.DataFrame, pd.Series)):
            raise TypeMismatchError(f"rows_l needs a DataFrame or Series, got {type(data).__name__}")
        missing = [lab for lab in labels if lab not in data.index]
        if missing:
            raise MissingKeyError(f"index labels {missing!r} not found")
        return np.asarray(data.index.isin(labels), dtype=bool)

    def view_fn(data):
        with reporting("view", name):
            return take_rows(data, _mask(data))

    def set_fn(data, new):
        with reporting("set", name):
            return put_rows(data, _mask(data), new)

    return Lens(view_fn, set_fn, name)
