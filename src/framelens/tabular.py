"""Field selection and row predicates backed by pandas."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Hashable, List, Sequence, Tuple

import numpy as np
import pandas as pd

from framelens.containers import field_names, take_rows
from framelens.errors import MissingKeyError, TypeMismatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selector:
    """Field selector resolved against a structure's field names."""

    kind: str
    args: Tuple[Any, ...]

    def mask(self, names: pd.Index) -> np.ndarray:
        labels = names.astype(str)
        if self.kind == "matches":
            return np.asarray(labels.str.contains(self.args[0], regex=True), dtype=bool)
        if self.kind == "starts_with":
            return np.asarray(labels.str.startswith(self.args[0]), dtype=bool)
        if self.kind == "ends_with":
            return np.asarray(labels.str.endswith(self.args[0]), dtype=bool)
        if self.kind == "contains":
            return np.asarray(labels.str.contains(self.args[0], regex=False), dtype=bool)
        if self.kind == "range":
            first, last = (_position_of(names, name) for name in self.args)
            lo, hi = sorted((first, last))
            keep = np.zeros(len(names), dtype=bool)
            keep[lo : hi + 1] = True
            return keep
        raise ValueError(f"Unknown selector kind: {self.kind}")

    def __repr__(self) -> str:
        return f"{self.kind}({', '.join(repr(a) for a in self.args)})"


def matches(pattern: str) -> Selector:
    """Select fields whose name matches the regular expression ``pattern``."""
    return Selector("matches", (pattern,))


def starts_with(prefix: str) -> Selector:
    return Selector("starts_with", (prefix,))


def ends_with(suffix: str) -> Selector:
    return Selector("ends_with", (suffix,))


def contains(text: str) -> Selector:
    return Selector("contains", (text,))


def name_range(first: Hashable, last: Hashable) -> Selector:
    """Select every field between ``first`` and ``last`` inclusive.

    Positions are taken from the structure's current field order; the result
    is in structure order whichever of the two names comes first.
    """
    return Selector("range", (first, last))


def _position_of(names: pd.Index, name: Hashable) -> int:
    if name not in names:
        raise MissingKeyError(f"field {name!r} not found")
    loc = names.get_loc(name)
    if not isinstance(loc, (int, np.integer)):
        raise TypeMismatchError(f"field name {name!r} is not unique")
    return int(loc)


def _item_mask(names: pd.Index, item: Any) -> np.ndarray:
    if isinstance(item, Selector):
        return item.mask(names)
    if isinstance(item, (list, tuple, set, frozenset, pd.Index)):
        keep = np.zeros(len(names), dtype=bool)
        for name in item:
            keep |= _item_mask(names, name)
        return keep
    if isinstance(item, str) and item not in names and ":" in item:
        first, last = item.split(":", 1)
        return name_range(first, last).mask(names)
    if item not in names:
        raise MissingKeyError(f"field {item!r} not found")
    return np.asarray(names == item, dtype=bool)


def select_fields(data: Any, spec: Sequence[Any]) -> List[Hashable]:
    """Resolve a selection spec to field names, in the structure's order.

    ``spec`` items may be names, collections of names, ``"a:c"`` range
    strings, or :class:`Selector` values; the selection is their union.
    """
    names = pd.Index(field_names(data))
    keep = np.zeros(len(names), dtype=bool)
    for item in spec:
        keep |= _item_mask(names, item)
    return list(names[keep])


def subset_fields(data: Any, selected: Sequence[Hashable]) -> Any:
    """Return the sub-structure holding only ``selected`` fields."""
    if isinstance(data, pd.DataFrame):
        return data.loc[:, list(selected)]
    if isinstance(data, pd.Series):
        return data.loc[list(selected)]
    if isinstance(data, dict):
        return {name: data[name] for name in selected}
    raise TypeMismatchError(f"cannot select fields of {type(data).__name__}")


def row_mask(data: Any, predicate: Callable[[Any], Any] | str) -> np.ndarray:
    """Evaluate ``predicate`` against ``data`` and return a boolean row mask.

    For a DataFrame the predicate sees the whole frame, either as a callable
    or as a ``DataFrame.eval`` expression. For a numpy array or Series the
    callable receives the whole array. For lists and tuples it is called on
    each element.
    """
    if isinstance(data, pd.DataFrame):
        raw = data.eval(predicate) if isinstance(predicate, str) else predicate(data)
    elif isinstance(predicate, str):
        raise TypeMismatchError(
            f"string predicates need a DataFrame, got {type(data).__name__}"
        )
    elif isinstance(data, (pd.Series, np.ndarray)):
        raw = predicate(data)
    elif isinstance(data, (list, tuple)):
        raw = np.fromiter((bool(predicate(item)) for item in data), dtype=bool, count=len(data))
    else:
        raise TypeMismatchError(f"cannot filter rows of {type(data).__name__}")

    if isinstance(raw, pd.Series):
        if not pd.api.types.is_bool_dtype(raw):
            raise TypeMismatchError(f"predicate must return booleans, got {raw.dtype}")
        raw = raw.to_numpy(dtype=bool, na_value=False)
    mask = np.asarray(raw)
    if mask.dtype != bool or mask.shape != (len(data),):
        raise TypeMismatchError(
            f"predicate must return {len(data)} booleans, got {mask.dtype} of shape {mask.shape}"
        )
    logger.debug("Row predicate matched %d of %d rows", int(mask.sum()), len(data))
    return mask


def filter_rows(data: Any, predicate: Callable[[Any], Any] | str) -> Any:
    """Return the rows of ``data`` satisfying ``predicate``, in original order."""
    return take_rows(data, row_mask(data, predicate))
