"""Lens-shaped constructors that break the Set-View law.

Both constructors pick their focus with a predicate that is re-evaluated
on whatever structure they are given. Writing values that change the
predicate's outcome therefore changes what the next view sees, e.g.::

    >>> lens = take_while_il(lambda x: x < 3)
    >>> view(set_([1, 2, 3, 4], lens, [5, 6]), lens)
    []

They return :class:`~framelens.core.IllegalLens` so callers can tell them
apart from law-abiding lenses.
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
import pandas as pd

from framelens.containers import elements, put_rows, take_rows
from framelens.core import IllegalLens
from framelens.errors import TypeMismatchError, reporting


def _element_mask(data: Any, predicate: Callable[[Any], Any]) -> np.ndarray:
    if isinstance(data, pd.DataFrame):
        raise TypeMismatchError("element predicates need a sequence; use filter_l for DataFrame rows")
    if isinstance(data, np.ndarray) and data.ndim != 1:
        raise TypeMismatchError(f"element predicates need a 1-d array, got {data.ndim}-d")
    items = elements(data)
    return np.fromiter((bool(predicate(item)) for item in items), dtype=bool, count=len(items))


def _leading_mask(data: Any, predicate: Callable[[Any], Any]) -> np.ndarray:
    mask = _element_mask(data, predicate)
    failed = np.flatnonzero(~mask)
    if len(failed):
        mask[failed[0]:] = False
    return mask


def _masked_lens(mask_fn, name: str) -> IllegalLens:
    def view_fn(data):
        with reporting("view", name):
            return take_rows(data, mask_fn(data))

    def set_fn(data, new):
        with reporting("set", name):
            return put_rows(data, mask_fn(data), new)

    return IllegalLens(view_fn, set_fn, name)


def cond_il(predicate: Callable[[Any], Any]) -> IllegalLens:
    """Focus on the elements for which ``predicate`` holds.

    Works elementwise on lists, tuples, 1-d arrays, Series and dict values;
    ``set`` needs one value per currently matching element.
    """
    name = f"cond_il({getattr(predicate, '__name__', 'predicate')})"
    return _masked_lens(lambda data: _element_mask(data, predicate), name)


def take_while_il(predicate: Callable[[Any], Any]) -> IllegalLens:
    """Focus on the leading run of elements for which ``predicate`` holds."""
    name = f"take_while_il({getattr(predicate, '__name__', 'predicate')})"
    return _masked_lens(lambda data: _leading_mask(data, predicate), name)

