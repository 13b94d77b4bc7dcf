"""Container adapters: copy-on-write access for each supported container kind.

Every ``set``-style helper here returns a new value and never writes into
its input. Positions are 0-based and negative positions count from the end,
as for Python sequences. Supported kinds:

- ``list`` / ``tuple`` / namedtuple
- ``dict`` and other mappings (written back as ``dict`` unless a ``dict``
  subclass, which is copied)
- dataclass instances (fields only)
- ``numpy.ndarray`` (axis 0)
- ``pandas.Series`` (int keys positional, other keys by label)
- ``pandas.DataFrame`` (columns; int keys positional)

Strings and bytes are treated as atomic values.
"""

from __future__ import annotations

import copy
import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Hashable, List, Optional

import numpy as np
import pandas as pd

from framelens.errors import MissingKeyError, OutOfRangeError, TypeMismatchError, check_count


def is_position(key: object) -> bool:
    return isinstance(key, (int, np.integer)) and not isinstance(key, (bool, np.bool_))


def is_namedtuple(data: object) -> bool:
    return isinstance(data, tuple) and hasattr(data, "_fields")


def _is_dataclass_instance(data: object) -> bool:
    return dataclasses.is_dataclass(data) and not isinstance(data, type)


def _is_atomic(data: object) -> bool:
    return isinstance(data, (str, bytes, bytearray))


def _kind(data: object) -> str:
    return type(data).__name__


def check_position(key: int, n: int) -> int:
    """Normalise ``key`` against a length ``n``; raise OutOfRangeError if outside."""
    k = int(key)
    if k < -n or k >= n:
        raise OutOfRangeError(f"position {k} out of range for length {n}")
    return k + n if k < 0 else k


def _with_dtype_for(data: np.ndarray, value: Any) -> np.ndarray:
    """Copy ``data`` with a dtype wide enough to hold ``value``."""
    probe = value if np.isscalar(value) else np.asarray(value)
    return data.astype(np.result_type(data, probe), copy=True)


def _cast_like(values: List[Any], dtype: Any) -> Optional[pd.Series]:
    """Return ``values`` as a Series of ``dtype``, or None if that would change a value."""
    try:
        cast = pd.Series(values, dtype=dtype)
    except (TypeError, ValueError, OverflowError):
        return None
    for before, after in zip(values, cast.tolist()):
        if not pd.api.types.is_scalar(before):
            return None
        if pd.isna(before) or pd.isna(after):
            if not (pd.isna(before) and pd.isna(after)):
                return None
        elif before != after:
            return None
    return cast


def replace_series_values(data: pd.Series, positions: Sequence[int], values: Sequence[Any]) -> pd.Series:
    """Return a copy of ``data`` with the given positions replaced.

    The dtype of ``data`` is kept when it holds every new value exactly;
    otherwise the result dtype is inferred from the merged values.
    """
    merged = data.tolist()
    for pos, value in zip(positions, values):
        merged[pos] = value
    if data.dtype == object:
        return pd.Series(merged, index=data.index, name=data.name, dtype=object)
    kept = _cast_like(merged, data.dtype)
    if kept is not None:
        return pd.Series(kept.array, index=data.index, name=data.name)
    return pd.Series(merged, index=data.index, name=data.name)


def column_values(data: pd.DataFrame, value: Any) -> Any:
    """Prepare ``value`` for writing as one column of ``data``.

    Series are placed by position, not aligned on their index, so a
    replacement built with a fresh index lands row for row.
    """
    if isinstance(value, pd.DataFrame):
        if value.shape[1] != 1:
            raise TypeMismatchError(f"a column needs one-column data, got {value.shape[1]} columns")
        value = value.iloc[:, 0]
    if isinstance(value, pd.Series):
        check_count(len(data), len(value), "rows")
        return value.set_axis(data.index)
    if isinstance(value, (list, tuple)) or np.ndim(value) > 0:
        check_count(len(data), len(value), "rows")
    return value


def _frame_column(data: pd.DataFrame, key: Hashable) -> Hashable:
    if is_position(key):
        return data.columns[check_position(key, data.shape[1])]
    if key not in data.columns:
        raise MissingKeyError(f"column {key!r} not found")
    return key


# ---------------------------------------------------------------------------
# single elements


def get_item(data: Any, key: Hashable) -> Any:
    """Return the element of ``data`` at ``key``."""
    if isinstance(data, pd.DataFrame):
        return data[_frame_column(data, key)]
    if isinstance(data, pd.Series):
        if is_position(key):
            return data.iloc[check_position(key, len(data))]
        if key not in data.index:
            raise MissingKeyError(f"label {key!r} not found")
        return data.loc[key]
    if isinstance(data, np.ndarray):
        if data.ndim == 0 or not is_position(key):
            raise TypeMismatchError(f"cannot index {data.ndim}-d array with {key!r}")
        item = data[check_position(key, len(data))]
        return item.copy() if isinstance(item, np.ndarray) else item
    if is_namedtuple(data):
        if isinstance(key, str):
            if key not in data._fields:
                raise MissingKeyError(f"{_kind(data)} has no field {key!r}")
            return getattr(data, key)
        if is_position(key):
            return data[check_position(key, len(data))]
        raise TypeMismatchError(f"cannot index {_kind(data)} with {key!r}")
    if _is_dataclass_instance(data):
        if not isinstance(key, str):
            raise TypeMismatchError(f"dataclass {_kind(data)} fields are named, got {key!r}")
        if key not in {f.name for f in dataclasses.fields(data)}:
            raise MissingKeyError(f"{_kind(data)} has no field {key!r}")
        return getattr(data, key)
    if isinstance(data, Mapping):
        if key not in data:
            raise MissingKeyError(f"key {key!r} not found")
        return data[key]
    if isinstance(data, Sequence) and not _is_atomic(data):
        if not is_position(key):
            raise TypeMismatchError(f"{_kind(data)} positions must be ints, got {key!r}")
        return data[check_position(key, len(data))]
    raise TypeMismatchError(f"cannot index into {_kind(data)}")


def set_item(data: Any, key: Hashable, value: Any) -> Any:
    """Return a copy of ``data`` with the element at ``key`` replaced.

    New keys are appended to dicts, Series and DataFrames. Positions must
    already exist.
    """
    if isinstance(data, pd.DataFrame):
        out = data.copy()
        if is_position(key):
            out.isetitem(check_position(key, data.shape[1]), column_values(data, value))
        else:
            out[key] = column_values(data, value)
        return out
    if isinstance(data, pd.Series):
        if is_position(key):
            return replace_series_values(data, [check_position(key, len(data))], [value])
        if key in data.index:
            return replace_series_values(data, [data.index.get_loc(key)], [value])
        out = data.copy()
        out.loc[key] = value
        return out
    if isinstance(data, np.ndarray):
        if data.ndim == 0 or not is_position(key):
            raise TypeMismatchError(f"cannot index {data.ndim}-d array with {key!r}")
        pos = check_position(key, len(data))
        out = _with_dtype_for(data, value)
        out[pos] = value
        return out
    if is_namedtuple(data):
        if is_position(key):
            key = data._fields[check_position(key, len(data))]
        if key not in data._fields:
            raise MissingKeyError(f"{_kind(data)} has no field {key!r}")
        return data._replace(**{key: value})
    if _is_dataclass_instance(data):
        if key not in {f.name for f in dataclasses.fields(data)}:
            raise MissingKeyError(f"{_kind(data)} has no field {key!r}")
        return dataclasses.replace(data, **{key: value})
    if isinstance(data, Mapping):
        out = copy.copy(data) if isinstance(data, dict) else dict(data)
        out[key] = value
        return out
    if isinstance(data, (list, tuple)):
        if not is_position(key):
            raise TypeMismatchError(f"{_kind(data)} positions must be ints, got {key!r}")
        items = list(data)
        items[check_position(key, len(data))] = value
        return items if isinstance(data, list) else tuple(items)
    raise TypeMismatchError(f"cannot write into {_kind(data)}")


# ---------------------------------------------------------------------------
# attributes


def get_attr(data: Any, name: str) -> Any:
    if not hasattr(data, name):
        raise MissingKeyError(f"{_kind(data)} has no attribute {name!r}")
    return getattr(data, name)


def set_attr(data: Any, name: str, value: Any) -> Any:
    if _is_dataclass_instance(data) or is_namedtuple(data):
        return set_item(data, name, value)
    out = copy.copy(data)
    try:
        setattr(out, name, value)
    except AttributeError as exc:
        raise TypeMismatchError(f"cannot set attribute {name!r} on {_kind(data)}") from exc
    return out


# ---------------------------------------------------------------------------
# field names


def field_names(data: Any) -> List[Hashable]:
    """Return the field names of a keyed structure, in order."""
    if isinstance(data, pd.DataFrame):
        return list(data.columns)
    if isinstance(data, pd.Series):
        return list(data.index)
    if is_namedtuple(data):
        return list(data._fields)
    if _is_dataclass_instance(data):
        return [f.name for f in dataclasses.fields(data)]
    if isinstance(data, Mapping):
        return list(data.keys())
    raise TypeMismatchError(f"{_kind(data)} has no field names")


def rename_fields(data: Any, names: Sequence[Hashable]) -> Any:
    """Return a copy of ``data`` with its fields renamed positionally."""
    if is_namedtuple(data) or _is_dataclass_instance(data):
        raise TypeMismatchError(f"field names of {_kind(data)} are fixed")
    if _is_atomic(names) or not isinstance(names, (Sequence, pd.Index, np.ndarray)):
        raise TypeMismatchError(f"names must be a sequence, got {_kind(names)}")
    names = list(names)
    check_count(len(field_names(data)), len(names), "names")
    if isinstance(data, pd.DataFrame):
        return data.set_axis(names, axis=1)
    if isinstance(data, pd.Series):
        return data.set_axis(names)
    check_count(len(names), len(set(names)), "distinct names")
    return dict(zip(names, data.values()))


# ---------------------------------------------------------------------------
# traversal


def elements(data: Any) -> List[Any]:
    """Return the elements a traversal visits, in order."""
    if isinstance(data, pd.DataFrame):
        raise TypeMismatchError("cannot traverse a DataFrame elementwise; select a column first")
    if isinstance(data, pd.Series):
        return data.tolist()
    if isinstance(data, np.ndarray):
        if data.ndim == 0:
            raise TypeMismatchError("cannot traverse a 0-d array")
        return [item.copy() if isinstance(item, np.ndarray) else item for item in data]
    if isinstance(data, Mapping):
        return list(data.values())
    if isinstance(data, (list, tuple)):
        return list(data)
    raise TypeMismatchError(f"cannot traverse {_kind(data)}")


def rebuild(data: Any, values: Sequence[Any]) -> Any:
    """Return a container of the same kind as ``data`` holding ``values``.

    ``values`` must have one entry per element of ``data``.
    """
    if _is_atomic(values) or not isinstance(values, (Sequence, np.ndarray, pd.Series)):
        raise TypeMismatchError(f"replacement values must be a sequence, got {_kind(values)}")
    values = list(values)
    check_count(len(elements(data)), len(values))
    if isinstance(data, pd.Series):
        return replace_series_values(data, range(len(data)), values)
    if isinstance(data, np.ndarray):
        if not values:
            return data.copy()
        try:
            return np.array(values)
        except ValueError as exc:
            raise TypeMismatchError(f"replacement elements do not form an array: {exc}") from exc
    if isinstance(data, Mapping):
        out = copy.copy(data) if isinstance(data, dict) else dict(data)
        for key, value in zip(list(out.keys()), values):
            out[key] = value
        return out
    if is_namedtuple(data):
        return data._make(values)
    return values if isinstance(data, list) else tuple(values)


def map_elements(focus: Any, fn: Callable[[Any], Any]) -> Any:
    """Apply ``fn`` to each element of ``focus``, keeping its container kind."""
    return rebuild(focus, [fn(item) for item in elements(focus)])


# ---------------------------------------------------------------------------
# row subsets


def take_rows(data: Any, mask: np.ndarray) -> Any:
    """Return the rows/elements of ``data`` where ``mask`` is true, in order."""
    if isinstance(data, (pd.DataFrame, pd.Series)):
        return data.loc[mask]
    if isinstance(data, np.ndarray):
        return data[mask]
    if isinstance(data, Mapping):
        return {key: value for (key, value), keep in zip(data.items(), mask) if keep}
    if isinstance(data, (list, tuple)):
        kept = [item for item, keep in zip(data, mask) if keep]
        return kept if isinstance(data, list) else tuple(kept)
    raise TypeMismatchError(f"cannot take rows of {_kind(data)}")


def put_rows(data: Any, mask: np.ndarray, new: Any) -> Any:
    """Return a copy of ``data`` with the masked rows replaced by ``new``.

    The i-th true position of ``mask`` receives the i-th row of ``new``.
    ``new`` must hold exactly ``mask.sum()`` rows.
    """
    mask = np.asarray(mask, dtype=bool)
    positions = np.flatnonzero(mask)
    if isinstance(data, pd.DataFrame):
        return _put_frame_rows(data, mask, new)
    if isinstance(data, Mapping):
        selected = [k for k, keep in zip(data.keys(), mask) if keep]
        if not isinstance(new, Mapping):
            values = _row_values(new)
            check_count(len(selected), len(values))
            new = dict(zip(selected, values))
        missing = [k for k in selected if k not in new]
        if missing:
            raise MissingKeyError(f"replacement lacks keys {missing!r}")
        check_count(len(selected), len(new), "keys")
        out = copy.copy(data) if isinstance(data, dict) else dict(data)
        for key in selected:
            out[key] = new[key]
        return out
    values = _row_values(new)
    check_count(len(positions), len(values), "rows")
    if isinstance(data, pd.Series):
        return replace_series_values(data, positions, values)
    if isinstance(data, np.ndarray):
        if not len(positions):
            return data.copy()
        incoming = np.asarray(values)
        out = _with_dtype_for(data, incoming)
        out[mask] = incoming
        return out
    if isinstance(data, (list, tuple)):
        items = list(data)
        for pos, value in zip(positions, values):
            items[pos] = value
        return items if isinstance(data, list) else tuple(items)
    raise TypeMismatchError(f"cannot write rows of {_kind(data)}")


def _row_values(new: Any) -> List[Any]:
    if isinstance(new, pd.Series):
        return new.tolist()
    if isinstance(new, np.ndarray):
        return list(new) if new.ndim else [new.item()]
    if isinstance(new, (list, tuple)):
        return list(new)
    raise TypeMismatchError(f"replacement rows must be a sequence, got {_kind(new)}")


def _put_frame_rows(data: pd.DataFrame, mask: np.ndarray, new: Any) -> pd.DataFrame:
    if not isinstance(new, pd.DataFrame):
        try:
            new = pd.DataFrame(new)
        except (TypeError, ValueError) as exc:
            raise TypeMismatchError(f"replacement rows must be frame-like, got {_kind(new)}") from exc
    check_count(int(mask.sum()), len(new), "rows")
    missing = [c for c in data.columns if c not in new.columns]
    if missing:
        raise MissingKeyError(f"replacement rows lack columns {missing!r}")
    if not mask.any():
        return data.copy()
    extra = [c for c in new.columns if c not in data.columns]
    positions = np.arange(len(data))
    incoming = new.set_axis(positions[mask], axis=0)
    if mask.all():
        out = incoming
    else:
        kept = data.iloc[~mask].set_axis(positions[~mask], axis=0)
        out = pd.concat([kept, incoming]).sort_index(kind="stable")
    return out.reindex(columns=[*data.columns, *extra]).set_axis(data.index, axis=0)
