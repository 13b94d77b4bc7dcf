"""Composable lenses over Python, numpy and pandas data."""

from .core import BaseLens, IllegalLens, Lens, compose, id_l, illegal_lens, lens, over, over_map, set_, view
from .errors import (
    CardinalityMismatchError,
    LensError,
    MissingKeyError,
    OutOfRangeError,
    TypeMismatchError,
)
from .illegal import cond_il, take_while_il
from .indexing import attr_l, index, index_l, indexes_l, names_l
from .selection import filter_l, rows_l, select_l
from .tabular import contains, ends_with, matches, name_range, starts_with
from .traversal import c_l, map_l

set = set_

__all__ = [
    "BaseLens",
    "IllegalLens",
    "Lens",
    "compose",
    "id_l",
    "illegal_lens",
    "lens",
    "over",
    "over_map",
    "set_",
    "view",
    "CardinalityMismatchError",
    "LensError",
    "MissingKeyError",
    "OutOfRangeError",
    "TypeMismatchError",
    "cond_il",
    "take_while_il",
    "attr_l",
    "index",
    "index_l",
    "indexes_l",
    "names_l",
    "filter_l",
    "rows_l",
    "select_l",
    "contains",
    "ends_with",
    "matches",
    "name_range",
    "starts_with",
    "c_l",
    "map_l",
]
