import numpy as np
import pandas as pd
import pytest

from framelens.errors import MissingKeyError, TypeMismatchError
from framelens.tabular import (
    contains,
    ends_with,
    filter_rows,
    matches,
    name_range,
    row_mask,
    select_fields,
    starts_with,
    subset_fields,
)


def make_frame():
    return pd.DataFrame(
        {
            "id": [1, 2, 3],
            "x_min": [0.0, 1.0, 2.0],
            "x_max": [5.0, 6.0, 7.0],
            "label": ["a", "b", "c"],
        }
    )


def test_select_fields_by_pattern():
    df = make_frame()
    assert select_fields(df, [matches(r"^x_")]) == ["x_min", "x_max"]
    assert select_fields(df, [ends_with("max")]) == ["x_max"]
    assert select_fields(df, [contains("_m")]) == ["x_min", "x_max"]
    assert select_fields(df, [starts_with("la")]) == ["label"]


def test_select_fields_union_in_structure_order():
    df = make_frame()
    assert select_fields(df, ["label", starts_with("id")]) == ["id", "label"]


def test_select_fields_range_either_direction():
    df = make_frame()
    assert select_fields(df, ["x_min:label"]) == ["x_min", "x_max", "label"]
    assert select_fields(df, [name_range("label", "x_min")]) == ["x_min", "x_max", "label"]


def test_select_fields_name_with_colon_is_a_name():
    record = {"a:b": 1, "a": 2, "b": 3}
    assert select_fields(record, ["a:b"]) == ["a:b"]


def test_select_fields_missing():
    with pytest.raises(MissingKeyError):
        select_fields(make_frame(), ["nope"])
    with pytest.raises(MissingKeyError):
        select_fields(make_frame(), ["id:nope"])


def test_subset_fields_kinds():
    assert subset_fields({"a": 1, "b": 2}, ["b"]) == {"b": 2}
    assert subset_fields(pd.Series({"a": 1, "b": 2}), ["a"]).to_dict() == {"a": 1}
    assert list(subset_fields(make_frame(), ["id"]).columns) == ["id"]
    with pytest.raises(TypeMismatchError):
        subset_fields([1, 2], [0])


def test_row_mask_callable_and_expression():
    df = make_frame()
    assert row_mask(df, lambda d: d.x_min > 0.5).tolist() == [False, True, True]
    assert row_mask(df, "x_max < 6").tolist() == [True, False, False]


def test_row_mask_per_element_for_lists():
    assert row_mask([1, 5, 2], lambda x: x > 1).tolist() == [False, True, True]


def test_row_mask_rejects_bad_predicates():
    df = make_frame()
    with pytest.raises(TypeMismatchError):
        row_mask(df, lambda d: d.id)
    with pytest.raises(TypeMismatchError):
        row_mask(df, lambda d: np.array([True]))
    with pytest.raises(TypeMismatchError):
        row_mask([1, 2], "x > 1")
    with pytest.raises(TypeMismatchError):
        row_mask(5, lambda x: True)


def test_row_mask_nullable_booleans_count_as_false():
    df = pd.DataFrame({"ok": pd.array([True, None, False], dtype="boolean")})
    assert row_mask(df, lambda d: d.ok).tolist() == [True, False, False]


def test_filter_rows_preserves_order():
    df = make_frame()
    out = filter_rows(df, lambda d: d.id != 2)
    assert out["label"].tolist() == ["a", "c"]
    assert filter_rows((3, 1, 2), lambda x: x != 1) == (3, 2)
