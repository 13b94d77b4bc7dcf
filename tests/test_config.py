from dataclasses import dataclass
from pathlib import Path

import pandas as pd
import pytest

from framelens.config import (
    load_and_resolve_lens_config,
    load_yaml_config,
    resolve_lens_config,
    resolve_lens_spec,
)
from framelens.core import set_, view

CONFIG_DIR = Path(__file__).resolve().parents[1] / "configs" / "lenses"


@dataclass(frozen=True)
class Box:
    item: dict


def test_path_spec_and_list_shorthand():
    data = {"outer": {"inner": 5}}
    for spec in ({"path": ["outer", "inner"]}, ["outer", "inner"]):
        inner = resolve_lens_spec(spec)
        assert view(data, inner) == 5
        assert set_(data, inner, 9) == {"outer": {"inner": 9}}


def test_steps_compose_in_fixed_order():
    lens = resolve_lens_spec({"attr": ["item"], "path": [0]})
    # path runs before attr
    assert view([Box({"a": 1})], lens) == {"a": 1}


def test_select_prefixes():
    record = {"a": 1, "b": 2, "c1": 3, "c2": 4, "z_end": 5}
    assert view(record, resolve_lens_spec({"select": ["a", "re:^c"]})) == {"a": 1, "c1": 3, "c2": 4}
    assert view(record, resolve_lens_spec({"select": "suffix:_end"})) == {"z_end": 5}
    assert view(record, resolve_lens_spec({"select": "a:b"})) == {"a": 1, "b": 2}


def test_map_and_names_steps():
    data = [{"x": 1}, {"x": 2}]
    assert view(data, resolve_lens_spec({"map": {"path": ["x"]}})) == [1, 2]
    assert view({"p": 1}, resolve_lens_spec({"names": True})) == ["p"]


def test_list_of_steps_composes_in_order():
    df = pd.DataFrame({"name": ["a", "b"], "age": [20, 40]})
    lens = resolve_lens_spec([{"filter": "age > 30"}, {"path": ["name"]}])
    assert view(df, lens).tolist() == ["b"]


def test_invalid_specs_raise():
    bad_specs = [
        {},
        {"bogus": 1},
        {"path": []},
        {"path": [1.5]},
        {"attr": [1]},
        {"filter": ""},
        {"names": False},
        {"select": []},
        {"select": [{"a": 1}]},
        "just a string",
    ]
    for spec in bad_specs:
        with pytest.raises(ValueError):
            resolve_lens_spec(spec)


def test_resolve_lens_config_validates_schema():
    with pytest.raises(ValueError):
        resolve_lens_config({"schema_version": 1, "lenses": {"a": ["a"]}})
    with pytest.raises(ValueError):
        resolve_lens_config({"lenses": {}})
    with pytest.raises(ValueError):
        resolve_lens_config({"lenses": {"bad": {"unknown": 1}}})


def test_error_message_names_config_path():
    with pytest.raises(ValueError, match=r"lenses\.inner\.map\.path"):
        resolve_lens_config({"lenses": {"inner": {"map": {"path": []}}}})


def test_load_yaml_config(tmp_path):
    path = tmp_path / "lenses.yaml"
    path.write_text("schema_version: 0\nlenses:\n  first: [0]\n")
    lenses = load_and_resolve_lens_config(path)
    assert view([7, 8], lenses["first"]) == 7


def test_load_yaml_config_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml_config(tmp_path / "missing.yaml")
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        load_yaml_config(path)


def test_shipped_smoke_config():
    lenses = load_and_resolve_lens_config(CONFIG_DIR / "smoke.yaml")
    people = pd.read_csv(CONFIG_DIR / "people.csv")
    assert view(people, lenses["adult_names"]).tolist() == ["bob", "dee"]
    assert list(view(people, lenses["scores"]).columns) == ["score_math", "score_art"]
    assert view(people, lenses["columns"]) == ["name", "age", "score_math", "score_art"]
    older = set_(people, lenses["ages"], people["age"] + 1)
    assert older["age"].tolist() == [26, 42, 20, 34]
