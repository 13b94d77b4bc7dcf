"""Declarative lens definitions loaded from YAML (schema v0).

Example::

    schema_version: 0
    lenses:
      inner_value: {path: [outer, inner]}
      young: {filter: "age < 30"}
      scores: {select: [math, "re:^art"]}
      xs: {map: {path: [x]}}

Steps inside one mapping are composed in the order
path, attr, select, filter, names, map. A list of mappings composes its
entries in list order, and any other list is shorthand for ``{path: [...]}``::

      young_names: [{filter: "age < 30"}, {path: [name]}]
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

from framelens.core import BaseLens, compose
from framelens.indexing import attr_l, index_l, names_l
from framelens.selection import filter_l, select_l
from framelens.tabular import contains, ends_with, matches, starts_with
from framelens.traversal import map_l

logger = logging.getLogger(__name__)

STEP_ORDER = ("path", "attr", "select", "filter", "names", "map")
SELECT_PREFIXES = {
    "re:": matches,
    "prefix:": starts_with,
    "suffix:": ends_with,
    "contains:": contains,
}


def load_yaml_config(path: Path) -> Dict[str, Any]:
    """Load YAML config and return dict."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    data = yaml.safe_load(path.read_text())
    if not isinstance(data, dict):
        raise ValueError("Config YAML must parse to a dict.")
    return data


def _require_list(spec: Dict[str, Any], key: str, where: str) -> List[Any]:
    val = spec[key]
    if not isinstance(val, list) or not val:
        raise ValueError(f"{where}.{key} must be a non-empty list.")
    return val


def _select_item(item: Any, where: str) -> Any:
    if not isinstance(item, (str, int)):
        raise ValueError(f"{where}.select entries must be strings or ints.")
    if isinstance(item, str):
        for prefix, selector in SELECT_PREFIXES.items():
            if item.startswith(prefix):
                return selector(item[len(prefix):])
    return item


def resolve_lens_spec(spec: Any, *, where: str = "lens") -> BaseLens:
    """Build a lens from one declarative spec."""
    if isinstance(spec, list) and spec and all(isinstance(step, dict) for step in spec):
        return compose(
            *[resolve_lens_spec(step, where=f"{where}[{i}]") for i, step in enumerate(spec)]
        )
    if isinstance(spec, list):
        spec = {"path": spec}
    if not isinstance(spec, dict) or not spec:
        raise ValueError(f"{where} must be a non-empty mapping or list.")
    unknown = sorted(set(spec) - set(STEP_ORDER))
    if unknown:
        raise ValueError(f"{where} has unknown steps {unknown}; expected any of {list(STEP_ORDER)}.")

    parts: List[BaseLens] = []
    if "path" in spec:
        for key in _require_list(spec, "path", where):
            if not isinstance(key, (str, int)) or isinstance(key, bool):
                raise ValueError(f"{where}.path entries must be strings or ints.")
            parts.append(index_l(key))
    if "attr" in spec:
        for attr in _require_list(spec, "attr", where):
            if not isinstance(attr, str):
                raise ValueError(f"{where}.attr entries must be strings.")
            parts.append(attr_l(attr))
    if "select" in spec:
        items = spec["select"]
        if not isinstance(items, list):
            items = [items]
        if not items:
            raise ValueError(f"{where}.select must not be empty.")
        parts.append(select_l(*[_select_item(item, where) for item in items]))
    if "filter" in spec:
        expr = spec["filter"]
        if not isinstance(expr, str) or not expr.strip():
            raise ValueError(f"{where}.filter must be a non-empty expression string.")
        parts.append(filter_l(expr))
    if "names" in spec:
        if spec["names"] is not True:
            raise ValueError(f"{where}.names must be true when given.")
        parts.append(names_l)
    if "map" in spec:
        parts.append(map_l(resolve_lens_spec(spec["map"], where=f"{where}.map")))
    return compose(*parts)


def resolve_lens_config(cfg: Dict[str, Any]) -> Dict[str, BaseLens]:
    """Validate a config dict and build its named lenses."""
    schema_version = cfg.get("schema_version", 0)
    if not isinstance(schema_version, int) or schema_version != 0:
        raise ValueError("schema_version must be 0.")
    lenses = cfg.get("lenses")
    if not isinstance(lenses, dict) or not lenses:
        raise ValueError("lenses must be a non-empty mapping.")

    resolved: Dict[str, BaseLens] = {}
    for name, spec in lenses.items():
        if not isinstance(name, str):
            raise ValueError("lens names must be strings.")
        resolved[name] = resolve_lens_spec(spec, where=f"lenses.{name}")
    logger.debug("Resolved %d lenses: %s", len(resolved), ", ".join(resolved))
    return resolved


def load_and_resolve_lens_config(path: Path) -> Dict[str, BaseLens]:
    """Load YAML and resolve lens config."""
    cfg = load_yaml_config(path)
    return resolve_lens_config(cfg)
