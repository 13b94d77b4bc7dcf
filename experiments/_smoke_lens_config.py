#!/usr/bin/env python3
"""Smoke test for the YAML lens config: view every lens on a CSV table."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pandas as pd

from framelens.config import load_and_resolve_lens_config
from framelens.core import view


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", default="configs/lenses/smoke.yaml")
    parser.add_argument("--csv", default="configs/lenses/people.csv")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    lenses = load_and_resolve_lens_config(Path(args.config))
    table = pd.read_csv(Path(args.csv))

    for name, lens in lenses.items():
        print(f"== {name}: {lens.name}")
        print(view(table, lens))


if __name__ == "__main__":
    main()
