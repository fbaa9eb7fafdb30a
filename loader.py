"""Loader utilities for tax-year parameter YAML files."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).resolve().parent
YEAR_PARAM_DIR = PACKAGE_ROOT / "year_params"


def _load_yaml_file(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


@lru_cache(maxsize=1)
def load_year_parameters(param_dir: Path | str | None = None) -> Dict[int, Dict[str, Any]]:
    """Load per-year parameter YAML files keyed by tax year."""
    directory = Path(param_dir) if param_dir else YEAR_PARAM_DIR
    if not directory.exists():
        raise FileNotFoundError(f"Year parameter directory not found: {directory}")

    params: Dict[int, Dict[str, Any]] = {}
    for path in sorted(directory.glob("*.yaml")):
        try:
            year = int(path.stem)
        except ValueError as exc:
            raise ValueError(f"Invalid year param filename: {path.name}") from exc
        data = _load_yaml_file(path)
        # Support either a flat mapping or a nested mapping keyed by the year.
        if isinstance(data, dict) and set(data.keys()) in ({year}, {str(year)}):
            data = next(iter(data.values()))
        if not isinstance(data, dict):
            raise ValueError(f"Year parameter file must map to a dict of values: {path}")
        params[year] = data
    if not params:
        raise ValueError(f"No year parameter files found in {directory}")
    return params


def get_year_params(year: int) -> Dict[str, Any]:
    params = load_year_parameters()
    if year not in params:
        raise KeyError(f"No tax parameters configured for {year}")
    return dict(params[year])


def resolve_year(year: int, param_dir: Path | str | None = None) -> int:
    """Return the configured tax year to use for ``year``.

    Falls back to the latest configured year not after ``year``, or the earliest
    configured year when ``year`` predates them all.
    """
    configured = sorted(load_year_parameters(param_dir))
    if year in configured:
        return year
    earlier = [candidate for candidate in configured if candidate <= year]
    fallback = earlier[-1] if earlier else configured[0]
    logger.warning("No tax parameters configured for %s; using %s", year, fallback)
    return fallback


def reload_caches() -> None:
    """Clear cached loaders (useful for tests)."""
    load_year_parameters.cache_clear()
