"""Runtime loaders for vendor and expense-category rule overrides."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Any

from sitespend.domain.receipt import ExpenseCategory
from sitespend.runtime.paths import get_paths


def _load_toml(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict; missing files map to empty dict."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    if not path.exists():
        return {}

    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data if isinstance(data, dict) else {}


@lru_cache(maxsize=4)
def load_vendor_rules(config_path: str | None = None) -> tuple[tuple[str, str], ...]:
    """
    Load known vendor rules from vendor_rules.toml.

    Format:
        [[vendors]]
        pattern = "acme\\s*lumber"
        name = "Acme Lumber"

    Returns:
        Tuple of (pattern, name) pairs preserving file order; empty if the file is missing.

    Raises:
        ValueError: a pattern is not a valid regular expression
    """
    path = Path(config_path) if config_path is not None else get_paths().vendor_rules
    config = _load_toml(path)

    rules: list[tuple[str, str]] = []
    for rule in config.get("vendors", []):
        pattern = str(rule.get("pattern", "")).strip()
        name = str(rule.get("name", "")).strip()
        if not pattern or not name:
            continue
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ValueError(f"Invalid vendor pattern {pattern!r} in {path}: {exc}") from exc
        rules.append((pattern, name))
    return tuple(rules)


@lru_cache(maxsize=4)
def load_category_keywords(config_path: str | None = None) -> dict[ExpenseCategory, tuple[str, ...]]:
    """
    Load extra expense-category keywords from category_rules.toml.

    Format:
        [categories]
        MEALS = ["food truck", "catering"]
        LODGING = ["crew housing"]

    Returns:
        Mapping of category to keywords; empty if the file is missing.

    Raises:
        ValueError: a key is not a known expense category
    """
    path = Path(config_path) if config_path is not None else get_paths().category_rules
    config = _load_toml(path)

    keywords: dict[ExpenseCategory, tuple[str, ...]] = {}
    for raw_category, raw_keywords in config.get("categories", {}).items():
        try:
            category = ExpenseCategory(str(raw_category).upper())
        except ValueError as exc:
            raise ValueError(f"Unknown expense category {raw_category!r} in {path}") from exc
        if isinstance(raw_keywords, str):
            raw_keywords = [raw_keywords]
        values = tuple(str(k).strip() for k in raw_keywords if str(k).strip())
        if values:
            keywords[category] = values
    return keywords
