"""Shared pytest fixtures for sitespend tests."""

from __future__ import annotations

import pytest

from sitespend.runtime import load_category_keywords, load_vendor_rules, reset_paths


@pytest.fixture(autouse=True)
def isolated_project_root(tmp_path, monkeypatch):
    """Point runtime paths at an empty project root and drop cached rules."""
    monkeypatch.setenv("SITESPEND_ROOT", str(tmp_path))
    reset_paths()
    load_vendor_rules.cache_clear()
    load_category_keywords.cache_clear()
    yield tmp_path
    reset_paths()
    load_vendor_rules.cache_clear()
    load_category_keywords.cache_clear()
