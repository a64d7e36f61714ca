from __future__ import annotations

import pytest

from sitespend.domain.receipt import ExpenseCategory
from sitespend.runtime import get_paths, load_category_keywords, load_vendor_rules


def test_load_vendor_rules_from_toml(tmp_path) -> None:
    rules_path = tmp_path / "vendor_rules.toml"
    rules_path.write_text(
        """
[[vendors]]
pattern = "acme\\\\s*lumber"
name = "Acme Lumber"

[[vendors]]
pattern = "ferguson"
name = "Ferguson Plumbing"

[[vendors]]
pattern = ""
name = "Ignored"
"""
    )

    load_vendor_rules.cache_clear()
    rules = load_vendor_rules(str(rules_path))

    assert rules == (
        (r"acme\s*lumber", "Acme Lumber"),
        ("ferguson", "Ferguson Plumbing"),
    )


def test_load_vendor_rules_missing_file_is_empty(tmp_path) -> None:
    load_vendor_rules.cache_clear()

    assert load_vendor_rules(str(tmp_path / "does_not_exist.toml")) == ()


def test_load_vendor_rules_default_path(isolated_project_root) -> None:
    config_dir = isolated_project_root / "config"
    config_dir.mkdir()
    (config_dir / "vendor_rules.toml").write_text('[[vendors]]\npattern = "ferguson"\nname = "Ferguson"\n')

    assert get_paths().vendor_rules == config_dir.resolve() / "vendor_rules.toml"
    assert load_vendor_rules() == (("ferguson", "Ferguson"),)


def test_load_vendor_rules_rejects_bad_pattern(tmp_path) -> None:
    rules_path = tmp_path / "vendor_rules.toml"
    rules_path.write_text('[[vendors]]\npattern = "acme("\nname = "Acme"\n')

    load_vendor_rules.cache_clear()
    with pytest.raises(ValueError, match="Invalid vendor pattern"):
        load_vendor_rules(str(rules_path))


def test_load_category_keywords_from_toml(tmp_path) -> None:
    rules_path = tmp_path / "category_rules.toml"
    rules_path.write_text(
        """
[categories]
meals = ["food truck", "catering"]
LODGING = "crew housing"
TRAVEL = []
"""
    )

    load_category_keywords.cache_clear()
    keywords = load_category_keywords(str(rules_path))

    assert keywords == {
        ExpenseCategory.MEALS: ("food truck", "catering"),
        ExpenseCategory.LODGING: ("crew housing",),
    }


def test_load_category_keywords_rejects_unknown_category(tmp_path) -> None:
    rules_path = tmp_path / "category_rules.toml"
    rules_path.write_text('[categories]\nFUEL = ["diesel"]\n')

    load_category_keywords.cache_clear()
    with pytest.raises(ValueError, match="Unknown expense category"):
        load_category_keywords(str(rules_path))


def test_load_category_keywords_missing_file_is_empty(tmp_path) -> None:
    load_category_keywords.cache_clear()

    assert load_category_keywords(str(tmp_path / "does_not_exist.toml")) == {}
