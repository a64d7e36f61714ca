"""Centralized path management for the sitespend project.

This module provides a single source of truth for all project paths,
eliminating scattered path definitions across modules.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

ROOT_ENV_VAR = "SITESPEND_ROOT"


def _get_project_root() -> Path:
    """Determine the project root directory."""
    env_root = os.environ.get(ROOT_ENV_VAR)
    if env_root:
        return Path(env_root).expanduser()
    return Path.cwd()


@dataclass
class ProjectPaths:
    """Container for all project-related paths.

    All paths are computed relative to the project root, ensuring consistency
    across all modules regardless of the current working directory.
    """

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        # Ensure root is resolved to absolute path
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def vendor_rules(self) -> Path:
        """Project-level known vendor rules TOML file."""
        return self.config / "vendor_rules.toml"

    @property
    def category_rules(self) -> Path:
        """Project-level expense category keyword TOML file."""
        return self.config / "category_rules.toml"

    # --- Receipt paths ---
    @property
    def receipts_ocr_json(self) -> Path:
        """Cached OCR results (JSON)."""
        return self.root / "receipts" / "ocr_json"


# Module-level singleton
_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance.

    Returns:
        The global ProjectPaths instance.
    """
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Forget the cached ProjectPaths so the next call re-reads the environment."""
    global _paths
    _paths = None
