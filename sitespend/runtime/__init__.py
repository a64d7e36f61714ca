"""Runtime infrastructure for the sitespend project.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Rule overrides via load_vendor_rules(), load_category_keywords()

Usage:
    from sitespend.runtime import get_logger, get_paths

    logger = get_logger(__name__)
    paths = get_paths()
    print(paths.root, paths.vendor_rules)
"""

from sitespend.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from sitespend.runtime.paths import (
    ProjectPaths,
    get_paths,
    reset_paths,
)
from sitespend.runtime.vendor_rules import load_category_keywords, load_vendor_rules

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Rules
    "load_vendor_rules",
    "load_category_keywords",
    # Paths
    "get_paths",
    "reset_paths",
    "ProjectPaths",
]
