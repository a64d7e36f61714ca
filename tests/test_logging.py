import logging

from sitespend.runtime import get_logger, set_log_level
from sitespend.runtime.logging import LOG_NAMESPACE


def test_get_logger_uses_package_namespace() -> None:
    assert get_logger("sitespend.receipt.classifier").name == "sitespend.receipt.classifier"
    assert get_logger("scripts.backfill").name == "sitespend.scripts.backfill"
    assert get_logger(LOG_NAMESPACE).name == LOG_NAMESPACE


def test_set_log_level_changes_namespace_level() -> None:
    namespace_logger = logging.getLogger(LOG_NAMESPACE)
    previous = namespace_logger.level
    try:
        set_log_level(logging.DEBUG)
        assert namespace_logger.level == logging.DEBUG
        assert get_logger("sitespend.receipt").isEnabledFor(logging.DEBUG)
    finally:
        set_log_level(previous)
