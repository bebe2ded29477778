import logging
import logging.handlers

from commandhub.config import LoggingConfig
from commandhub.infrastructure.logging import configure_logging


def _own_handlers(logger):
    return [h for h in logger.handlers if getattr(h, "_commandhub_handler", False)]


def test_configure_logging_is_idempotent():
    logger = configure_logging(LoggingConfig(level="DEBUG"))
    configure_logging(LoggingConfig(level="DEBUG"))
    try:
        assert logger.name == "commandhub"
        assert logger.level == logging.DEBUG
        assert len(_own_handlers(logger)) == 1
    finally:
        for handler in _own_handlers(logger):
            logger.removeHandler(handler)


def test_configure_logging_adds_rotating_file(tmp_path):
    log_file = tmp_path / "logs" / "commandhub.log"
    logger = configure_logging(LoggingConfig(file=str(log_file), max_size=1024, backup_count=2))
    try:
        handlers = _own_handlers(logger)
        rotating = [h for h in handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(rotating) == 1
        assert rotating[0].maxBytes == 1024
        assert rotating[0].backupCount == 2

        logging.getLogger("commandhub.test").warning("hello file")
        rotating[0].flush()
        assert "hello file" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in _own_handlers(logger):
            logger.removeHandler(handler)
            handler.close()


def test_unknown_level_falls_back_to_info():
    logger = configure_logging(LoggingConfig(level="chatty"))
    try:
        assert logger.level == logging.INFO
    finally:
        for handler in _own_handlers(logger):
            logger.removeHandler(handler)
