from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from commandhub.config.settings import LoggingConfig

_HANDLER_MARK = "_commandhub_handler"


def configure_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Configure the `commandhub` logger: console always, rotating file when
    `config.file` is set. Safe to call more than once; previous handlers
    installed here are replaced.
    """
    config = config or LoggingConfig()
    level = logging.getLevelName(str(config.level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger("commandhub")
    root.setLevel(level)
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(config.format)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    setattr(console, _HANDLER_MARK, True)
    root.addHandler(console)

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=config.max_size,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_MARK, True)
        root.addHandler(file_handler)

    return root
