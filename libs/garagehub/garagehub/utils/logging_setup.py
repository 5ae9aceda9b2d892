"""Logging for the API process and the maintenance scripts."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from garagehub.config import LoggingSettings, Settings

_ROOT_LOGGER = "garagehub"
_CONFIGURED_ATTR = "_garagehub_configured"

# Server loggers that also get the file handler, so one file holds requests and app events.
_SERVER_LOGGERS = ("uvicorn.error", "uvicorn.access")


def log_file_path(settings: Settings) -> Path | None:
    """Resolve LOG_FILE against log_dir; None when file logging is disabled."""
    name = str(settings.logging.file or "").strip()
    if not name:
        return None
    path = Path(name)
    if not path.is_absolute():
        path = Path(settings.log_dir) / path
    return path


def _file_handler(path: Path, cfg: LoggingSettings) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(cfg.max_bytes),
        backupCount=int(cfg.backup_count),
        encoding="utf-8",
    )


def setup_logging(settings: Settings, *, force: bool = False) -> logging.Logger:
    """Configure the `garagehub` logger tree once per process.

    Console output goes to stderr. When LOG_FILE is set, a rotating file under
    log_dir receives the garagehub records plus uvicorn's error and access logs.
    Loggers listed in LOG_QUIET are capped at WARNING unless the level is DEBUG.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    if getattr(logger, _CONFIGURED_ATTR, False) and not force:
        return logger

    cfg = settings.logging
    level = logging.getLevelName(str(cfg.level or "INFO").upper())
    if not isinstance(level, int):
        level = logging.INFO
    formatter = logging.Formatter(fmt=str(cfg.format), datefmt=str(cfg.datefmt))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if cfg.console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    path = log_file_path(settings)
    if path is not None:
        fh = _file_handler(path, cfg)
        fh.setFormatter(formatter)
        logger.addHandler(fh)
        for name in _SERVER_LOGGERS:
            server_logger = logging.getLogger(name)
            server_logger.handlers = [
                h for h in server_logger.handlers if not isinstance(h, RotatingFileHandler)
            ]
            server_logger.addHandler(fh)

    if level > logging.DEBUG:
        for name in cfg.quiet:
            logging.getLogger(name).setLevel(logging.WARNING)

    logger.setLevel(level)
    logger.propagate = False
    setattr(logger, _CONFIGURED_ATTR, True)
    return logger
