"""
Logging de Mis Canchas.

Cada componente escribe a consola y a ``$LOG_DIR/mis_canchas.log``
(rotado a 5 MB con 3 respaldos). Con ENV=prod el nivel baja a WARNING y
el formato omite el nombre del componente; LOG_LEVEL fuerza un nivel.
"""
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILENAME = "mis_canchas.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

LOG_FORMATS = {
    "dev": "%(asctime)s [%(levelname)s] [%(name)s] - %(message)s",
    # Sin nombre de componente en producción
    "prod": "%(asctime)s [%(levelname)s] - %(message)s",
}
DEFAULT_LEVELS = {"dev": logging.INFO, "prod": logging.WARNING}


def get_environment() -> str:
    """'prod' para ENV=prod/production; cualquier otro valor es 'dev'."""
    env = (os.getenv("ENV") or "dev").strip().lower()
    return "prod" if env in {"prod", "production"} else "dev"


def is_production() -> bool:
    return get_environment() == "prod"


def log_file_path() -> Path:
    return Path(os.getenv("LOG_DIR") or "logs") / LOG_FILENAME


def resolve_level(env: str) -> int:
    override = (os.getenv("LOG_LEVEL") or "").strip().upper()
    if override:
        level = logging.getLevelName(override)
        if isinstance(level, int):
            return level
    return DEFAULT_LEVELS[env]


def _build_handlers(formatter: logging.Formatter) -> list[logging.Handler]:
    path = log_file_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    handlers: list[logging.Handler] = [
        logging.StreamHandler(),
        RotatingFileHandler(
            path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        ),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def get_logger(name: str) -> logging.Logger:
    """Logger del componente ``name``, configurado una sola vez."""
    logger = logging.getLogger(name)
    if getattr(logger, "_configured", False):
        return logger

    env = get_environment()
    for handler in _build_handlers(logging.Formatter(LOG_FORMATS[env])):
        logger.addHandler(handler)
    logger.setLevel(resolve_level(env))
    logger.propagate = False
    logger._configured = True
    return logger
