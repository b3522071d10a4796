"""Конфигурация логирования ядра базы клиентов."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from config import Settings, get_settings

LOG_FILE_NAME = "crm.log"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s │ %(message)s"


class PeeweeFilter(logging.Filter):
    """Фильтрует служебные SELECT- и PRAGMA-запросы peewee."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401 - short doc
        """True, если SQL-запрос не начинается с ``SELECT`` или ``PRAGMA``."""
        if hasattr(record, "sql"):
            msg = record.sql
        else:
            msg = record.getMessage()
        head = str(msg).lstrip().upper()
        return not head.startswith(("SELECT", "PRAGMA"))


def setup_logging(settings: Settings | None = None) -> Path:
    """Настраивает вывод логов в консоль и файл ``crm.log``.

    Returns:
        Path: путь к файлу лога.
    """
    settings = settings or get_settings()
    logs_dir = Path(settings.log_dir).expanduser()
    logs_dir.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, settings.log_level, logging.INFO)
    if settings.detailed_logging:
        level = logging.DEBUG

    fmt = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    log_path = logs_dir / LOG_FILE_NAME
    file_h = RotatingFileHandler(
        log_path,
        maxBytes=2_000_000,  # 2 MB
        backupCount=3,
        encoding="utf-8",
    )
    file_h.setFormatter(fmt)
    file_h.setLevel(level)

    console_h = logging.StreamHandler()
    console_h.setFormatter(fmt)
    console_h.setLevel(level)

    logging.basicConfig(level=level, handlers=[file_h, console_h], force=True)

    # Скрываем SELECT/PRAGMA-запросы от peewee
    peewee_logger = logging.getLogger("peewee")
    if not settings.detailed_logging and not any(
        isinstance(f, PeeweeFilter) for f in peewee_logger.filters
    ):
        peewee_logger.addFilter(PeeweeFilter())
    return log_path
