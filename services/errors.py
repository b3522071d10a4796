"""Общая ошибка прикладных сервисов."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from database.storage import StorageQueryError

logger = logging.getLogger(__name__)


class ServiceError(RuntimeError):
    """Сбой хранилища или файловой системы во время операции сервиса."""

    def __init__(self, action: str, cause: BaseException):
        super().__init__(f"Не удалось {action}: {cause}")
        self.action = action
        self.cause = cause


@contextmanager
def service_operation(action: str) -> Iterator[None]:
    """Залогировать и обернуть ошибки базы и файлов в :class:`ServiceError`.

    Ошибки валидации и поиска пробрасываются без изменений.
    """
    try:
        yield
    except (StorageQueryError, OSError) as exc:
        logger.error("❌ Не удалось %s: %s", action, exc)
        raise ServiceError(action, exc) from exc
