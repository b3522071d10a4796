"""Инициализация хранилища и привязка peewee-Proxy :data:`db`.

Вызывайте :func:`init_storage` в начале entry-point'а.
"""

from __future__ import annotations

import logging

from config import Settings, get_settings

from .db import db
from .storage import StorageEngine

logger = logging.getLogger(__name__)

_storage: StorageEngine | None = None


def init_storage(settings: Settings | None = None) -> StorageEngine:
    """Открывает базу из настроек и привязывает к ней :data:`db`.

    Повторный вызов безопасен и возвращает уже открытое хранилище.
    """
    global _storage
    if _storage is not None:
        return _storage

    settings = settings or get_settings()
    settings.ensure_dirs()
    storage = StorageEngine.open(settings.database_path, settings.seed_script_path)
    db.initialize(storage.database)
    _storage = storage
    return storage


def get_storage() -> StorageEngine:
    if _storage is None:
        raise RuntimeError("Хранилище не инициализировано: вызовите init_storage()")
    return _storage


def close_storage() -> None:
    """Сохраняет последний снимок и отвязывает :data:`db`."""
    global _storage
    if _storage is None:
        return
    try:
        _storage.close()
    finally:
        _storage = None
        db.initialize(None)
