"""Сервисный модуль для управления клиентами.

Набор колонок ``Client`` меняется во время работы, поэтому каждая операция
фильтрует присланные поля по актуальной схеме из :class:`SchemaCache`.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from database.models import Note
from database.storage import ColumnInfo, StorageEngine, quote_identifier
from services.attachment_store import AttachmentStore
from services.errors import service_operation
from services.schema_cache import SchemaCache
from services.schema_registry import CLIENT_TABLE, NAME_FIELDS
from services.validators import normalize_date_value

from .dto import ClientDetailsDTO, ClientSummaryDTO

logger = logging.getLogger(__name__)

_TABLE = quote_identifier(CLIENT_TABLE)


class NoValidFields(ValueError):
    """Среди присланных полей нет ни одной колонки ``Client``."""

    def __init__(self, keys: Any = ()):
        keys = list(keys)
        suffix = f": {', '.join(map(str, keys))}" if keys else ""
        super().__init__(f"Нет допустимых полей клиента{suffix}")
        self.keys = keys


class ProtectedFieldError(ValueError):
    """Имя или фамилия клиента не заданы."""

    def __init__(self, field_name: str):
        super().__init__(f"Поле '{field_name}' обязательно для клиента")
        self.field_name = field_name


class ClientNotFoundError(LookupError):
    """Ошибка отсутствия клиента по запрошенному идентификатору."""


# ──────────────────────────── Запросы ─────────────────────────────


def select_client_rows(storage: StorageEngine, pk_name: str) -> list[dict[str, Any]]:
    pk = quote_identifier(pk_name)
    return storage.query(
        f'SELECT * FROM {_TABLE} ORDER BY "lastName", "firstName", {pk}'
    )


def select_client_summaries(
    storage: StorageEngine, pk_name: str
) -> list[ClientSummaryDTO]:
    """Все клиенты ``{id, firstName, lastName}`` по фамилии, затем имени."""
    pk = quote_identifier(pk_name)
    rows = storage.query(
        f'SELECT {pk}, "firstName", "lastName" FROM {_TABLE} '
        f'ORDER BY "lastName", "firstName", {pk}'
    )
    return [ClientSummaryDTO.from_row(row, pk_name) for row in rows]


# ──────────────────────────── Сервис ─────────────────────────────


class ClientService:
    def __init__(
        self,
        storage: StorageEngine,
        schema: SchemaCache,
        attachments: AttachmentStore,
    ) -> None:
        self.storage = storage
        self.schema = schema
        self.attachments = attachments

    def _clean_data(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Оставить только живые колонки без идентификатора и привести даты."""
        columns = set(self.schema.column_names())
        pk_name = self.schema.primary_key_name()
        clean = {
            key: value
            for key, value in (data or {}).items()
            if key in columns and key != pk_name
        }
        if not clean:
            raise NoValidFields(data.keys() if data else ())

        date_names = self.schema.date_names()
        for key in clean.keys() & date_names:
            clean[key] = normalize_date_value(clean[key])
        return clean

    # ──────────────────────────── Получение ─────────────────────────────

    def list_clients(self) -> list[ClientSummaryDTO]:
        return select_client_summaries(self.storage, self.schema.primary_key_name())

    def get_client(self, client_id: int) -> ClientDetailsDTO | None:
        pk_name = self.schema.primary_key_name()
        rows = self.storage.query(
            f"SELECT * FROM {_TABLE} WHERE {quote_identifier(pk_name)} = ?",
            (client_id,),
        )
        if not rows:
            return None
        return ClientDetailsDTO(id=rows[0][pk_name], fields=rows[0])

    def get_client_schema(self) -> list[ColumnInfo]:
        return self.schema.columns()

    # ──────────────────────────── Добавление ─────────────────────────────

    def add_client(self, data: Mapping[str, Any]) -> int:
        """Создать клиента и вернуть его идентификатор."""
        clean = self._clean_data(data)
        for name in NAME_FIELDS:
            if not str(clean.get(name) or "").strip():
                logger.warning("❌ Попытка создать клиента без поля %s", name)
                raise ProtectedFieldError(name)

        columns = ", ".join(quote_identifier(key) for key in clean)
        placeholders = ", ".join("?" for _ in clean)
        with service_operation("добавить клиента"):
            self.storage.execute(
                f"INSERT INTO {_TABLE} ({columns}) VALUES ({placeholders})",
                list(clean.values()),
            )
            client_id = self.storage.last_inserted_id()

        logger.info(
            "✅ Клиент id=%s: %s %s создан",
            client_id,
            clean.get("firstName"),
            clean.get("lastName"),
        )
        return client_id

    # ──────────────────────────── Обновление ─────────────────────────────

    def update_client(self, client_id: int, data: Mapping[str, Any]) -> None:
        clean = self._clean_data(data)
        for name in NAME_FIELDS:
            if name in clean and not str(clean[name] or "").strip():
                raise ProtectedFieldError(name)

        pk = quote_identifier(self.schema.primary_key_name())
        assignments = ", ".join(f"{quote_identifier(key)} = ?" for key in clean)
        with service_operation("обновить клиента"):
            updated = self.storage.execute(
                f"UPDATE {_TABLE} SET {assignments} WHERE {pk} = ?",
                [*clean.values(), client_id],
            )
        if not updated:
            raise ClientNotFoundError(f"Клиент id={client_id} не найден")

        logger.info("✏️ Обновление клиента id=%s: %s", client_id, clean)

    # ──────────────────────────── Удаление ─────────────────────────────

    def delete_client(self, client_id: int) -> bool:
        """Удалить клиента, его заметки и все вложения.

        Returns:
            bool: была ли строка клиента в базе.
        """
        pk = quote_identifier(self.schema.primary_key_name())
        with service_operation("удалить клиента"):
            with self.storage.writing():
                notes = Note.delete().where(Note.client_id == client_id).execute()
                deleted = self.storage.execute(
                    f"DELETE FROM {_TABLE} WHERE {pk} = ?", (client_id,)
                )
            self.attachments.delete_all_for_client(client_id)

        logger.info(
            "🗑️ Клиент id=%s удалён (заметок: %s, строка найдена: %s)",
            client_id,
            notes,
            bool(deleted),
        )
        return bool(deleted)
