"""Кэш схемы клиента и метаданных полей.

Принадлежит слою сервисов и сбрасывается явно после каждого изменения
схемы (добавление поля, смена видимости).
"""

from __future__ import annotations

import logging

from database.storage import ColumnInfo
from services.schema_registry import FieldInfo, SchemaRegistry

logger = logging.getLogger(__name__)


class SchemaCache:
    def __init__(self, registry: SchemaRegistry) -> None:
        self.registry = registry
        self._columns: list[ColumnInfo] | None = None
        self._fields: list[FieldInfo] | None = None

    def invalidate(self) -> None:
        self._columns = None
        self._fields = None
        logger.debug("♻️ Кэш схемы клиента сброшен")

    def columns(self) -> list[ColumnInfo]:
        if self._columns is None:
            self._columns = self.registry.client_columns()
        return list(self._columns)

    def fields(self) -> list[FieldInfo]:
        if self._fields is None:
            self._fields = self.registry.list_fields()
        return list(self._fields)

    def column_names(self) -> list[str]:
        return [column.name for column in self.columns()]

    def primary_key_name(self) -> str:
        for column in self.columns():
            if column.is_primary_key:
                return column.name
        return "clientID"

    def hidden_names(self) -> set[str]:
        return {f.name for f in self.fields() if f.is_hidden}

    def date_names(self) -> set[str]:
        return {f.name for f in self.fields() if f.data_type == "DATE"}
