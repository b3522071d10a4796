"""Управление набором полей клиента."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from services.errors import service_operation
from services.schema_cache import SchemaCache
from services.schema_registry import FieldInfo, SchemaRegistry

logger = logging.getLogger(__name__)


@dataclass
class AddFieldResult:
    field: FieldInfo
    # Схема кэшируется интерфейсом при старте, поэтому после добавления поля
    # приложение нужно перезапустить.
    restart_required: bool = True


class FieldService:
    def __init__(self, registry: SchemaRegistry, schema: SchemaCache) -> None:
        self.registry = registry
        self.schema = schema

    def get_field_metadata(self) -> list[FieldInfo]:
        return self.schema.fields()

    def add_field(
        self,
        name: str,
        data_type: str = "TEXT",
        is_required: bool = False,
        default_value: str | None = None,
    ) -> AddFieldResult:
        try:
            with service_operation(f"добавить поле '{name}'"):
                field = self.registry.add_field(name, data_type, is_required, default_value)
        finally:
            self.schema.invalidate()
        return AddFieldResult(field=field)

    def toggle_field_visibility(self, name: str, is_hidden: bool) -> FieldInfo:
        try:
            with service_operation(f"изменить видимость поля '{name}'"):
                field = self.registry.toggle_visibility(name, is_hidden)
        finally:
            self.schema.invalidate()
        return field
