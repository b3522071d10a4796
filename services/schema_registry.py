"""Реестр полей клиента: таблица ``FieldMetadata`` и живая схема ``Client``.

Набор колонок ``Client`` растёт во время работы, поэтому реестр всегда
сверяется с реальной схемой базы, а не со статической моделью.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from peewee import DateField, TextField
from playhouse.migrate import SqliteMigrator, migrate

from database.models import FieldMetadata
from database.storage import ColumnInfo, StorageEngine, StorageQueryError
from services.validators import parse_flexible_date, validate_field_name

logger = logging.getLogger(__name__)

CLIENT_TABLE = "Client"
NAME_FIELDS = ("firstName", "lastName")
FIELD_TYPES = {"TEXT": TextField, "DATE": DateField}


class FieldAlreadyExists(ValueError):
    def __init__(self, name: str):
        super().__init__(f"Поле '{name}' уже существует")
        self.name = name


class FieldNotFound(LookupError):
    def __init__(self, name: str):
        super().__init__(f"Поле '{name}' не найдено")
        self.name = name


class InvalidFieldType(ValueError):
    def __init__(self, data_type: Any):
        super().__init__(
            f"Неизвестный тип поля {data_type!r}: допустимы {', '.join(FIELD_TYPES)}"
        )
        self.data_type = data_type


@dataclass
class FieldInfo:
    name: str
    data_type: str
    is_required: bool = False
    is_hidden: bool = False
    is_protected: bool = False

    @classmethod
    def from_model(cls, meta: FieldMetadata) -> "FieldInfo":
        return cls(
            name=meta.name,
            data_type=meta.data_type,
            is_required=bool(meta.is_required),
            is_hidden=bool(meta.is_hidden),
            is_protected=bool(meta.is_protected),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "fieldName": self.name,
            "dataType": self.data_type,
            "isRequired": self.is_required,
            "isHidden": self.is_hidden,
            "isProtected": self.is_protected,
        }


def infer_data_type(declared_type: str) -> str:
    return "DATE" if "date" in (declared_type or "").lower() else "TEXT"


def _sort_key(info: FieldInfo) -> tuple:
    return (not info.is_protected, info.name.lower(), info.name)


class SchemaRegistry:
    """Синхронизирует ``FieldMetadata`` с колонками таблицы ``Client``."""

    def __init__(self, storage: StorageEngine) -> None:
        self.storage = storage

    # ──────────────────────────── Схема Client ─────────────────────────────

    def client_columns(self) -> list[ColumnInfo]:
        return self.storage.columns_of(CLIENT_TABLE)

    def primary_key_name(self) -> str:
        for column in self.client_columns():
            if column.is_primary_key:
                return column.name
        return "clientID"

    def protected_names(self) -> set[str]:
        return {self.primary_key_name(), *NAME_FIELDS}

    # ──────────────────────────── Инициализация ─────────────────────────────

    def initialize(self) -> int:
        """Создать таблицу метаданных и заполнить недостающие строки.

        Безопасно вызывать при каждом старте: если все колонки уже описаны,
        база не меняется.

        Returns:
            int: сколько строк метаданных добавлено.
        """
        columns = self.client_columns()
        if not columns:
            raise StorageQueryError(f"Таблица {CLIENT_TABLE} не найдена")

        table_missing = not self.storage.table_exists(FieldMetadata._meta.table_name)
        known = set() if table_missing else {m.name for m in FieldMetadata.select()}
        missing = [column for column in columns if column.name not in known]
        if not table_missing and not missing:
            return 0

        protected = self.protected_names()
        with self.storage.writing():
            if table_missing:
                FieldMetadata.create_table(safe=True)
            for column in missing:
                is_protected = column.name in protected
                FieldMetadata.create(
                    name=column.name,
                    data_type=infer_data_type(column.type),
                    is_required=column.not_null or column.is_primary_key,
                    is_hidden=False,
                    is_protected=is_protected,
                )
        logger.info(
            "🗂️ Метаданные полей заполнены: %s",
            ", ".join(column.name for column in missing),
        )
        return len(missing)

    # ──────────────────────────── Чтение ─────────────────────────────

    def list_fields(self) -> list[FieldInfo]:
        """Все поля: сначала защищённые, затем по алфавиту."""
        fields = [FieldInfo.from_model(m) for m in FieldMetadata.select()]
        return sorted(fields, key=_sort_key)

    def get_field(self, name: str) -> FieldInfo:
        meta = FieldMetadata.get_or_none(FieldMetadata.name == name)
        if meta is None:
            raise FieldNotFound(name)
        return FieldInfo.from_model(meta)

    def hidden_field_names(self) -> set[str]:
        query = FieldMetadata.select(FieldMetadata.name).where(
            FieldMetadata.is_hidden == True  # noqa: E712
        )
        return {m.name for m in query}

    def date_field_names(self) -> set[str]:
        query = FieldMetadata.select(FieldMetadata.name).where(
            FieldMetadata.data_type == "DATE"
        )
        return {m.name for m in query}

    # ──────────────────────────── Изменение ─────────────────────────────

    def add_field(
        self,
        name: str,
        data_type: str = "TEXT",
        is_required: bool = False,
        default_value: str | None = None,
    ) -> FieldInfo:
        """Добавить в ``Client`` новую колонку и описать её в метаданных.

        Колонка всегда допускает ``NULL``: обязательность проверяется формой,
        а не базой. ``default_value`` для DATE-поля только проверяется и в
        существующие строки не записывается.
        """
        name = validate_field_name(name)
        normalized_type = str(data_type or "").strip().upper()
        if normalized_type not in FIELD_TYPES:
            raise InvalidFieldType(data_type)

        existing = {column.name.lower() for column in self.client_columns()}
        if name.lower() in existing:
            raise FieldAlreadyExists(name)

        if normalized_type == "DATE" and default_value not in (None, ""):
            parse_flexible_date(str(default_value))

        field = FIELD_TYPES[normalized_type](null=True)
        migrator = SqliteMigrator(self.storage.database)
        with self.storage.writing(), self.storage.database.atomic():
            migrate(migrator.add_column(CLIENT_TABLE, name, field))
            FieldMetadata.insert(
                name=name,
                data_type=normalized_type,
                is_required=bool(is_required),
                is_hidden=False,
                is_protected=False,
            ).on_conflict_replace().execute()

        logger.info(
            "➕ Добавлено поле %s (%s, обязательное=%s)",
            name,
            normalized_type,
            bool(is_required),
        )
        return self.get_field(name)

    def toggle_visibility(self, name: str, is_hidden: bool) -> FieldInfo:
        """Скрыть или показать поле.

        Запрета на скрытие защищённых полей здесь нет: это политика интерфейса.
        """
        meta = FieldMetadata.get_or_none(FieldMetadata.name == name)
        if meta is None:
            raise FieldNotFound(name)

        with self.storage.writing():
            FieldMetadata.update(is_hidden=bool(is_hidden)).where(
                FieldMetadata.name == name
            ).execute()

        logger.info("👁️ Поле %s: скрыто=%s", name, bool(is_hidden))
        return self.get_field(name)
