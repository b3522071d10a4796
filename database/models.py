from peewee import (
    SQL,
    AutoField,
    BooleanField,
    CharField,
    DateTimeField,
    IntegerField,
    Model,
    TextField,
)

from database.db import db


class BaseModel(Model):
    class Meta:
        database = db


class Note(BaseModel):
    """Заметка по клиенту (таблица ``History``).

    Таблица ``Client`` сюда не описывается: её набор колонок растёт во время
    работы, поэтому доступ к ней идёт через :class:`database.storage.StorageEngine`.
    """

    id = AutoField(column_name="noteID")
    client_id = IntegerField(column_name="clientID", index=True)
    created_on = DateTimeField(
        column_name="createdOn",
        constraints=[SQL("DEFAULT CURRENT_TIMESTAMP")],
    )
    note_type = TextField(column_name="noteType", null=True)
    content = TextField(null=True)

    class Meta:
        table_name = "History"

    def __str__(self) -> str:
        return f"{self.note_type or '—'} #{self.id}"


class FieldMetadata(BaseModel):
    """Описание одной колонки таблицы ``Client``."""

    name = CharField(column_name="fieldName", primary_key=True)
    data_type = CharField(column_name="dataType", default="TEXT")
    is_required = BooleanField(column_name="isRequired", default=False)
    is_hidden = BooleanField(column_name="isHidden", default=False)
    is_protected = BooleanField(column_name="isProtected", default=False)

    class Meta:
        table_name = "FieldMetadata"

    def __str__(self) -> str:
        return self.name
