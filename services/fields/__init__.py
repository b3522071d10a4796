"""Подмодуль управления полями клиента."""

from .field_service import AddFieldResult, FieldService

__all__ = ["FieldService", "AddFieldResult"]
