"""Пакет прикладных сервисов базы клиентов.

Подмодули на уровне пакета не импортируются: пусть ``import services``
не требует открытой базы. Импортируйте нужное напрямую, например:
    from services.schema_registry import SchemaRegistry
    from services.clients import ClientService
"""

__all__: list[str] = []
