import atexit
import logging

from config import Settings, get_settings
from core.app_context import AppContext, set_app_context
from database.init import close_storage, init_storage
from utils.logging_config import setup_logging

__all__ = ["bootstrap", "shutdown", "main"]

logger = logging.getLogger(__name__)


def bootstrap(settings: Settings | None = None) -> AppContext:
    """Поднимает ядро: логи, базу, реестр полей и контекст сервисов.

    Ошибка открытия базы (:class:`database.storage.StorageInitError`)
    пробрасывается наружу и прерывает запуск.
    """

    settings = settings or get_settings()
    setup_logging(settings)

    try:
        storage = init_storage(settings)
        context = AppContext(settings, storage_factory=lambda _settings: storage)
        added = context.registry.initialize()
    except Exception:
        logger.exception("❌ Не удалось поднять базу клиентов")
        close_storage()
        raise
    if added:
        logger.info("🗂️ Описано новых полей клиента: %s", added)

    set_app_context(context)
    atexit.register(shutdown)
    logger.info("🚀 Ядро базы клиентов готово: %s", settings.database_path)
    return context


def shutdown() -> None:
    """Сохраняет последний снимок базы и закрывает её."""

    close_storage()
    set_app_context(None)


def main(settings: Settings | None = None) -> int:
    """Запускает ядро и печатает краткую сводку по базе."""

    context = bootstrap(settings)
    app = context.app_service
    clients = app.list_clients()
    fields = app.get_field_metadata()
    print(f"Клиентов: {len(clients)}, полей: {len(fields)}")
    shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
