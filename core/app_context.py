"""Контекст приложения и управление зависимостями."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, ClassVar

from config import Settings, get_settings
from database.storage import StorageEngine
from services.app_service import CrmAppService
from services.attachment_store import AttachmentStore
from services.clients.client_service import ClientService
from services.fields.field_service import FieldService
from services.notes.note_service import NoteService
from services.schema_cache import SchemaCache
from services.schema_registry import SchemaRegistry
from services.search_service import SearchEngine

DependencyName = str


def _default_storage_factory(settings: Settings) -> StorageEngine:
    from database.init import init_storage

    return init_storage(settings)


class AppContext:
    """Контекст приложения с ленивым созданием зависимостей."""

    _DEPENDENCY_NAMES: ClassVar[set[str]] = {
        "storage",
        "registry",
        "schema_cache",
        "attachments",
        "client_service",
        "note_service",
        "field_service",
        "search_engine",
        "app_service",
    }

    def __init__(
        self,
        settings: Settings,
        *,
        storage_factory: Callable[[Settings], StorageEngine] = _default_storage_factory,
        overrides: dict[str, Any] | None = None,
    ) -> None:
        self._settings = settings
        self._storage_factory = storage_factory
        self._overrides: dict[str, Any] = dict(overrides or {})
        self._instances: dict[str, Any] = {}

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def storage(self) -> StorageEngine:
        return self._get_dependency(
            "storage", lambda: self._storage_factory(self._settings)
        )

    @property
    def registry(self) -> SchemaRegistry:
        return self._get_dependency("registry", lambda: SchemaRegistry(self.storage))

    @property
    def schema_cache(self) -> SchemaCache:
        return self._get_dependency("schema_cache", lambda: SchemaCache(self.registry))

    @property
    def attachments(self) -> AttachmentStore:
        return self._get_dependency(
            "attachments", lambda: AttachmentStore(self._settings.attachments_dir)
        )

    @property
    def client_service(self) -> ClientService:
        return self._get_dependency(
            "client_service",
            lambda: ClientService(self.storage, self.schema_cache, self.attachments),
        )

    @property
    def note_service(self) -> NoteService:
        return self._get_dependency(
            "note_service",
            lambda: NoteService(self.storage, self.client_service, self.attachments),
        )

    @property
    def field_service(self) -> FieldService:
        return self._get_dependency(
            "field_service", lambda: FieldService(self.registry, self.schema_cache)
        )

    @property
    def search_engine(self) -> SearchEngine:
        return self._get_dependency(
            "search_engine",
            lambda: SearchEngine(
                self.storage,
                self.registry,
                self.attachments,
                include_note_type=self._settings.search_note_type,
            ),
        )

    @property
    def app_service(self) -> CrmAppService:
        return self._get_dependency(
            "app_service",
            lambda: CrmAppService(
                clients=self.client_service,
                notes=self.note_service,
                fields=self.field_service,
                attachments=self.attachments,
                search=self.search_engine,
            ),
        )

    def override(self, **deps: Any) -> "AppContext":
        """Создать новый контекст с переопределёнными зависимостями."""

        override_args = dict(deps)
        new_settings = override_args.pop("settings", self._settings)

        unknown = set(override_args) - self._DEPENDENCY_NAMES
        if unknown:
            names = ", ".join(sorted(unknown))
            raise ValueError(f"Неизвестные зависимости для переопределения: {names}")

        overrides = dict(self._overrides)
        overrides.update(override_args)
        return AppContext(
            settings=new_settings,
            storage_factory=self._storage_factory,
            overrides=overrides,
        )

    def _get_dependency(
        self, name: DependencyName, factory: Callable[[], Any]
    ) -> Any:
        if name in self._overrides:
            return self._overrides[name]
        if name not in self._instances:
            self._instances[name] = factory()
        return self._instances[name]


_app_context: AppContext | None = None


def get_app_context() -> AppContext:
    """Получить (или создать) синглтон контекста приложения."""

    global _app_context
    if _app_context is None:
        _app_context = AppContext(get_settings())
    return _app_context


def set_app_context(context: AppContext | None) -> None:
    global _app_context
    _app_context = context


def reset_app_context() -> None:
    set_app_context(None)


__all__ = ["AppContext", "get_app_context", "reset_app_context", "set_app_context"]
