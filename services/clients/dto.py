from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass
class ClientSummaryDTO:
    id: int
    first_name: str
    last_name: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any], pk_name: str = "clientID") -> "ClientSummaryDTO":
        return cls(
            id=row[pk_name],
            first_name=row.get("firstName") or "",
            last_name=row.get("lastName") or "",
        )

    @property
    def sort_key(self) -> tuple[str, str, int]:
        return (self.last_name, self.first_name, self.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "clientID": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
        }


@dataclass
class ClientDetailsDTO:
    """Полная запись клиента: все колонки в порядке схемы."""

    id: int
    fields: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.fields[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.fields)
