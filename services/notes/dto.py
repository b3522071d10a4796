from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from database.models import Note


@dataclass
class NoteDTO:
    id: int
    client_id: int
    note_type: str | None
    content: str | None
    created_on: datetime | str | None

    @classmethod
    def from_model(cls, note: Note) -> "NoteDTO":
        return cls(
            id=note.id,
            client_id=note.client_id,
            note_type=note.note_type,
            content=note.content,
            created_on=note.created_on,
        )

    def to_dict(self) -> dict[str, Any]:
        created = self.created_on
        if isinstance(created, datetime):
            created = created.strftime("%Y-%m-%d %H:%M:%S")
        return {
            "noteID": self.id,
            "clientID": self.client_id,
            "noteType": self.note_type,
            "content": self.content,
            "createdOn": created,
        }
