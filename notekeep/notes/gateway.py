"""Create/update/delete against a single note record.

Each call is one attempt. Results only confirm the store accepted the write;
the visible list catches up through the collection subscription.
"""

from __future__ import annotations

from typing import Any, Dict

from notekeep.notes.schemas import NoteFields
from notekeep.notes.store import NoteStore


class IdentityRequired(PermissionError):
    def __init__(self):
        super().__init__("User ID is required.")


def _require(owner_id: str) -> None:
    if not owner_id:
        raise IdentityRequired()


def _fields(fields: NoteFields | Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    if not isinstance(fields, NoteFields):
        fields = NoteFields(**fields)
    # updates merge only the keys the caller actually set
    return fields.model_dump(exclude_unset=partial)


class MutationGateway:
    def __init__(self, store: NoteStore):
        self._store = store

    async def create(self, owner_id: str, fields: NoteFields | Dict[str, Any]) -> str:
        _require(owner_id)
        return self._store.add(owner_id, _fields(fields))

    async def update(self, owner_id: str, note_id: str, fields: NoteFields | Dict[str, Any]) -> None:
        _require(owner_id)
        self._store.update(owner_id, note_id, _fields(fields, partial=True))

    async def update_color(self, owner_id: str, note_id: str, color: str) -> None:
        _require(owner_id)
        self._store.update(owner_id, note_id, {"color": color})

    async def delete(self, owner_id: str, note_id: str) -> bool:
        _require(owner_id)
        return self._store.delete(owner_id, note_id)
