"""SQL-backed note collection with a live change feed.

Stands in for the managed document database: per-owner collections,
server-assigned write timestamps and push notification of every accepted
write to whoever is watching that owner.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.orm import sessionmaker

from notekeep.notes.models import Note
from notekeep.shared.sse import ChangeFeed

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = ("title", "content", "color")


class NoteNotFound(LookupError):
    def __init__(self, owner_id: str, note_id: str):
        super().__init__(f"note {note_id} not found for owner {owner_id}")
        self.owner_id = owner_id
        self.note_id = note_id


class ServerClock:
    """Strictly increasing UTC instants at millisecond resolution."""

    def __init__(self, now: Optional[Callable[[], datetime]] = None):
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._last: Optional[datetime] = None
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            ts = self._now()
            ts = ts.replace(microsecond=(ts.microsecond // 1000) * 1000)
            if self._last is not None and ts <= self._last:
                ts = self._last + timedelta(milliseconds=1)
            self._last = ts
            return ts


def _record(note: Note) -> Dict[str, Any]:
    return {
        "id": note.id,
        "owner_id": note.owner_id,
        "title": note.title,
        "content": note.content,
        "color": note.color,
        "created_at": note.created_at,
        "updated_at": note.updated_at,
    }


class NoteStore:
    def __init__(
        self,
        session_factory: sessionmaker,
        feed: Optional[ChangeFeed] = None,
        clock: Optional[ServerClock] = None,
    ):
        self._session_factory = session_factory
        self.feed = feed or ChangeFeed()
        self.clock = clock or ServerClock()

    # --- writes ---

    def add(self, owner_id: str, fields: Dict[str, Any]) -> str:
        now = self.clock()
        data = {k: v for k, v in fields.items() if k in MUTABLE_FIELDS}
        with self._session_factory() as db:
            note = Note(owner_id=owner_id, created_at=now, updated_at=now, **data)
            db.add(note)
            db.commit()
            note_id = note.id
        logger.debug("note %s added for %s", note_id, owner_id)
        self.feed.publish(owner_id, "added", {"id": note_id})
        return note_id

    def update(self, owner_id: str, note_id: str, fields: Dict[str, Any]) -> None:
        with self._session_factory() as db:
            note = db.get(Note, note_id)
            if note is None or note.owner_id != owner_id:
                raise NoteNotFound(owner_id, note_id)
            for key, value in fields.items():
                if key in MUTABLE_FIELDS:
                    setattr(note, key, value)
            note.updated_at = self.clock()
            db.commit()
        self.feed.publish(owner_id, "modified", {"id": note_id})

    def delete(self, owner_id: str, note_id: str) -> bool:
        with self._session_factory() as db:
            res = db.execute(delete(Note).where(Note.id == note_id, Note.owner_id == owner_id))
            db.commit()
            removed = bool(res.rowcount)
        if removed:
            self.feed.publish(owner_id, "removed", {"id": note_id})
        return removed

    # --- reads ---

    def query(self, owner_id: str) -> List[Dict[str, Any]]:
        """Owner's notes, newest-modified first."""
        stmt = (
            select(Note)
            .where(Note.owner_id == owner_id)
            .order_by(desc(Note.updated_at), Note.id)
        )
        with self._session_factory() as db:
            return [_record(n) for n in db.scalars(stmt).all()]

    def watch(self, owner_id: str) -> asyncio.Queue:
        return self.feed.subscribe(owner_id)

    def unwatch(self, owner_id: str, q: asyncio.Queue) -> None:
        self.feed.unsubscribe(owner_id, q)
