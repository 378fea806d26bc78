"""Live collection subscription.

Every change to an owner's collection re-delivers the complete ordered
snapshot; consumers replace their state wholesale and never apply deltas.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from notekeep.notes.palette import DEFAULT_COLOR
from notekeep.notes.schemas import NoteOut
from notekeep.notes.store import NoteStore

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[List[NoteOut]], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


def normalize_timestamp(raw: Any, now: Optional[Callable[[], int]] = None) -> int:
    """Epoch ms for a stored timestamp; a write still awaiting its server stamp reads as "now"."""
    if raw is None:
        return (now or _now_ms)()
    if isinstance(raw, datetime):
        if raw.tzinfo is None:
            raw = raw.replace(tzinfo=timezone.utc)
        return int(raw.timestamp() * 1000)
    return int(raw)


def to_note(record: Dict[str, Any], owner_id: str) -> NoteOut:
    return NoteOut(
        id=record["id"],
        title=record.get("title") or "",
        content=record.get("content") or "",
        color=record.get("color") or DEFAULT_COLOR,
        created_at=normalize_timestamp(record.get("created_at")),
        updated_at=normalize_timestamp(record.get("updated_at")),
        owner_id=owner_id,
    )


class Subscription:
    """Cancellable handle returned by `subscribe`. Calling it more than once is a no-op."""

    def __init__(self, release: Optional[Callable[[], None]] = None):
        self._release = release

    @property
    def closed(self) -> bool:
        return self._release is None

    def __call__(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()


class CollectionSubscriber:
    def __init__(self, store: NoteStore):
        self._store = store

    def snapshot(self, owner_id: str) -> List[NoteOut]:
        if not owner_id:
            return []
        return [to_note(r, owner_id) for r in self._store.query(owner_id)]

    def subscribe(self, owner_id: str, on_snapshot: SnapshotCallback) -> Subscription:
        """Start pushing snapshots for `owner_id`. Must be called with an event loop running."""
        if not owner_id:
            on_snapshot([])
            return Subscription()

        q = self._store.watch(owner_id)
        task = asyncio.get_running_loop().create_task(self._pump(owner_id, q, on_snapshot))

        def release() -> None:
            task.cancel()
            # drop the queue now; the task may not get to run its finally before the loop moves on
            self._store.unwatch(owner_id, q)

        return Subscription(release)

    async def _pump(self, owner_id: str, q: asyncio.Queue, on_snapshot: SnapshotCallback) -> None:
        try:
            while True:
                try:
                    notes = self.snapshot(owner_id)
                except Exception:
                    logger.exception("Error fetching real-time notes for %s", owner_id)
                    on_snapshot([])
                    return
                on_snapshot(notes)
                await q.get()
        finally:
            self._store.unwatch(owner_id, q)
