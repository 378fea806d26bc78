import asyncio
from datetime import datetime, timezone

import pytest

from conftest import next_snapshot
from notekeep.notes.store import NoteStore
from notekeep.notes.subscriber import CollectionSubscriber, normalize_timestamp, to_note


def test_normalize_timestamp_variants():
    aware = datetime(2026, 1, 1, tzinfo=timezone.utc)
    naive = datetime(2026, 1, 1)

    assert normalize_timestamp(aware) == 1767225600000
    assert normalize_timestamp(naive) == 1767225600000
    assert normalize_timestamp(1767225600000) == 1767225600000
    # pending server stamp reads as client "now"
    assert normalize_timestamp(None, now=lambda: 42) == 42


def test_to_note_fills_pending_timestamps_and_defaults():
    note = to_note({"id": "n1", "title": None, "content": "x", "color": None,
                    "created_at": None, "updated_at": None}, "u1")

    assert note.title == ""
    assert note.color == "bg-white"
    assert note.owner_id == "u1"
    assert note.created_at > 0 and note.updated_at > 0


def test_snapshot_for_empty_owner_is_empty(subscriber):
    assert subscriber.snapshot("") == []


@pytest.mark.asyncio
async def test_empty_owner_short_circuits(subscriber, store):
    seen = []
    unsubscribe = subscriber.subscribe("", seen.append)

    assert seen == [[]]
    assert unsubscribe.closed
    unsubscribe()
    unsubscribe()


@pytest.mark.asyncio
async def test_zero_notes_delivers_empty_snapshot(subscriber):
    q: asyncio.Queue = asyncio.Queue()
    unsubscribe = subscriber.subscribe("u1", q.put_nowait)

    assert await next_snapshot(q) == []
    unsubscribe()


@pytest.mark.asyncio
async def test_create_update_delete_flow(subscriber, gateway):
    q: asyncio.Queue = asyncio.Queue()
    unsubscribe = subscriber.subscribe("u1", q.put_nowait)
    assert await next_snapshot(q) == []

    note_id = await gateway.create("u1", {"title": "Groceries", "content": "milk, eggs", "color": "bg-white"})
    [note] = await next_snapshot(q)
    assert note.id == note_id
    assert (note.title, note.content, note.color) == ("Groceries", "milk, eggs", "bg-white")
    assert note.created_at == note.updated_at

    await gateway.update_color("u1", note_id, "bg-amber-200")
    [recolored] = await next_snapshot(q)
    assert recolored.id == note_id
    assert recolored.color == "bg-amber-200"
    assert recolored.updated_at > recolored.created_at
    assert recolored.created_at == note.created_at

    await gateway.delete("u1", note_id)
    assert await next_snapshot(q) == []
    unsubscribe()


@pytest.mark.asyncio
async def test_updated_at_is_monotonic_and_created_at_fixed(subscriber, gateway):
    q: asyncio.Queue = asyncio.Queue()
    unsubscribe = subscriber.subscribe("u1", q.put_nowait)
    await next_snapshot(q)

    note_id = await gateway.create("u1", {"title": "v0"})
    [first] = await next_snapshot(q)
    stamps = [first.updated_at]
    for i in range(1, 5):
        await gateway.update("u1", note_id, {"title": f"v{i}"})
        [n] = await next_snapshot(q)
        assert n.created_at == first.created_at
        stamps.append(n.updated_at)

    assert stamps == sorted(stamps)
    unsubscribe()


@pytest.mark.asyncio
async def test_snapshot_is_complete_ordered_and_owner_scoped(subscriber, gateway):
    q: asyncio.Queue = asyncio.Queue()
    unsubscribe = subscriber.subscribe("u1", q.put_nowait)
    await next_snapshot(q)

    a = await gateway.create("u1", {"title": "a"})
    await next_snapshot(q)
    b = await gateway.create("u1", {"title": "b"})
    await next_snapshot(q)
    await gateway.create("u2", {"title": "foreign"})
    await gateway.update("u1", a, {"title": "a2"})

    snap = await next_snapshot(q)
    assert [n.id for n in snap] == [a, b]
    assert all(n.owner_id == "u1" for n in snap)
    assert [n.updated_at for n in snap] == sorted((n.updated_at for n in snap), reverse=True)
    unsubscribe()


@pytest.mark.asyncio
async def test_foreign_writes_do_not_wake_subscriber(subscriber, gateway):
    q: asyncio.Queue = asyncio.Queue()
    unsubscribe = subscriber.subscribe("u1", q.put_nowait)
    await next_snapshot(q)

    await gateway.create("u2", {"title": "not yours"})
    await asyncio.sleep(0.05)

    assert q.empty()
    unsubscribe()


@pytest.mark.asyncio
async def test_unsubscribe_is_idempotent_and_releases_listener(subscriber, gateway, store):
    q: asyncio.Queue = asyncio.Queue()
    unsubscribe = subscriber.subscribe("u1", q.put_nowait)
    await next_snapshot(q)
    assert store.feed.listeners("u1") == 1

    unsubscribe()
    unsubscribe()
    unsubscribe()

    assert unsubscribe.closed
    assert store.feed.listeners("u1") == 0
    await gateway.create("u1", {"title": "after"})
    await asyncio.sleep(0.05)
    assert q.empty()


class FlakyStore(NoteStore):
    def __init__(self, *args, fail_after: int = 1, **kwargs):
        super().__init__(*args, **kwargs)
        self.reads = 0
        self.fail_after = fail_after

    def query(self, owner_id):
        self.reads += 1
        if self.reads > self.fail_after:
            raise PermissionError("permission revoked")
        return super().query(owner_id)


@pytest.mark.asyncio
async def test_listener_error_delivers_empty_and_stops(session_factory, caplog):
    store = FlakyStore(session_factory, fail_after=2)
    subscriber = CollectionSubscriber(store)
    q: asyncio.Queue = asyncio.Queue()
    unsubscribe = subscriber.subscribe("u1", q.put_nowait)
    assert await next_snapshot(q) == []

    store.add("u1", {"title": "one"})
    assert len(await next_snapshot(q)) == 1

    store.add("u1", {"title": "two"})
    assert await next_snapshot(q) == []
    await asyncio.sleep(0.01)
    assert store.feed.listeners("u1") == 0
    assert "Error fetching real-time notes" in caplog.text

    store.add("u1", {"title": "three"})
    await asyncio.sleep(0.05)
    assert q.empty()
    unsubscribe()

    # a fresh subscribe starts over
    store.fail_after = 10**6
    fresh = subscriber.subscribe("u1", q.put_nowait)
    assert len(await next_snapshot(q)) == 3
    fresh()
