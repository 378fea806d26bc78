import pytest

from notekeep.notes.gateway import IdentityRequired, MutationGateway
from notekeep.notes.schemas import NoteFields
from notekeep.notes.store import NoteNotFound


class RecordingStore:
    def __init__(self):
        self.calls = []

    def add(self, owner_id, fields):
        self.calls.append(("add", owner_id, fields))
        return "n1"

    def update(self, owner_id, note_id, fields):
        self.calls.append(("update", owner_id, note_id, fields))

    def delete(self, owner_id, note_id):
        self.calls.append(("delete", owner_id, note_id))
        return True


@pytest.mark.asyncio
async def test_every_mutation_requires_identity():
    store = RecordingStore()
    gw = MutationGateway(store)
    fields = NoteFields(title="t")

    with pytest.raises(IdentityRequired):
        await gw.create("", fields)
    with pytest.raises(IdentityRequired):
        await gw.update("", "n1", fields)
    with pytest.raises(IdentityRequired):
        await gw.update_color("", "n1", "bg-red-200")
    with pytest.raises(IdentityRequired):
        await gw.delete("", "n1")

    assert store.calls == []


@pytest.mark.asyncio
async def test_create_passes_full_field_set():
    store = RecordingStore()
    gw = MutationGateway(store)

    note_id = await gw.create("u1", {"title": "t", "content": "c"})

    assert note_id == "n1"
    assert store.calls == [("add", "u1", {"title": "t", "content": "c", "color": "bg-white"})]


@pytest.mark.asyncio
async def test_update_color_touches_only_color():
    store = RecordingStore()
    gw = MutationGateway(store)

    await gw.update_color("u1", "n1", "bg-sky-200")

    assert store.calls == [("update", "u1", "n1", {"color": "bg-sky-200"})]


@pytest.mark.asyncio
async def test_store_failures_reject(gateway):
    with pytest.raises(NoteNotFound):
        await gateway.update("u1", "missing", NoteFields(title="x"))
    assert await gateway.delete("u1", "missing") is False


@pytest.mark.asyncio
async def test_update_leaves_created_at(gateway, store):
    note_id = await gateway.create("u1", NoteFields(title="a", content="b", color="bg-lime-200"))
    [before] = store.query("u1")

    await gateway.update("u1", note_id, NoteFields(title="a2", content="b2", color="bg-lime-200"))

    [after] = store.query("u1")
    assert after["created_at"] == before["created_at"]
    assert after["updated_at"] > before["updated_at"]
    assert (after["title"], after["content"]) == ("a2", "b2")


@pytest.mark.asyncio
async def test_update_merges_only_given_fields(gateway, store):
    note_id = await gateway.create("u1", {"title": "plan", "content": "step 1", "color": "bg-cyan-200"})

    await gateway.update("u1", note_id, {"title": "plan v2"})

    [after] = store.query("u1")
    assert (after["title"], after["content"], after["color"]) == ("plan v2", "step 1", "bg-cyan-200")
