"""Presentation-side state for the notes screen.

The rendered list is always the last snapshot accepted from the live
subscription. Mutations are dispatched in the background and never touch
`notes` directly; the editor and card menus close optimistically before the
write is confirmed.

All methods must run on the event loop thread.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Dict, List, Optional, Set

from notekeep.assist.service import SuggestionClient
from notekeep.auth.models import Identity
from notekeep.auth.provider import LocalAuthProvider
from notekeep.notes.gateway import MutationGateway
from notekeep.notes.schemas import NoteOut
from notekeep.notes.subscriber import CollectionSubscriber, Subscription
from notekeep.session.watcher import SessionWatcher
from notekeep.view.drafts import Draft, DraftAction, EditNote, NewNote

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class MenuState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    COLOR_PICKER = "color_picker"


class NotesController:
    def __init__(
        self,
        auth: LocalAuthProvider,
        subscriber: CollectionSubscriber,
        gateway: MutationGateway,
        suggestions: SuggestionClient,
    ):
        self._auth = auth
        self._subscriber = subscriber
        self._gateway = gateway
        self._suggestions = suggestions
        self._watcher = SessionWatcher(auth)

        self.session = SessionState.LOADING
        self.user: Optional[Identity] = None
        self.notes: List[NoteOut] = []
        self.editor: Optional[DraftAction] = None
        self.generating = False

        self._menus: Dict[str, MenuState] = {}
        self._subscription: Optional[Subscription] = None
        self._generation = 0
        self._editor_epoch = 0
        self._tasks: Set[asyncio.Task] = set()

    # --- lifecycle ---

    def start(self) -> None:
        self._watcher.start(self._on_auth_changed)

    def stop(self) -> None:
        self._watcher.stop()
        self._teardown()

    async def wait_idle(self) -> None:
        """Wait for every mutation dispatched so far to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # --- session / subscription ---

    def _teardown(self) -> None:
        sub, self._subscription = self._subscription, None
        if sub is not None:
            sub()
        # anything still in flight from the old subscription is now stale
        self._generation += 1
        self.notes = []
        self._menus.clear()

    def _on_auth_changed(self, ident: Optional[Identity]) -> None:
        self._teardown()
        self.user = ident
        if ident is None:
            self.session = SessionState.UNAUTHENTICATED
            self._close_editor()
            return
        self.session = SessionState.AUTHENTICATED
        gen = self._generation
        self._subscription = self._subscriber.subscribe(
            ident.id, lambda notes: self._on_snapshot(gen, notes)
        )

    def _on_snapshot(self, gen: int, notes: List[NoteOut]) -> None:
        if gen != self._generation:
            logger.debug("dropping snapshot from superseded subscription %s", gen)
            return
        self.notes = list(notes)
        live = {n.id for n in self.notes}
        self._menus = {k: v for k, v in self._menus.items() if k in live}

    async def logout(self) -> None:
        try:
            await self._auth.sign_out()
        except Exception:
            logger.exception("Error signing out")

    # --- editor ---

    @property
    def draft(self) -> Optional[Draft]:
        return self.editor.draft if self.editor is not None else None

    def open_new(self) -> NewNote:
        self._editor_epoch += 1
        self.editor = NewNote(Draft())
        return self.editor

    def open_edit(self, note: NoteOut) -> EditNote:
        self._menus.pop(note.id, None)
        self._editor_epoch += 1
        self.editor = EditNote(note.id, Draft.from_note(note))
        return self.editor

    def _open_draft(self) -> Draft:
        if self.editor is None:
            raise RuntimeError("editor is closed")
        return self.editor.draft

    def set_title(self, title: str) -> None:
        self._open_draft().title = title

    def set_content(self, content: str) -> None:
        self._open_draft().content = content

    def set_color(self, color: str) -> None:
        self._open_draft().color = color

    def _close_editor(self) -> None:
        self._editor_epoch += 1
        self.editor = None

    def close_editor(self) -> None:
        self._close_editor()

    def save(self) -> Optional[asyncio.Task]:
        """Close the editor and hand the draft to the gateway without waiting."""
        action = self.editor
        self._close_editor()
        if action is None or self.user is None or action.draft.is_blank():
            return None
        return self._dispatch(self._persist(self.user.id, action), "saving note")

    async def _persist(self, uid: str, action: DraftAction) -> None:
        fields = action.draft.to_fields()
        if isinstance(action, EditNote):
            await self._gateway.update(uid, action.note_id, fields)
        else:
            await self._gateway.create(uid, fields)

    async def ask_assistant(self, prompt: str) -> Optional[str]:
        """Generate text and append it to the open draft; dropped if the editor moved on."""
        if not prompt.strip() or self.editor is None:
            return None
        epoch = self._editor_epoch
        self.generating = True
        try:
            result = await self._suggestions.generate(prompt, self.editor.draft.content)
        finally:
            self.generating = False
        if self.editor is None or epoch != self._editor_epoch:
            logger.info("editor closed before generation finished; discarding result")
            return None
        draft = self.editor.draft
        draft.content = f"{draft.content}\n\n{result}" if draft.content else result
        return result

    # --- card actions ---

    def delete_note(self, note_id: str) -> Optional[asyncio.Task]:
        self._menus.pop(note_id, None)
        if self.user is None:
            return None
        return self._dispatch(self._gateway.delete(self.user.id, note_id), "deleting note")

    def change_color(self, note_id: str, color: str) -> Optional[asyncio.Task]:
        self._menus.pop(note_id, None)
        if self.user is None:
            return None
        return self._dispatch(self._gateway.update_color(self.user.id, note_id, color), "updating note color")

    # --- card menus ---

    def menu_state(self, note_id: str) -> MenuState:
        return self._menus.get(note_id, MenuState.CLOSED)

    def toggle_menu(self, note_id: str) -> MenuState:
        was_closed = self.menu_state(note_id) is MenuState.CLOSED
        # opening one card's menu counts as an outside click for the rest
        self._menus.clear()
        if was_closed:
            self._menus[note_id] = MenuState.OPEN
        return self.menu_state(note_id)

    def show_color_picker(self, note_id: str) -> MenuState:
        if self.menu_state(note_id) is MenuState.OPEN:
            self._menus[note_id] = MenuState.COLOR_PICKER
        return self.menu_state(note_id)

    def dismiss_menus(self) -> None:
        self._menus.clear()

    # --- background work ---

    def _dispatch(self, coro: Awaitable, what: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._guard(coro, what))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @staticmethod
    async def _guard(coro: Awaitable, what: str):
        try:
            return await coro
        except Exception:
            logger.exception("Error %s", what)
            return None
