from dataclasses import dataclass, field
from typing import Union

from notekeep.notes.palette import DEFAULT_COLOR
from notekeep.notes.schemas import NoteFields, NoteOut


@dataclass
class Draft:
    title: str = ""
    content: str = ""
    color: str = DEFAULT_COLOR

    @classmethod
    def from_note(cls, note: NoteOut) -> "Draft":
        return cls(title=note.title or "", content=note.content or "", color=note.color or DEFAULT_COLOR)

    def is_blank(self) -> bool:
        return not self.title.strip() and not self.content.strip()

    def to_fields(self) -> NoteFields:
        return NoteFields(title=self.title, content=self.content, color=self.color or DEFAULT_COLOR)


@dataclass(frozen=True)
class NewNote:
    draft: Draft = field(default_factory=Draft)


@dataclass(frozen=True)
class EditNote:
    note_id: str
    draft: Draft


# decided when the editor opens, never inferred at save time
DraftAction = Union[NewNote, EditNote]
