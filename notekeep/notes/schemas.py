from pydantic import BaseModel, Field
from typing import List

from notekeep.notes.palette import DEFAULT_COLOR

class NoteFields(BaseModel):
    title: str = ""
    content: str = ""
    color: str = DEFAULT_COLOR

class ColorIn(BaseModel):
    color: str = Field(min_length=1)

class NoteOut(BaseModel):
    id: str
    title: str
    content: str
    color: str
    # epoch milliseconds
    created_at: int
    updated_at: int
    owner_id: str

class Snapshot(BaseModel):
    items: List[NoteOut]
