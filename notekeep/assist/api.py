# notekeep/assist/api.py
from functools import lru_cache

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from notekeep.shared.auth import get_user
from notekeep.shared.http import ok
from notekeep.auth.models import Identity
from .service import SuggestionClient

router = APIRouter(prefix="/assist", tags=["Assist"])

@lru_cache(maxsize=1)
def get_suggestions() -> SuggestionClient:
    return SuggestionClient.from_settings()

class GenerateIn(BaseModel):
    prompt: str = Field(min_length=1)
    existing_content: str = ""

@router.post("/generate")
async def api_generate(inb: GenerateIn, user: Identity = Depends(get_user), client: SuggestionClient = Depends(get_suggestions)):
    text = await client.generate(inb.prompt, inb.existing_content)
    return ok({"text": text})
