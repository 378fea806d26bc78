# notekeep/auth/api.py
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from fastapi.security import OAuth2PasswordRequestForm

from notekeep.shared.db import get_db
from notekeep.shared.http import ok, err
from notekeep.shared.auth import create_access_token, get_user
from notekeep.auth.messages import friendly_auth_message
from notekeep.auth.models import Identity
from notekeep.auth.service import AuthProviderError, register_user, authenticate_user

router = APIRouter(prefix="/auth", tags=["Auth"])

class RegisterIn(BaseModel):
    email: str
    password: str

def _identity_out(ident: Identity) -> dict:
    return {"id": ident.id, "email": ident.email}

@router.post("/register", status_code=201)
def api_register(inb: RegisterIn, db: Session = Depends(get_db)):
    try:
        ident = register_user(db, inb.email, inb.password)
    except AuthProviderError as e:
        err(friendly_auth_message(e.code), code=e.code, status=400)
    token = create_access_token(ident)
    return ok(_identity_out(ident), access_token=token, token_type="bearer")

@router.post("/token")
def api_token(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    try:
        ident = authenticate_user(db, form.username, form.password)
    except AuthProviderError as e:
        err(friendly_auth_message(e.code), code=e.code, status=401)
    return {"access_token": create_access_token(ident), "token_type": "bearer"}

@router.get("/me")
def api_me(user: Identity = Depends(get_user)):
    return ok(_identity_out(user))
