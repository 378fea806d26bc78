# notekeep/shared/auth.py
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError  # python-jose[cryptography]
from sqlalchemy.orm import Session

from notekeep.auth.models import Identity
from notekeep.auth.service import get_identity
from notekeep.shared.db import get_db
from notekeep.shared.config import settings

bearer = HTTPBearer(auto_error=False, scheme_name="bearerAuth")

def create_access_token(
    ident: Identity,
    extra: Optional[Dict[str, Any]] = None,
    minutes: Optional[int] = None,
) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=minutes or settings.JWT_EXPIRE_MIN)
    payload: Dict[str, Any] = {
        "sub": ident.id,
        "email": ident.email,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.JWT_KEY, algorithm=settings.JWT_ALG)

def decode_access_token(token: str) -> Identity:
    try:
        payload = jwt.decode(token, settings.JWT_KEY, algorithms=[settings.JWT_ALG])
    except JWTError as e:
        raise HTTPException(401, f"invalid token: {e}")

    sub = payload.get("sub")
    if not sub:
        raise HTTPException(401, "invalid token: missing sub")
    return Identity(id=sub, email=payload.get("email"))

def get_user(creds: HTTPAuthorizationCredentials = Depends(bearer), db: Session = Depends(get_db)) -> Identity:
    if not creds:
        raise HTTPException(401, "missing bearer token")
    ident = get_identity(db, decode_access_token(creds.credentials).id)
    if ident is None:
        # account removed after the token was issued
        raise HTTPException(401, "invalid token: unknown user")
    return ident
