import uuid, bcrypt
from email_validator import validate_email, EmailNotValidError
from sqlalchemy.orm import Session
from notekeep.auth.models import User, Identity
from notekeep.shared.config import settings


class AuthProviderError(Exception):
    """Provider-coded auth failure, e.g. ``auth/wrong-password``."""

    def __init__(self, code: str, message: str | None = None):
        super().__init__(message or code)
        self.code = code


def _hash(pw: str) -> str:
    return bcrypt.hashpw(pw.encode(), bcrypt.gensalt()).decode()

def _verify(pw: str, ph: str) -> bool:
    try: return bcrypt.checkpw(pw.encode(), ph.encode())
    except ValueError: return False

def _normalize_email(email: str) -> str:
    try:
        info = validate_email((email or "").strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise AuthProviderError("auth/invalid-email", str(e)) from e
    return info.normalized.lower()

def register_user(db: Session, email: str, password: str) -> Identity:
    email = _normalize_email(email)
    if len(password or "") < settings.MIN_PASSWORD_LEN:
        raise AuthProviderError("auth/weak-password")
    if db.query(User).filter(User.email == email).first():
        raise AuthProviderError("auth/email-already-in-use")
    u = User(id=uuid.uuid4().hex, email=email, password_hash=_hash(password))
    db.add(u); db.commit(); db.refresh(u)
    return Identity(id=u.id, email=u.email)

def authenticate_user(db: Session, email: str, password: str) -> Identity:
    u = db.query(User).filter(User.email == _normalize_email(email)).first()
    if not u:
        raise AuthProviderError("auth/user-not-found")
    if not _verify(password or "", u.password_hash):
        raise AuthProviderError("auth/wrong-password")
    return Identity(id=u.id, email=u.email)

def get_identity(db: Session, user_id: str) -> Identity | None:
    u = db.get(User, user_id)
    return Identity(id=u.id, email=u.email) if u else None
