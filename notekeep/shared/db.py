from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from notekeep.shared.config import settings

# Local SQLite DB under ./storage/ (created if missing) unless DB_URL is set
ROOT = Path(__file__).resolve().parents[2]   # project root
STORAGE_DIR = ROOT / "storage"


def _default_url() -> str:
    STORAGE_DIR.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{(STORAGE_DIR / 'notekeep.db').as_posix()}"


def make_engine(url: str | None = None) -> Engine:
    url = url or settings.DB_URL or _default_url()
    if url == "sqlite://" or url == "sqlite:///:memory:":
        # one shared connection so every session sees the same in-memory db
        return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url)


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

class Base(DeclarativeBase):
    pass

# FastAPI dep
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
