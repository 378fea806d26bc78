import asyncio
import os

# must be set before anything imports notekeep.shared.config
os.environ["DB_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("API_KEY", None)

import pytest
from sqlalchemy.orm import sessionmaker

from notekeep.shared.db import Base, make_engine
from notekeep.auth import models as auth_models  # noqa: F401
from notekeep.notes import models as notes_models  # noqa: F401
from notekeep.auth.provider import LocalAuthProvider
from notekeep.notes.gateway import MutationGateway
from notekeep.notes.store import NoteStore
from notekeep.notes.subscriber import CollectionSubscriber


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def store(session_factory) -> NoteStore:
    return NoteStore(session_factory)


@pytest.fixture
def subscriber(store) -> CollectionSubscriber:
    return CollectionSubscriber(store)


@pytest.fixture
def gateway(store) -> MutationGateway:
    return MutationGateway(store)


@pytest.fixture
def auth(session_factory) -> LocalAuthProvider:
    return LocalAuthProvider(session_factory)


async def next_snapshot(q: asyncio.Queue, timeout: float = 1.0):
    return await asyncio.wait_for(q.get(), timeout)


async def eventually(predicate, timeout: float = 1.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)
