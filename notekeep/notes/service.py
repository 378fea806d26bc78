from notekeep.shared.config import settings
from notekeep.shared.db import SessionLocal
from notekeep.shared.sse import ChangeFeed
from notekeep.notes.gateway import MutationGateway
from notekeep.notes.store import NoteStore
from notekeep.notes.subscriber import CollectionSubscriber

# process-wide wiring; routes take these through Depends so tests can override
_feed = ChangeFeed(maxsize=settings.FEED_QUEUE_MAX)
_store = NoteStore(SessionLocal, feed=_feed)
_subscriber = CollectionSubscriber(_store)
_gateway = MutationGateway(_store)

def get_subscriber() -> CollectionSubscriber:
    return _subscriber

def get_gateway() -> MutationGateway:
    return _gateway
