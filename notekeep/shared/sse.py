import asyncio, json, logging
from typing import Any, AsyncIterator, Callable, Dict, Set, Tuple

logger = logging.getLogger(__name__)

_Sub = Tuple[asyncio.Queue, asyncio.AbstractEventLoop]


class ChangeFeed:
    """Per-owner rooms of subscriber queues.

    `publish` may be called from a worker thread (sync routes, threadpool);
    delivery is always marshalled onto the loop that owns the queue.
    """

    def __init__(self, maxsize: int = 100):
        self.maxsize = maxsize
        # owner_id -> set of (queue, loop)
        self._subs: Dict[str, Set[_Sub]] = {}

    def _room(self, key: str) -> Set[_Sub]:
        return self._subs.setdefault(key, set())

    def subscribe(self, key: str) -> asyncio.Queue:
        q: asyncio.Queue = asyncio.Queue(maxsize=self.maxsize)
        self._room(key).add((q, asyncio.get_running_loop()))
        return q

    def unsubscribe(self, key: str, q: asyncio.Queue) -> None:
        room = self._subs.get(key)
        if not room:
            return
        for sub in [s for s in room if s[0] is q]:
            room.discard(sub)
        if not room:
            self._subs.pop(key, None)

    def listeners(self, key: str) -> int:
        return len(self._subs.get(key, ()))

    def publish(self, key: str, event: str, data: dict) -> None:
        msg = (event, data)
        for q, loop in list(self._subs.get(key, ())):
            if loop.is_closed():
                continue
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is loop:
                _put(q, msg)
            else:
                loop.call_soon_threadsafe(_put, q, msg)


def _put(q: asyncio.Queue, msg) -> None:
    try:
        q.put_nowait(msg)
    except asyncio.QueueFull:
        # a queued change already forces a full re-read
        logger.debug("change feed queue full; dropping %s", msg[0])


def format_event(event: str, data: Any) -> bytes:
    payload = f"event: {event}\n" + f"data: {json.dumps(data, ensure_ascii=False)}\n\n"
    return payload.encode("utf-8")


async def sse_stream(q: asyncio.Queue, event: str, release: Callable[[], None]) -> AsyncIterator[bytes]:
    """
    Yields Server-Sent Events for every item pushed onto `q`; `release` runs on disconnect.
    """
    try:
        yield b": connected\n\n"
        while True:
            data = await q.get()
            yield format_event(event, data)
    except asyncio.CancelledError:
        # client disconnected
        pass
    finally:
        release()
