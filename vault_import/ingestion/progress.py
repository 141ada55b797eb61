"""Progress channel: ordered event frames from a running import to one client.

The import runs on its own thread and publishes events into a queue; the
client-facing generator drains the queue and renders ``data: <json>\\n\\n``
frames. When the client goes away the channel is closed, later events are
dropped, and the import thread still runs to completion.
"""

import json
import queue
import threading
from collections.abc import Callable, Iterator

from vault_import.ingestion.models import ERROR, ProgressEvent
from vault_import.logging.logger import Log

_FINISHED = object()


def format_frame(event: ProgressEvent) -> str:
    """Render one event as a complete ``text/event-stream`` frame."""
    return f"data: {json.dumps(event.to_dict(), default=str)}\n\n"


class ProgressChannel:
    """Unbounded single-producer, single-consumer event queue."""

    def __init__(self) -> None:
        self._queue: queue.Queue[object] = queue.Queue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def publish(self, event: ProgressEvent) -> None:
        if self._closed.is_set():
            return
        self._queue.put(event)

    def finish(self) -> None:
        """Mark the producer as done. Always called after the last publish."""
        self._queue.put(_FINISHED)

    def close(self) -> None:
        """Stop accepting events (the consumer has disconnected)."""
        self._closed.set()

    def events(self) -> Iterator[ProgressEvent]:
        """Yield events in publish order, ending after the terminal event.

        If the producer finishes without a terminal event, a synthetic
        ``error`` event is yielded so the stream never ends open.
        """
        while True:
            item = self._queue.get()
            if item is _FINISHED:
                yield ProgressEvent(ERROR, {"message": "Import ended unexpectedly"})
                return
            if not isinstance(item, ProgressEvent):
                continue
            yield item
            if item.is_terminal:
                return


def stream_frames(
    run: Callable[[Callable[[ProgressEvent], None]], object],
    *,
    thread_name: str = "import-run",
) -> Iterator[str]:
    """Start ``run(publish)`` on a worker thread and yield its events as frames.

    *run* receives the publish callback and must emit exactly one terminal
    event; exceptions it raises are expected to have been reported through
    that event already.
    """
    channel = ProgressChannel()

    def worker() -> None:
        try:
            run(channel.publish)
        except Exception as exc:
            Log.debug(f"Import thread {thread_name} ended with {type(exc).__name__}: {exc}")
        finally:
            channel.finish()

    thread = threading.Thread(target=worker, name=thread_name, daemon=False)
    thread.start()
    try:
        for event in channel.events():
            yield format_frame(event)
    finally:
        channel.close()
