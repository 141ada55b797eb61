import threading
from collections import OrderedDict
from collections.abc import Hashable


class DecryptionCache:
    """Bounded LRU cache of decrypted secrets keyed by ``(record_id, version)``.

    The version is the record's last-modified marker, so an updated secret is
    never served from a stale entry.
    """

    def __init__(self, max_entries: int = 512) -> None:
        self._max_entries = max(1, int(max_entries))
        self._entries: OrderedDict[tuple[Hashable, Hashable], str] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, record_id: Hashable, version: Hashable) -> str | None:
        key = (record_id, version)
        with self._lock:
            value = self._entries.get(key)
            if value is not None:
                self._entries.move_to_end(key)
            return value

    def put(self, record_id: Hashable, version: Hashable, plaintext: str) -> None:
        key = (record_id, version)
        with self._lock:
            self._entries[key] = plaintext
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)
