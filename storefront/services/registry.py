# storefront/services/registry.py
import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class ClientRegistry(Generic[T]):
    """
    In-process, per-browser holder for transient objects (wizards,
    feeds). Nothing here survives a restart, which is the point: a
    checkout draft is never persisted.
    """

    def __init__(self) -> None:
        self._items: dict[str, T] = {}
        self._lock = threading.Lock()

    def get(self, client_id: str) -> T | None:
        with self._lock:
            return self._items.get(client_id)

    def get_or_create(self, client_id: str, factory: Callable[[], T]) -> T:
        with self._lock:
            item = self._items.get(client_id)
            if item is None:
                item = factory()
                self._items[client_id] = item
            return item

    def put(self, client_id: str, item: T) -> T:
        with self._lock:
            self._items[client_id] = item
            return item

    def discard(self, client_id: str) -> None:
        with self._lock:
            self._items.pop(client_id, None)
