import logging
import threading

logger = logging.getLogger(__name__)


class ItemCache:
    """
    In-memory line items per external order key.

    Yandex only sends items with ORDER_CREATED, so they are kept here until the
    order ships or is cancelled. Contents are lost on restart.
    """

    def __init__(self):
        self._items = {}
        self._lock = threading.Lock()

    def put(self, key, items):
        with self._lock:
            self._items[key] = list(items)
        logger.debug("[CACHE] Stored %d items: orderId=\"%s\"", len(items), key)

    def get(self, key):
        with self._lock:
            items = self._items.get(key)
        return list(items) if items is not None else None

    def delete(self, key):
        with self._lock:
            removed = self._items.pop(key, None)
        if removed is not None:
            logger.debug("[CACHE] Cleared items: orderId=\"%s\"", key)
        return removed is not None

    def __contains__(self, key):
        with self._lock:
            return key in self._items

    def __len__(self):
        with self._lock:
            return len(self._items)
