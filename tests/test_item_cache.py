import threading
import time

from item_cache import ItemCache
from models import OrderItem
from order_locks import OrderLocks


def test_round_trip_preserves_order():
    cache = ItemCache()
    items = [OrderItem("B", 1), OrderItem("A", 3), OrderItem("B", 2)]

    cache.put("YM-1", items)

    assert cache.get("YM-1") == items
    assert "YM-1" in cache
    assert len(cache) == 1


def test_missing_key_is_none():
    assert ItemCache().get("YM-404") is None


def test_empty_list_is_not_a_miss():
    cache = ItemCache()
    cache.put("YM-1", [])
    assert cache.get("YM-1") == []


def test_callers_cannot_mutate_cached_items():
    cache = ItemCache()
    items = [OrderItem("A", 1)]
    cache.put("YM-1", items)

    items.append(OrderItem("B", 1))
    cache.get("YM-1").append(OrderItem("C", 1))

    assert cache.get("YM-1") == [OrderItem("A", 1)]


def test_delete():
    cache = ItemCache()
    cache.put("YM-1", [OrderItem("A", 1)])

    assert cache.delete("YM-1") is True
    assert cache.delete("YM-1") is False
    assert cache.get("YM-1") is None


class TestOrderLocks:

    def test_same_key_is_serialized(self):
        locks = OrderLocks()
        active = []
        overlaps = []

        def work():
            with locks.hold("YM-1"):
                if active:
                    overlaps.append(True)
                active.append(1)
                time.sleep(0.01)
                active.pop()

        threads = [threading.Thread(target=work) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert overlaps == []
        assert len(locks) == 0

    def test_different_keys_do_not_block(self):
        locks = OrderLocks()
        entered = threading.Event()

        def other():
            with locks.hold("YM-2"):
                entered.set()

        with locks.hold("YM-1"):
            t = threading.Thread(target=other)
            t.start()
            assert entered.wait(timeout=1)
            t.join()

    def test_released_on_exception(self):
        locks = OrderLocks()
        try:
            with locks.hold("YM-1"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        with locks.hold("YM-1"):
            assert len(locks) == 1
        assert len(locks) == 0
