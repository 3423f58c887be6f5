import pytest

from app import create_app
from fakes import FakeMoySklad
from handlers.order_lifecycle import OrderLifecycle
from item_cache import ItemCache
from sku_mapping import SkuMapping


@pytest.fixture
def moysklad():
    return FakeMoySklad()


@pytest.fixture
def mapping():
    return SkuMapping({"A": "P1", "B": "P2"})


@pytest.fixture
def cache():
    return ItemCache()


@pytest.fixture
def lifecycle(moysklad, mapping, cache):
    return OrderLifecycle(moysklad, mapping, cache=cache, org_id="org-1", store_id="store-1")


@pytest.fixture
def client(lifecycle):
    app = create_app(lifecycle)
    app.config["TESTING"] = True
    return app.test_client()
