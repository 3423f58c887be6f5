import json
from unittest.mock import MagicMock

from generate_mapping import build_mapping, fetch_products, generate_mapping, index_products, unique_offers


def test_unique_offers_prefers_shop_sku_and_drops_duplicates():
    offers = [
        {"shopSku": "A", "offerId": "ignored", "name": "First"},
        {"offerId": "A", "name": "Duplicate"},
        {"offerId": "B"},
        {"name": "no id"},
    ]
    assert unique_offers(offers) == [{"offerId": "A", "name": "First"}, {"offerId": "B", "name": None}]


def test_article_wins_over_code_and_external_code():
    products = [
        {"id": "p-code", "code": "X"},
        {"id": "p-article", "article": "X"},
        {"id": "p-ext", "externalCode": "X", "code": "Y"},
    ]
    index = index_products(products)
    assert index["X"]["id"] == "p-article"
    assert index["Y"]["id"] == "p-ext"


def test_build_mapping_reports_unmatched():
    products = [{"id": "p1", "article": "A"}, {"id": "p2", "externalCode": "C"}]
    offers = [{"offerId": "A"}, {"offerId": "B"}, {"offerId": "C"}]

    mapping, unmatched = build_mapping(products, offers)

    assert mapping == {"A": "p1", "C": "p2"}
    assert unmatched == [{"offerId": "B"}]


def test_fetch_products_pages_until_short_page():
    client = MagicMock()
    client.list_products.side_effect = [[{"id": 1}, {"id": 2}], [{"id": 3}]]

    assert fetch_products(client, page_size=2) == [{"id": 1}, {"id": 2}, {"id": 3}]
    assert client.list_products.call_args.kwargs == {"limit": 2, "offset": 2}


def test_generate_mapping_writes_file(tmp_path):
    moysklad = MagicMock()
    moysklad.list_products.return_value = [{"id": "p1", "article": "A", "name": "Thing"}]
    yandex = MagicMock()
    yandex.get_all_offers.return_value = [{"offerId": "A"}, {"offerId": "Z"}]
    path = tmp_path / "mapping.json"

    mapping = generate_mapping(moysklad, yandex, path)

    assert mapping == {"A": "p1"}
    assert json.loads(path.read_text(encoding="utf-8")) == {"A": "p1"}
