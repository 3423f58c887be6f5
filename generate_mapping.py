"""
One-off job: build mapping.json (Yandex offerId -> MoySklad product id).

MoySklad products are matched on article first, then code, then externalCode.
"""
import json
import logging
import sys

import requests
from config import Config
from moysklad_api import MoySkladClient, MoySkladError
from yandex_api import YandexMarketClient

logger = logging.getLogger(__name__)

MATCH_FIELDS = ("article", "code", "externalCode")


def fetch_products(client, page_size=1000):
    products = []
    offset = 0
    while True:
        rows = client.list_products(limit=page_size, offset=offset)
        products.extend(rows)
        if len(rows) < page_size:
            return products
        offset += page_size


def unique_offers(offers):
    """Deduplicate offers by shopSku/offerId, keeping the first occurrence"""
    seen = {}
    for offer in offers:
        offer_id = offer.get("shopSku") or offer.get("offerId")
        if offer_id and offer_id not in seen:
            seen[offer_id] = {"offerId": offer_id, "name": offer.get("name")}
    return list(seen.values())


def index_products(products):
    index = {}
    for field in MATCH_FIELDS:
        for product in products:
            key = product.get(field)
            if key and key not in index:
                index[key] = product
    return index


def build_mapping(products, offers):
    """Returns (mapping, unmatched offers)"""
    index = index_products(products)
    mapping = {}
    unmatched = []
    for offer in offers:
        product = index.get(offer["offerId"])
        if product:
            mapping[offer["offerId"]] = product["id"]
            logger.debug("Matched: %s -> %s", offer["offerId"], product.get("name"))
        else:
            unmatched.append(offer)
    return mapping, unmatched


def write_mapping(mapping, path):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(mapping, f, ensure_ascii=False, indent=2)


def generate_mapping(moysklad, yandex, path):
    logger.info("Fetching MoySklad products...")
    products = fetch_products(moysklad)
    logger.info("MoySklad products: %d", len(products))

    logger.info("Fetching Yandex Market offers for campaign %s...", yandex.campaign_id)
    offers = unique_offers(yandex.get_all_offers())
    logger.info("Unique Yandex offers: %d", len(offers))

    mapping, unmatched = build_mapping(products, offers)
    logger.info("Matched %d of %d offers", len(mapping), len(offers))
    for offer in unmatched:
        logger.warning("No MoySklad product for offerId=%s, name=%s", offer["offerId"], offer.get("name") or "N/A")

    write_mapping(mapping, path)
    logger.info("Wrote %d mappings to %s", len(mapping), path)
    return mapping


def main():
    logging.basicConfig(level=Config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    missing = [name for name in ("MOYSKLAD_TOKEN", "YANDEX_TOKEN", "YANDEX_CAMPAIGN_ID") if not getattr(Config, name)]
    if missing:
        logger.error("Missing environment variables: %s", ", ".join(missing))
        sys.exit(1)

    try:
        generate_mapping(MoySkladClient(), YandexMarketClient(), Config.MAPPING_PATH)
    except (MoySkladError, requests.RequestException) as e:
        logger.error("Mapping generation failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
