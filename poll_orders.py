"""
Fallback delivery path: poll Yandex for PROCESSING orders and reserve them in
MoySklad through the same idempotent lifecycle the webhook uses.
"""
import argparse
import logging
import time

import requests
from app import build_lifecycle
from config import Config
from handlers.order_lifecycle import OrderSyncError
from models import OrderItem, external_order_key
from moysklad_api import MoySkladError
from slack_notify import send_slack_notification
from yandex_api import YandexMarketClient

logger = logging.getLogger(__name__)


def order_items(order):
    return [
        OrderItem(offer_id=item.get("offerId") or item.get("shopSku"), count=item.get("count") or 1)
        for item in order.get("items") or []
    ]


def poll_once(yandex, lifecycle):
    """One polling pass; returns {external_number: status} for the orders seen"""
    try:
        orders = yandex.get_orders(status="PROCESSING")
    except requests.RequestException as e:
        logger.error("[POLL] Failed to fetch orders: error=\"%s\"", e)
        return {}

    logger.info("[POLL] Found %d PROCESSING orders", len(orders))
    results = {}
    for order in orders:
        external_number = external_order_key(order.get("id"))
        # Seed the cache unless a webhook already did, then reserve
        if external_number not in lifecycle.cache:
            lifecycle.cache_items(external_number, order_items(order))
        try:
            results[external_number] = lifecycle.reserve(external_number)["status"]
        except (OrderSyncError, MoySkladError, ValueError) as e:
            logger.error("[POLL] Failed to reserve: orderId=\"%s\", error=\"%s\"", external_number, e)
            send_slack_notification(f"❌ *Poll reserve failed*: {external_number}: {e}")
            results[external_number] = "error"
    return results


def run_forever(yandex, lifecycle, interval):
    logger.info("[POLL] Polling every %d seconds", interval)
    while True:
        poll_once(yandex, lifecycle)
        time.sleep(interval)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Poll Yandex Market for PROCESSING orders")
    parser.add_argument("--once", action="store_true", help="run a single pass and exit")
    parser.add_argument("--interval", type=int, default=Config.POLL_INTERVAL_SECONDS)
    args = parser.parse_args(argv)

    logging.basicConfig(level=Config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    lifecycle = build_lifecycle()
    yandex = YandexMarketClient()

    if args.once:
        poll_once(yandex, lifecycle)
    else:
        run_forever(yandex, lifecycle, args.interval)


if __name__ == "__main__":
    main()
