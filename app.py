import json
import logging
from datetime import datetime, timezone

from flask import Flask, current_app, request, jsonify
from flask.json.provider import DefaultJSONProvider
from werkzeug.exceptions import BadRequest
from config import Config
from handlers.notification import handle_order_notification
from handlers.order_lifecycle import OrderLifecycle
from models import OrderNotification
from moysklad_api import MoySkladClient
from signature import verify_signature
from sku_mapping import SkuMapping
from slack_notify import notify_order_failure

logger = logging.getLogger(__name__)


def _reject_constant(name):
    raise ValueError(f"Invalid JSON constant: {name}")


class StrictJSONProvider(DefaultJSONProvider):
    """Refuses NaN and Infinity, which are not JSON"""

    def loads(self, s, **kwargs):
        kwargs.setdefault("parse_constant", _reject_constant)
        return super().loads(s, **kwargs)


def _now_iso():
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _integration_info(time):
    return {
        "version": Config.INTEGRATION_VERSION,
        "name": Config.INTEGRATION_NAME,
        "time": time
    }


def build_lifecycle():
    """Wire the production order lifecycle from Config; fails fast on bad setup"""
    missing = Config.missing_required()
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")
    Config.log_summary()

    mapping = SkuMapping.load(Config.MAPPING_PATH)
    return OrderLifecycle(MoySkladClient(), mapping, org_id=Config.ORG_ID, store_id=Config.STORE_ID)


def create_app(lifecycle=None):
    app = Flask(__name__)
    app.json = StrictJSONProvider(app)
    app.config["ORDER_LIFECYCLE"] = lifecycle or build_lifecycle()
    app.config["WEBHOOK_SECRET"] = Config.WEBHOOK_SECRET
    app.config["WEBHOOK_REJECT_INVALID"] = Config.WEBHOOK_REJECT_INVALID

    app.add_url_rule("/health", "health", health, methods=["GET"])
    app.add_url_rule("/webhook", "webhook_ready", webhook_ready, methods=["GET"])
    app.add_url_rule("/notification", "notification_ready", notification_ready, methods=["GET"])
    app.add_url_rule("/webhook", "webhook", receive_notification, methods=["POST"])
    app.add_url_rule("/notification", "notification", receive_notification, methods=["POST"])
    return app


def health():
    lifecycle = current_app.config["ORDER_LIFECYCLE"]
    return jsonify({
        "status": "healthy",
        "mappings": len(lifecycle.mapping),
        "cachedOrders": len(lifecycle.cache)
    }), 200


def webhook_ready():
    return jsonify({
        "status": "ok",
        "message": "Webhook endpoint is ready",
        "version": Config.INTEGRATION_VERSION
    }), 200


def notification_ready():
    # Yandex checks this endpoint when the integration is registered
    logger.info("[NOTIFICATION] GET request received from Yandex verification")
    return jsonify(_integration_info(_now_iso())), 200


def receive_notification():
    started = _now_iso()
    notification_type = None
    order_id = None

    try:
        payload = request.get_json(force=True)
    except BadRequest as e:
        logger.error("[WEBHOOK] Malformed JSON: error=\"%s\"", e)
        return jsonify({"error": "Invalid JSON payload"}), 400

    if not isinstance(payload, dict):
        logger.error("[WEBHOOK] Invalid request body: body is not an object")
        return jsonify({"error": "Invalid request body"}), 400

    if not verify_signature(
        request.headers, payload, current_app.config["WEBHOOK_SECRET"], raw_body=request.get_data()
    ):
        if current_app.config["WEBHOOK_REJECT_INVALID"]:
            return jsonify({"error": "Invalid signature"}), 401
        logger.warning("[WEBHOOK] Continuing with unverified notification")

    try:
        notification = OrderNotification.from_payload(payload)
        notification_type = notification.raw_type
        order_id = notification.order_id
        logger.info("[WEBHOOK] Received notification: type=\"%s\", orderId=\"%s\"", notification_type, order_id or "N/A")
        logger.debug("[WEBHOOK] Full payload: %s", json.dumps(payload, ensure_ascii=False))

        outcome = handle_order_notification(notification, current_app.config["ORDER_LIFECYCLE"])
    except Exception as e:
        logger.exception(
            "[WEBHOOK] System error: notificationType=\"%s\", orderId=\"%s\", error=\"%s\"",
            notification_type, order_id, e,
        )
        notify_order_failure(notification_type, order_id, e)
        # Always 200, Yandex redelivers on any other status
        body = _integration_info(started)
        body.update({"status": "error", "error": str(e)})
        if order_id:
            body["orderId"] = order_id
        return jsonify(body), 200

    body = _integration_info(started)
    if outcome["status"] == "ping":
        return jsonify(body), 200

    body["status"] = outcome["status"]
    if outcome["status"] == "processed":
        body["orderId"] = order_id
    return jsonify(body), 200


if __name__ == "__main__":
    logging.basicConfig(level=Config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app()
    app.run(port=Config.PORT, debug=Config.DEBUG)
