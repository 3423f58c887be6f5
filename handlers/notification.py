import logging

from models import (
    SHIPMENT_STATUSES,
    STATUS_CANCELLED,
    STATUS_PROCESSING,
    NotificationType,
    external_order_key,
)

logger = logging.getLogger(__name__)


def handle_status_updated(notification, lifecycle):
    """Pick the transition for an ORDER_STATUS_UPDATED notification"""
    external_number = external_order_key(notification.order_id)
    status = notification.status
    logger.info("[ORDER_STATUS_UPDATED] Processing order: orderId=\"%s\", newStatus=\"%s\"", external_number, status)

    if status == STATUS_PROCESSING:
        return lifecycle.reserve(external_number)
    if status in SHIPMENT_STATUSES:
        # PICKUP is FBS self-pickup, DELIVERED is express delivery
        return lifecycle.ship(external_number)
    if status == STATUS_CANCELLED:
        return lifecycle.cancel(external_number)

    logger.info("[ORDER_STATUS_UPDATED] Status ignored: orderId=\"%s\", status=\"%s\"", external_number, status)
    return {"status": "ignored"}


def handle_order_notification(notification, lifecycle):
    """
    Route a decoded Yandex notification.
    Returns the response status and the transition result; transition errors propagate.
    """
    kind = notification.notification_type

    if kind == NotificationType.PING:
        logger.info("[WEBHOOK] PING received - responding with integration info")
        return {"status": "ping", "result": None}

    order_kinds = (NotificationType.ORDER_CREATED, NotificationType.ORDER_STATUS_UPDATED)
    if kind in order_kinds and not notification.order_id:
        # Without an id there is no key to correlate on
        logger.warning("[WEBHOOK] Notification without orderId skipped: type=\"%s\"", notification.raw_type)
        return {"status": "received", "result": {"status": "missing_order_id"}}

    if kind == NotificationType.ORDER_CREATED:
        external_number = external_order_key(notification.order_id)
        logger.info(
            "[ORDER_CREATED] Processing order: orderId=\"%s\", campaignId=\"%s\", createdAt=\"%s\"",
            external_number, notification.campaign_id, notification.created_at,
        )
        result = lifecycle.cache_items(external_number, notification.items)
        return {"status": "processed", "result": result}

    if kind == NotificationType.ORDER_STATUS_UPDATED:
        result = handle_status_updated(notification, lifecycle)
        return {"status": "processed", "result": result}

    logger.info("[WEBHOOK] Event type not handled: type=\"%s\"", notification.raw_type)
    return {"status": "received", "result": None}
