from dataclasses import dataclass, field
from enum import Enum

from config import Config


class NotificationType(str, Enum):
    PING = "PING"
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_STATUS_UPDATED = "ORDER_STATUS_UPDATED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value):
        """Map a raw notificationType to a member; anything unrecognised is UNKNOWN"""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


# Statuses that drive a transition
STATUS_PROCESSING = "PROCESSING"
STATUS_PICKUP = "PICKUP"
STATUS_DELIVERED = "DELIVERED"
STATUS_CANCELLED = "CANCELLED"

SHIPMENT_STATUSES = (STATUS_PICKUP, STATUS_DELIVERED)


@dataclass(frozen=True)
class OrderItem:
    offer_id: str
    count: int

    @classmethod
    def from_payload(cls, item):
        # Missing or zero count counts as a single unit
        return cls(offer_id=item.get("offerId"), count=item.get("count") or 1)


@dataclass
class OrderNotification:
    """Decoded marketplace webhook. Unknown payload fields are ignored."""

    notification_type: NotificationType
    raw_type: str = None
    order_id: str = None
    campaign_id: str = None
    status: str = None
    items: list = None
    created_at: str = None
    payload: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_payload(cls, payload):
        raw_items = payload.get("items")
        items = None
        if isinstance(raw_items, list):
            items = [OrderItem.from_payload(item) for item in raw_items if isinstance(item, dict)]

        order_id = payload.get("orderId")
        return cls(
            notification_type=NotificationType.parse(payload.get("notificationType")),
            raw_type=payload.get("notificationType"),
            order_id=str(order_id) if order_id is not None else None,
            campaign_id=payload.get("campaignId"),
            status=payload.get("status") or payload.get("newStatus"),
            items=items,
            created_at=payload.get("createdAt"),
            payload=payload,
        )


def external_order_key(order_id, prefix=None):
    """Key correlating a marketplace order with its warehouse documents"""
    if prefix is None:
        prefix = Config.ORDER_KEY_PREFIX
    return f"{prefix}{order_id}"
