import logging

from config import Config
from item_cache import ItemCache
from order_locks import OrderLocks

logger = logging.getLogger(__name__)

ITEMS_CACHED = "items_cached"
NO_ITEMS = "no_items"
RESERVED = "reserved"
SHIPPED = "shipped"
DELETED = "deleted"
NOT_FOUND = "not_found"
ALREADY_EXISTS = "already_exists"


class OrderSyncError(Exception):
    """A transition could not be completed for this notification"""

    def __init__(self, external_number, message):
        self.external_number = external_number
        super().__init__(message)


class CacheMissError(OrderSyncError):
    """No cached items: ORDER_CREATED was missed or arrived out of order"""

    def __init__(self, external_number):
        super().__init__(external_number, "No cached items found for order")


class NoMappedPositionsError(OrderSyncError):
    """Items are known but none of their SKUs map to a MoySklad product"""

    def __init__(self, external_number):
        super().__init__(external_number, "No mapped products found for order")


class OrderLifecycle:
    """
    Transitions of one Yandex order against MoySklad:

        ORDER_CREATED          -> cache items
        PROCESSING             -> create Customer Order (reserve)
        PICKUP / DELIVERED     -> create Demand (shipment), clear cache
        CANCELLED              -> delete Customer Order, clear cache

    No order state is stored here. Each transition asks MoySklad whether its
    document already exists, which makes redelivered webhooks harmless.
    Transitions for the same key are serialized by a per-key lock.
    """

    def __init__(self, client, mapping, cache=None, locks=None, org_id=None, store_id=None):
        self.client = client
        self.mapping = mapping
        self.cache = cache if cache is not None else ItemCache()
        self.locks = locks if locks is not None else OrderLocks()
        self.org_id = org_id or Config.ORG_ID
        self.store_id = store_id or Config.STORE_ID

    def map_positions(self, external_number, items):
        """Translate cached items to MoySklad positions, dropping unmapped SKUs"""
        positions = []
        unmapped = []
        for item in items:
            product_id = self.mapping.resolve(item.offer_id)
            if not product_id:
                logger.error(
                    "[MAPPING] Unmapped SKU: orderId=\"%s\", sku=\"%s\", quantity=\"%s\"",
                    external_number, item.offer_id, item.count,
                )
                unmapped.append(item.offer_id)
                continue
            logger.debug("[MAPPING] Mapped: SKU=\"%s\" -> ProductID=\"%s\", qty=%s", item.offer_id, product_id, item.count)
            positions.append({"productId": product_id, "quantity": item.count})

        if unmapped:
            logger.warning(
                "[MAPPING] Order has unmapped SKUs: orderId=\"%s\", unmappedCount=%d, mappedCount=%d, unmappedSkus=[%s]",
                external_number, len(unmapped), len(positions), ", ".join(str(s) for s in unmapped),
            )
        return positions

    def _positions_from_cache(self, external_number, stage):
        items = self.cache.get(external_number)
        if items is None:
            logger.error("[%s] No cached items found: orderId=\"%s\"", stage, external_number)
            raise CacheMissError(external_number)

        positions = self.map_positions(external_number, items)
        if not positions:
            logger.error("[%s] No mapped positions found: orderId=\"%s\"", stage, external_number)
            raise NoMappedPositionsError(external_number)

        logger.info("[%s] Mapped positions: orderId=\"%s\", count=%d", stage, external_number, len(positions))
        return positions

    def cache_items(self, external_number, items):
        """Remember the order's items until a later status needs them"""
        if items is None:
            logger.warning("[ORDER_CREATED] No items in notification: orderId=\"%s\"", external_number)
            return {"status": NO_ITEMS}

        with self.locks.hold(external_number):
            self.cache.put(external_number, items)
        logger.info("[ORDER_CREATED] Saved %d items to cache: orderId=\"%s\"", len(items), external_number)
        return {"status": ITEMS_CACHED, "count": len(items)}

    def reserve(self, external_number):
        with self.locks.hold(external_number):
            existing = self.client.find_customer_order(external_number)
            if existing:
                logger.info("[PROCESSING] Customer Order already exists: orderId=\"%s\", skipping creation", external_number)
                return {"status": ALREADY_EXISTS, "entityId": existing.get("id")}

            positions = self._positions_from_cache(external_number, "PROCESSING")
            order = self.client.create_customer_order(external_number, positions, self.org_id, self.store_id)

        # Items stay cached, the shipment still needs them
        logger.info(
            "[PROCESSING] Customer Order created (reserve applied): orderId=\"%s\", entityId=\"%s\"",
            external_number, order.get("id", "unknown"),
        )
        return {"status": RESERVED, "entityId": order.get("id")}

    def _find_reservation_for_link(self, external_number):
        try:
            reservation = self.client.find_customer_order(external_number)
        except Exception as e:
            logger.warning(
                "[PICKUP] Failed to search Customer Order: orderId=\"%s\", error=\"%s\", creating Demand without link",
                external_number, e,
            )
            return None
        if reservation:
            logger.info("[PICKUP] Found Customer Order for linking: orderId=\"%s\"", external_number)
        else:
            logger.warning("[PICKUP] Customer Order not found: orderId=\"%s\", creating Demand without link", external_number)
        return reservation

    def ship(self, external_number):
        with self.locks.hold(external_number):
            existing = self.client.find_demand(external_number)
            if existing:
                logger.info("[PICKUP] Demand already exists: orderId=\"%s\", skipping creation", external_number)
                return {"status": ALREADY_EXISTS, "entityId": existing.get("id")}

            positions = self._positions_from_cache(external_number, "PICKUP")
            reservation = self._find_reservation_for_link(external_number)
            demand = self.client.create_demand(
                external_number, positions, self.org_id, self.store_id, customer_order=reservation
            )
            self.cache.delete(external_number)

        logger.info(
            "[PICKUP] Demand created, stock written off: orderId=\"%s\", entityId=\"%s\"",
            external_number, demand.get("id", "unknown"),
        )
        return {"status": SHIPPED, "entityId": demand.get("id")}

    def cancel(self, external_number):
        with self.locks.hold(external_number):
            existing = self.client.find_customer_order(external_number)
            if not existing:
                self.cache.delete(external_number)
                logger.info("[CANCELLED] Customer Order not found: orderId=\"%s\", nothing to delete", external_number)
                return {"status": NOT_FOUND}

            self.client.delete_customer_order(existing["meta"]["href"], external_number)
            self.cache.delete(external_number)

        logger.info(
            "[CANCELLED] Customer Order deleted (reserve removed): orderId=\"%s\", entityId=\"%s\"",
            external_number, existing.get("id"),
        )
        return {"status": DELETED, "entityId": existing.get("id")}
