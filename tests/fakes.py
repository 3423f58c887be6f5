from moysklad_api import validate_positions

BASE = "https://ms.test/api/remap/1.2"


class FakeMoySklad:
    """In-memory stand-in for MoySkladClient that remembers created documents."""

    def __init__(self):
        self.customer_orders = {}
        self.demands = {}
        self.created_customer_orders = []
        self.created_demands = []
        self.deleted = []
        self.fail_with = None

    def _doc(self, entity_type, external_number, positions, **extra):
        doc = {
            "id": f"{entity_type}-{external_number}",
            "externalNumber": external_number,
            "positions": positions,
            "meta": {"href": f"{BASE}/entity/{entity_type}/{entity_type}-{external_number}", "type": entity_type},
        }
        doc.update(extra)
        return doc

    def find_customer_order(self, external_number):
        if self.fail_with:
            raise self.fail_with
        return self.customer_orders.get(external_number)

    def find_demand(self, external_number):
        if self.fail_with:
            raise self.fail_with
        return self.demands.get(external_number)

    def create_customer_order(self, external_number, positions, org_id, store_id, description=None):
        validate_positions(positions)
        doc = self._doc("customerorder", external_number, positions)
        self.customer_orders[external_number] = doc
        self.created_customer_orders.append(doc)
        return doc

    def create_demand(self, external_number, positions, org_id, store_id, customer_order=None, description=None):
        validate_positions(positions)
        doc = self._doc("demand", external_number, positions, customerOrder=customer_order)
        self.demands[external_number] = doc
        self.created_demands.append(doc)
        return doc

    def delete_customer_order(self, href, external_number=None):
        self.deleted.append(href)
        for key, doc in list(self.customer_orders.items()):
            if doc["meta"]["href"] == href:
                del self.customer_orders[key]

