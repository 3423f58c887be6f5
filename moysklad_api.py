import json
import logging

import requests
from config import Config

logger = logging.getLogger(__name__)


class MoySkladError(Exception):
    """A MoySklad call failed in transport or returned a non-2xx status"""

    def __init__(self, operation, external_number, status_code=None, body=None, message=None):
        self.operation = operation
        self.external_number = external_number
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"MoySklad {operation} failed with status {status_code or 'unknown'}")


def entity_ref(base_url, entity_type, entity_id):
    """Reference object MoySklad expects for linked entities"""
    return {"meta": {"href": f"{base_url}/entity/{entity_type}/{entity_id}", "type": entity_type}}


def validate_positions(positions):
    if not positions:
        raise ValueError("Positions must not be empty")
    for index, p in enumerate(positions):
        quantity = p.get("quantity")
        if not p.get("productId"):
            raise ValueError(f"Invalid position at index {index}: missing productId")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValueError(f"Invalid position at index {index}: quantity must be a positive integer")


class MoySkladClient:
    def __init__(self, base_url=None, token=None, agent_id=None, session=None):
        self.base_url = (base_url or Config.MOYSKLAD_BASE).rstrip("/")
        self.token = token or Config.MOYSKLAD_TOKEN
        self.agent_id = agent_id or Config.DEFAULT_AGENT_ID
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json;charset=utf-8",
            "Content-Type": "application/json"
        }

    def _request(self, method, url, operation, external_number=None, **kwargs):
        try:
            response = self.session.request(method, url, headers=self.headers, **kwargs)
        except requests.RequestException as e:
            logger.error(
                "[MOYSKLAD] Request failed: orderId=\"%s\", operation=\"%s\", error=\"%s\"",
                external_number, operation, e,
            )
            raise MoySkladError(operation, external_number, message=str(e)) from e

        if not 200 <= response.status_code < 300:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            logger.error(
                "[MOYSKLAD] Request failed: orderId=\"%s\", operation=\"%s\", statusCode=\"%s\", responseBody=%s",
                external_number, operation, response.status_code, json.dumps(body, ensure_ascii=False),
            )
            raise MoySkladError(operation, external_number, response.status_code, body)

        if not response.content:
            return {}
        return response.json()

    def _document_body(self, name, external_number, positions, org_id, store_id, description):
        return {
            "name": name,
            "externalNumber": external_number,
            "organization": entity_ref(self.base_url, "organization", org_id),
            "agent": entity_ref(self.base_url, "counterparty", self.agent_id),
            "store": entity_ref(self.base_url, "store", store_id),
            "description": description,
            "positions": [
                {
                    "quantity": p["quantity"],
                    "assortment": entity_ref(self.base_url, "product", p["productId"]),
                }
                for p in positions
            ]
        }

    def _check_create_args(self, external_number, positions, org_id, store_id):
        if not external_number or not org_id or not store_id:
            raise ValueError("externalNumber, org_id and store_id are required")
        validate_positions(positions)

    def create_customer_order(self, external_number, positions, org_id, store_id, description=None):
        """Create a Customer Order (reserve) for positions [{productId, quantity}]"""
        self._check_create_args(external_number, positions, org_id, store_id)
        body = self._document_body(
            f"Reserve {external_number}", external_number, positions, org_id, store_id,
            description or f"Reserve for Yandex order {external_number}",
        )
        data = self._request(
            "POST", f"{self.base_url}/entity/customerorder", "create_customer_order", external_number, json=body
        )
        logger.info(
            "[MOYSKLAD] Customer Order created: orderId=\"%s\", entityId=\"%s\", entityHref=\"%s\"",
            external_number, data.get("id", "unknown"), data.get("meta", {}).get("href", "unknown"),
        )
        return data

    def create_demand(self, external_number, positions, org_id, store_id, customer_order=None, description=None):
        """Create a Demand (shipment), linked to its Customer Order when one is given"""
        self._check_create_args(external_number, positions, org_id, store_id)
        body = self._document_body(
            f"Shipment {external_number}", external_number, positions, org_id, store_id,
            description or f"Shipment for Yandex order {external_number}",
        )
        href = (customer_order or {}).get("meta", {}).get("href")
        if href:
            body["customerOrder"] = {"meta": {"href": href, "type": "customerorder"}}

        data = self._request(
            "POST", f"{self.base_url}/entity/demand", "create_demand", external_number, json=body
        )
        logger.info(
            "[MOYSKLAD] Demand created: orderId=\"%s\", entityId=\"%s\", entityHref=\"%s\"",
            external_number, data.get("id", "unknown"), data.get("meta", {}).get("href", "unknown"),
        )
        return data

    def _find_by_external_number(self, entity_type, external_number, operation):
        data = self._request(
            "GET", f"{self.base_url}/entity/{entity_type}", operation, external_number,
            params={"filter": f"externalNumber={external_number}"},
        )
        rows = data.get("rows") or []
        return rows[0] if rows else None

    def find_customer_order(self, external_number):
        return self._find_by_external_number("customerorder", external_number, "find_customer_order")

    def find_demand(self, external_number):
        return self._find_by_external_number("demand", external_number, "find_demand")

    def delete_customer_order(self, href, external_number=None):
        """Delete a Customer Order by its meta href; MoySklad releases the reserve"""
        self._request("DELETE", href, "delete_customer_order", external_number)

    def list_products(self, limit=1000, offset=0):
        data = self._request(
            "GET", f"{self.base_url}/entity/product", "list_products", params={"limit": limit, "offset": offset}
        )
        if "rows" not in data:
            raise MoySkladError("list_products", None, message="Response has no rows, check token and base URL")
        return data["rows"]
