import logging

import requests
from config import Config

logger = logging.getLogger(__name__)


class YandexMarketClient:
    """Read-only calls the poller and the mapping generator need"""

    def __init__(self, token=None, campaign_id=None, base_url=None, session=None):
        self.base_url = (base_url or Config.YANDEX_API_BASE).rstrip("/")
        self.token = token or Config.YANDEX_TOKEN
        self.campaign_id = campaign_id or Config.YANDEX_CAMPAIGN_ID
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
            "Content-Type": "application/json"
        }

    def get_orders(self, status="PROCESSING", limit=50):
        """Orders of the campaign currently in the given status"""
        url = f"{self.base_url}/campaigns/{self.campaign_id}/orders"
        response = self.session.get(url, headers=self.headers, params={"status": status, "limit": limit})
        response.raise_for_status()
        return response.json().get("orders", [])

    def get_offers_page(self, page_token=None, limit=200):
        url = f"{self.base_url}/campaigns/{self.campaign_id}/offers"
        params = {"limit": limit}
        if page_token:
            params["page_token"] = page_token
        response = self.session.post(url, headers=self.headers, params=params, json={})
        response.raise_for_status()
        result = response.json().get("result") or {}
        return result.get("offers", []), (result.get("paging") or {}).get("nextPageToken")

    def get_all_offers(self, max_pages=50):
        offers = []
        page_token = None
        for page in range(1, max_pages + 1):
            batch, page_token = self.get_offers_page(page_token)
            offers.extend(batch)
            logger.info("Offers page %d: %d offers so far", page, len(offers))
            if not page_token:
                return offers
        logger.warning("Stopped after %d pages, more offers remain", max_pages)
        return offers
