import logging
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


class Config:
    # MoySklad API Settings
    MOYSKLAD_BASE = os.getenv("MOYSKLAD_BASE", "https://api.moysklad.ru/api/remap/1.2")
    MOYSKLAD_LOGIN = os.getenv("MOYSKLAD_LOGIN")
    MOYSKLAD_TOKEN = os.getenv("MOYSKLAD_TOKEN") or os.getenv("MOYSKLAD_PASSWORD")

    # Warehouse document references
    STORE_ID = os.getenv("STORE_ID")
    ORG_ID = os.getenv("ORG_ID")
    DEFAULT_AGENT_ID = os.getenv("DEFAULT_AGENT_ID")

    # Yandex Market Settings
    YANDEX_API_BASE = os.getenv("YANDEX_API_BASE", "https://api.partner.market.yandex.ru")
    YANDEX_TOKEN = os.getenv("YANDEX_TOKEN")
    YANDEX_CAMPAIGN_ID = os.getenv("YANDEX_CAMPAIGN_ID")
    ORDER_KEY_PREFIX = os.getenv("ORDER_KEY_PREFIX", "YM-")

    # Webhook Settings
    WEBHOOK_SECRET = os.getenv("WEBHOOK_SECRET")
    WEBHOOK_REJECT_INVALID = os.getenv("WEBHOOK_REJECT_INVALID", "False").lower() == "true"

    # SKU mapping produced by generate_mapping.py
    MAPPING_PATH = os.getenv("MAPPING_PATH", "mapping.json")

    # Slack Settings
    SLACK_WEBHOOK_URL = os.getenv("SLACK_WEBHOOK_URL")

    # Poller Settings
    POLL_INTERVAL_SECONDS = int(os.getenv("POLL_INTERVAL_SECONDS", 300))

    # App Settings
    PORT = int(os.getenv("PORT", 5000))
    DEBUG = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    INTEGRATION_NAME = os.getenv("INTEGRATION_NAME", "Yandex-MoySklad Integration")
    INTEGRATION_VERSION = os.getenv("INTEGRATION_VERSION", "1.0.0")

    REQUIRED = ("MOYSKLAD_BASE", "MOYSKLAD_TOKEN", "STORE_ID", "ORG_ID")

    @classmethod
    def missing_required(cls):
        """Names of required settings that are not set"""
        return [name for name in cls.REQUIRED if not getattr(cls, name)]

    @classmethod
    def log_summary(cls):
        """Log the loaded configuration without secret values"""
        logger.info("[CONFIG] MoySklad base URL: %s", cls.MOYSKLAD_BASE)
        logger.info("[CONFIG] MoySklad login: %s", cls.MOYSKLAD_LOGIN or "not set")
        logger.info("[CONFIG] Store ID: %s", cls.STORE_ID)
        logger.info("[CONFIG] Organization ID: %s", cls.ORG_ID)
        logger.info("[CONFIG] Counterparty ID: %s", cls.DEFAULT_AGENT_ID or "not set")
        logger.info(
            "[CONFIG] Webhook secret: %s",
            "configured" if cls.WEBHOOK_SECRET else "not configured (verification disabled)",
        )
        logger.info("[CONFIG] Reject invalid signatures: %s", cls.WEBHOOK_REJECT_INVALID)
        logger.info("[CONFIG] Mapping path: %s", cls.MAPPING_PATH)
        logger.info("[CONFIG] Port: %s", cls.PORT)
