import logging

import requests
from config import Config

logger = logging.getLogger(__name__)


def send_slack_notification(message, webhook_url=None):
    """Send a message to Slack via Webhook"""
    webhook_url = webhook_url or Config.SLACK_WEBHOOK_URL
    if not webhook_url:
        logger.info("Slack notification (dry run): %s", message)
        return False

    payload = {"text": message}
    try:
        response = requests.post(webhook_url, json=payload)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning("Failed to send Slack notification: %s", e)
        return False
    return True


def notify_order_failure(notification_type, order_id, error):
    """Alert on a webhook that was answered 200 but failed internally"""
    return send_slack_notification(
        f"❌ *Order sync failed*\n"
        f"Type: {notification_type}\n"
        f"Order: {order_id or 'N/A'}\n"
        f"Error: {type(error).__name__}: {error}"
    )
