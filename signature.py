import hashlib
import hmac
import json
import logging

logger = logging.getLogger(__name__)

# Checked in this order, first one present wins
SIGNATURE_HEADERS = ("X-Signature", "X-Hub-Signature", "X-Yandex-Signature")


def canonical_json(body):
    """
    Compact JSON with keys in received order, as the sender serialises it.
    Floats may not round-trip to the sender's text (1e-7 becomes 1e-07), so
    verify_signature also accepts a signature over the raw request bytes.
    """
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


def compute_signature(body, secret):
    return sign_bytes(canonical_json(body).encode("utf-8"), secret)


def sign_bytes(data, secret):
    return hmac.new(secret.encode("utf-8"), data, hashlib.sha256).hexdigest()


def find_signature(headers):
    lowered = {k.lower(): v for k, v in headers.items()}
    for name in SIGNATURE_HEADERS:
        value = lowered.get(name.lower())
        if value:
            return value
    return None


def verify_signature(headers, body, secret, raw_body=None):
    """
    Verify the HMAC-SHA256 signature of a webhook body.
    Without a configured secret verification is skipped and the request accepted.
    """
    if not secret:
        logger.warning("[WEBHOOK] WEBHOOK_SECRET not configured, skipping verification")
        return True

    signature = find_signature(headers)
    if not signature:
        logger.warning("[WEBHOOK] No signature header found in request")
        return False

    try:
        is_valid = hmac.compare_digest(signature, compute_signature(body, secret))
        if not is_valid and raw_body is not None:
            is_valid = hmac.compare_digest(signature, sign_bytes(raw_body, secret))
    except Exception as e:
        logger.error("[WEBHOOK] Error during signature verification: error=\"%s\"", e)
        return False

    if not is_valid:
        logger.warning("[WEBHOOK] Signature verification failed")
    return is_valid
