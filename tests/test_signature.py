"""HMAC-SHA256 webhook signature verification."""

import hashlib
import hmac
import json

from signature import canonical_json, compute_signature, find_signature, sign_bytes, verify_signature

SECRET = "webhook-test-secret"
BODY = {"notificationType": "ORDER_CREATED", "orderId": "1", "items": [{"offerId": "Ä", "count": 1}]}


def _sign(body):
    return hmac.new(SECRET.encode(), canonical_json(body).encode(), hashlib.sha256).hexdigest()


def test_canonical_json_is_compact_and_keeps_order():
    assert canonical_json({"b": 1, "a": [1, 2]}) == '{"b":1,"a":[1,2]}'


def test_no_secret_accepts():
    assert verify_signature({}, BODY, None) is True
    assert verify_signature({}, BODY, "") is True


def test_valid_signature():
    assert verify_signature({"X-Signature": _sign(BODY)}, BODY, SECRET) is True


def test_invalid_signature():
    assert verify_signature({"X-Signature": "0" * 64}, BODY, SECRET) is False


def test_tampered_body():
    sig = _sign(BODY)
    tampered = dict(BODY, orderId="2")
    assert verify_signature({"X-Signature": sig}, tampered, SECRET) is False


def test_missing_header():
    assert verify_signature({"Content-Type": "application/json"}, BODY, SECRET) is False


def test_header_names_are_case_insensitive():
    assert verify_signature({"x-hub-signature": _sign(BODY)}, BODY, SECRET) is True


def test_header_precedence():
    headers = {"X-Yandex-Signature": _sign(BODY), "X-Signature": "wrong"}
    assert find_signature(headers) == "wrong"
    assert verify_signature(headers, BODY, SECRET) is False


def test_undecodable_signature_is_rejected():
    # compare_digest refuses non-ASCII str input
    assert verify_signature({"X-Signature": "сигнатура"}, BODY, SECRET) is False


def test_compute_signature_matches_hmac():
    assert compute_signature(BODY, SECRET) == _sign(BODY)


def test_raw_body_signature_accepted_when_reserialisation_differs():
    raw = b'{"a":1e-7}'
    body = json.loads(raw)
    assert canonical_json(body) != raw.decode()

    assert verify_signature({"X-Signature": sign_bytes(raw, SECRET)}, body, SECRET) is False
    assert verify_signature({"X-Signature": sign_bytes(raw, SECRET)}, body, SECRET, raw_body=raw) is True


def test_raw_body_does_not_rescue_a_bad_signature():
    raw = b'{"a":1}'
    assert verify_signature({"X-Signature": "0" * 64}, json.loads(raw), SECRET, raw_body=raw) is False
