"""Identity-provider webhook signature verification (Svix scheme).

Signed content:  "{msg_id}.{timestamp}.{raw_body}"
Signature:       base64(HMAC-SHA256(secret, signed_content))
Secret:          "whsec_<base64 key>"
Header:          space-separated "v1,<signature>" entries (key rotation)

Comparison is constant-time; timestamps outside the tolerance window are
rejected to prevent replay.
"""

import base64
import hashlib
import hmac
import time

from projecthost.errors import WebhookVerificationError

DEFAULT_TOLERANCE_SECONDS = 300
_SECRET_PREFIX = "whsec_"


def _decode_secret(secret: str) -> bytes:
    if secret.startswith(_SECRET_PREFIX):
        secret = secret[len(_SECRET_PREFIX):]
    try:
        return base64.b64decode(secret)
    except ValueError as exc:
        raise WebhookVerificationError("Webhook secret is not valid base64") from exc


def sign(secret: str, msg_id: str, timestamp: str, body: bytes) -> str:
    key = _decode_secret(secret)
    signed_content = f"{msg_id}.{timestamp}.".encode() + body
    digest = hmac.new(key, signed_content, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def verify_signature(
    secret: str,
    msg_id: str | None,
    timestamp: str | None,
    body: bytes,
    signature_header: str | None,
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
    now: float | None = None,
) -> None:
    """Raise WebhookVerificationError unless the payload is authentic."""
    if not msg_id or not timestamp or not signature_header:
        raise WebhookVerificationError("Missing webhook signature headers")

    try:
        ts = int(timestamp)
    except ValueError as exc:
        raise WebhookVerificationError("Invalid webhook timestamp") from exc

    current = int(now if now is not None else time.time())
    if abs(current - ts) > tolerance:
        raise WebhookVerificationError("Webhook timestamp outside tolerance window")

    expected = sign(secret, msg_id, timestamp, body)
    for entry in signature_header.split():
        version, _, candidate = entry.partition(",")
        if version == "v1" and hmac.compare_digest(candidate, expected):
            return
    raise WebhookVerificationError("Invalid webhook signature")
