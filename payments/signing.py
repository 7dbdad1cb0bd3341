"""Webhook payload signing.

Header format is `t=<unix timestamp>,v1=<hex hmac>` where the HMAC-SHA256
is computed over `"<timestamp>.<raw payload>"` with the shared secret.
"""

import hashlib
import hmac
import time
from typing import Optional

SIGNATURE_HEADER = "Payment-Signature"
DEFAULT_TOLERANCE_SECONDS = 300


def _digest(payload: bytes, timestamp: int, secret: str) -> str:
    signed = f"{timestamp}.".encode("utf-8") + payload
    return hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()


def sign_payload(payload: bytes, secret: str, timestamp: Optional[int] = None) -> str:
    """Build the signature header value for `payload`."""

    ts = int(time.time()) if timestamp is None else int(timestamp)
    return f"t={ts},v1={_digest(payload, ts, secret)}"


def parse_signature_header(header: str) -> tuple[Optional[int], list[str]]:
    timestamp = None
    signatures = []
    for part in (header or "").split(","):
        name, sep, value = part.strip().partition("=")
        if not sep:
            continue
        if name == "t":
            try:
                timestamp = int(value)
            except ValueError:
                return None, []
        elif name == "v1":
            signatures.append(value)
    return timestamp, signatures


def verify_signature(
    payload: bytes,
    header: str,
    secret: str,
    *,
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
    now: Optional[float] = None,
) -> bool:
    """Check `header` against `payload`; False on any mismatch, never raises."""

    if not secret or not header:
        return False
    timestamp, signatures = parse_signature_header(header)
    if timestamp is None or not signatures:
        return False
    current = time.time() if now is None else now
    if tolerance and abs(current - timestamp) > tolerance:
        return False
    expected = _digest(payload, timestamp, secret)
    return any(hmac.compare_digest(expected, candidate) for candidate in signatures)
