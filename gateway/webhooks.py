#!/usr/bin/env python3

"""
Gateway webhook helpers.

Signs and verifies webhook payloads the way the gateway does
(``sha256=<hex HMAC-SHA256 of the UTF-8 payload>``), and builds event
bodies for tests that post notifications to a merchant endpoint.
"""

import hashlib
import hmac
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

SIGNATURE_PREFIX = "sha256="
SIGNATURE_HEADER = "X-Webhook-Signature"


def sign_payload(payload: str, secret: str) -> str:
    """Return the ``sha256=`` signature header value for ``payload``."""
    digest = hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(payload: str, secret: str, signature: Optional[str]) -> bool:
    """Constant-time check of a received signature header."""
    if not signature:
        return False
    return hmac.compare_digest(sign_payload(payload, secret), signature.strip())


@dataclass
class WebhookEvent:
    """One gateway notification, e.g. ``payment.completed``."""

    type: str
    data: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: f"evt_{uuid.uuid4().hex}")
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds"))
    metadata: dict[str, str] = field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps(
            {
                "id": self.id,
                "type": self.type,
                "timestamp": self.timestamp,
                "data": self.data,
                "metadata": self.metadata,
            },
            separators=(",", ":"),
            sort_keys=True,
            default=str,
        )

    def signed_headers(self, secret: str) -> dict[str, str]:
        """Headers to send with ``to_json()`` so the receiver can verify it."""
        return {"Content-Type": "application/json", SIGNATURE_HEADER: sign_payload(self.to_json(), secret)}


__all__ = ["SIGNATURE_HEADER", "WebhookEvent", "sign_payload", "verify_signature"]
