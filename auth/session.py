"""
Signed session tokens.

Tokens are base64-encoded JSON payloads signed with HMAC-SHA256 and carry
``user_id`` plus an expiry. Nothing is stored server-side; the token lives
in an HttpOnly cookie. Secret is ``config.session_secret``
(env var: ``SESSION_SECRET``).
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Optional

from utils.schemas import UserIdentity

logger = logging.getLogger(__name__)


class SessionIssuer:
    def __init__(self, secret: str, max_age_seconds: int) -> None:
        if not secret:
            raise ValueError("Session secret must not be empty")
        self._secret = secret.encode()
        self.max_age_seconds = max_age_seconds

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._secret, raw, hashlib.sha256).hexdigest()

    def issue(self, identity: UserIdentity) -> str:
        """Create a signed token for ``identity``."""
        payload = {
            "user_id": identity.user_id,
            "exp": int(time.time()) + self.max_age_seconds,
        }
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return urlsafe_b64encode(raw).decode() + "." + self._sign(raw)

    def verify(self, token: Optional[str]) -> Optional[str]:
        """Return the ``user_id`` of a valid token, ``None`` otherwise."""
        if not token:
            return None
        try:
            encoded, sig = token.split(".", 1)
            raw = urlsafe_b64decode(encoded.encode())
            if not hmac.compare_digest(sig, self._sign(raw)):
                logger.debug("Rejected session token: bad signature")
                return None
            payload = json.loads(raw)
            if payload.get("exp", 0) < time.time():
                logger.debug("Rejected session token: expired")
                return None
            user_id = str(payload.get("user_id") or "").strip()
            return user_id or None
        except (ValueError, TypeError, AttributeError):
            logger.debug("Rejected session token: bad format")
            return None
