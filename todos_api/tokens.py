"""
Signed, time-limited bearer tokens.

Tokens are HS256 JWTs carrying the account id in the ``id`` claim plus
``iat``/``exp`` timestamps. Verification is purely local: it never consults
the account store.
"""

from __future__ import annotations

import logging
import secrets
import time
from pathlib import Path
from typing import Callable

import jwt

from todos_api.config import Settings
from todos_api.errors import ExpiredToken, InvalidSignature, Malformed

logger = logging.getLogger(__name__)

ACCOUNT_CLAIM = "id"


class TokenService:
    def __init__(
        self,
        secret: str | bytes,
        algorithm: str = "HS256",
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self.algorithm = algorithm
        self._clock = clock

    def issue(self, account_id: str, ttl_seconds: int) -> str:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        issued_at = int(self._clock())
        claims = {
            ACCOUNT_CLAIM: account_id,
            "iat": issued_at,
            "exp": issued_at + int(ttl_seconds),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """
        Return the account id carried by ``token``.

        Raises InvalidSignature when the signature does not match the
        signing key, ExpiredToken when the current time is at or after
        ``exp``, and Malformed when the token cannot be parsed or lacks
        the expected claims.
        """
        try:
            # Expiry is checked below so that a token is already expired at
            # exactly ``exp``; PyJWT only rejects it strictly after.
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": [ACCOUNT_CLAIM, "exp"],
                },
            )
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignature("Token signature does not match") from exc
        except jwt.InvalidTokenError as exc:
            raise Malformed(f"Token could not be parsed: {exc}") from exc

        account_id = claims.get(ACCOUNT_CLAIM)
        expires_at = claims.get("exp")
        if not isinstance(account_id, str) or not account_id:
            raise Malformed("Token does not carry an account id")
        if not isinstance(expires_at, (int, float)):
            raise Malformed("Token expiry is not a timestamp")
        if self._clock() >= expires_at:
            raise ExpiredToken("Token expired")
        return account_id


def load_signing_secret(settings: Settings) -> str:
    """
    Resolve the process-wide signing key.

    Prefers ``token_secret``, then the contents of ``token_secret_file``.
    Without either a random key is generated, so tokens do not survive a
    restart.
    """
    if settings.token_secret:
        return settings.token_secret
    if settings.token_secret_file:
        secret = Path(settings.token_secret_file).read_text(encoding="utf-8").strip()
        if not secret:
            raise ValueError(
                f"Token secret file is empty: {settings.token_secret_file}"
            )
        return secret
    logger.warning(
        "No token secret configured; using a random per-process signing key"
    )
    return secrets.token_urlsafe(32)
