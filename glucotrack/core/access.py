"""Shared-code access verification.

The operator configures one secret code. Anyone who types it on the access
page receives a cookie holding ``sha256("v1:" + code)``; later requests are
authorised by comparing that cookie against the digest recomputed from the
current configuration. Nothing is cached, so rotating the code invalidates
every issued cookie on the next request.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Callable

ACCESS_TOKEN_VERSION = "v1"

SecretProvider = Callable[[], "str | None"]


def _digest(value: str, version: str = ACCESS_TOKEN_VERSION) -> str:
    return hashlib.sha256(f"{version}:{value}".encode("utf-8")).hexdigest()


def safe_equals(provided: str | None, expected: str | None) -> bool:
    """Constant-time string equality; ``None`` never matches."""

    if provided is None or expected is None:
        return False
    if len(provided) != len(expected):
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


class AccessVerifier:
    """Checks access codes and cookie tokens against a configured secret."""

    def __init__(self, secret_provider: SecretProvider, *, version: str = ACCESS_TOKEN_VERSION) -> None:
        self._secret_provider = secret_provider
        self.version = version

    def configured_secret(self) -> str | None:
        secret = (self._secret_provider() or "").strip()
        return secret or None

    def has_secret_configured(self) -> bool:
        return self.configured_secret() is not None

    def expected_token(self) -> str | None:
        secret = self.configured_secret()
        if secret is None:
            return None
        return _digest(secret, self.version)

    def is_code_valid(self, candidate: str | None) -> bool:
        code = (candidate or "").strip()
        if not code:
            return False
        expected = self.expected_token()
        if expected is None:
            return False
        return safe_equals(_digest(code, self.version), expected)

    def has_valid_token(self, candidate_token: str | None) -> bool:
        if not candidate_token:
            return False
        return safe_equals(candidate_token, self.expected_token())


__all__ = ["ACCESS_TOKEN_VERSION", "AccessVerifier", "safe_equals"]
