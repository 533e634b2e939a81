# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadData, URLSafeTimedSerializer

from socialsphere.errors import InvalidSignature

COOKIE_NAME = "token"


@dataclass(frozen=True)
class SessionClaims:
    email: str
    userid: str


class TokenService:
    """Issues and verifies signed session tokens carrying ``{email, userid}``.

    Tokens carry no expiry unless ``max_age`` is given, in which case the
    signature timestamp is checked on every verification.
    """

    def __init__(self, secret: str, *, salt: str, max_age: Optional[int] = None) -> None:
        if not secret:
            raise ValueError("A signing secret is required")
        self._serializer = URLSafeTimedSerializer(secret_key=secret, salt=salt)
        self.max_age = max_age

    def issue(self, claims: SessionClaims) -> str:
        return self._serializer.dumps({"email": claims.email, "userid": claims.userid})

    def verify(self, token: str) -> SessionClaims:
        if not token:
            raise InvalidSignature("Missing session token")
        try:
            data = self._serializer.loads(token, max_age=self.max_age)
        except BadData as exc:
            raise InvalidSignature(str(exc)) from exc
        if not isinstance(data, dict):
            raise InvalidSignature("Malformed session payload")
        email = str(data.get("email") or "").strip()
        userid = str(data.get("userid") or "").strip()
        if not email or not userid:
            raise InvalidSignature("Incomplete session payload")
        return SessionClaims(email=email, userid=userid)
