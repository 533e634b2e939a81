# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request

from socialsphere.auth.session import COOKIE_NAME, SessionClaims, TokenService
from socialsphere.config import Settings
from socialsphere.errors import InvalidSignature, Unauthenticated

logger = logging.getLogger(__name__)


def load_session_from_request(request: Request, tokens: TokenService) -> Optional[SessionClaims]:
    token = request.cookies.get(COOKIE_NAME, "")
    if not token:
        return None
    try:
        return tokens.verify(token)
    except InvalidSignature as exc:
        logger.warning("Rejected session token on %s: %s", request.url.path, exc)
        return None


def current_session_optional(request: Request) -> Optional[SessionClaims]:
    # The auth middleware already verified the cookie, even when it found none.
    if hasattr(request.state, "session"):
        return request.state.session
    return load_session_from_request(request, request.app.state.tokens)


def require_session(request: Request) -> SessionClaims:
    s = current_session_optional(request)
    if s:
        return s
    raise Unauthenticated()


def cookie_settings(settings: Settings) -> dict:
    out = {"httponly": True, "samesite": "lax", "secure": settings.secure_cookies, "path": "/"}
    if settings.session_max_age:
        out["max_age"] = settings.session_max_age
    return out
