# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Domain errors.

Each error carries the HTTP status and the user-facing text the app renders
for it. Errors without a status are routed as a redirect to the login page.
"""

from __future__ import annotations

from typing import Optional


class SocialSphereError(Exception):
    status_code: Optional[int] = 500
    message = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class DuplicateUser(SocialSphereError):
    status_code = 400
    message = "User already registered"


class UserNotFound(SocialSphereError):
    status_code = 400
    message = "User not found"


class InvalidCredentials(SocialSphereError):
    status_code = None
    message = "Invalid credentials"


class Unauthenticated(SocialSphereError):
    status_code = None
    message = "Authentication required"


class InvalidSignature(Unauthenticated):
    message = "Invalid session token"


class UnsupportedMediaType(SocialSphereError):
    status_code = 415
    message = "Only image files are allowed!"


class PayloadTooLarge(SocialSphereError):
    status_code = 413
    message = "File too large"


class NoFileProvided(SocialSphereError):
    status_code = 400
    message = "No file was uploaded. Please select an image."


class NotFound(SocialSphereError):
    status_code = 404
    message = "Not found"
