# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional

from socialsphere.auth.passwords import hash_password, verify_password
from socialsphere.core.models import USERS, UserRecord
from socialsphere.errors import DuplicateUser, InvalidCredentials, NotFound, UserNotFound
from socialsphere.infra.document_store import DocumentStore, DuplicateKeyError

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def find_user_by_email(store: DocumentStore, email: str) -> Optional[UserRecord]:
    e = normalize_email(email)
    if not e:
        return None
    doc = store.find_one(USERS, email=e)
    return UserRecord.from_doc(doc) if doc else None


def get_user(store: DocumentStore, user_id: str) -> UserRecord:
    doc = store.find_by_id(USERS, user_id)
    if not doc:
        raise NotFound("User not found")
    return UserRecord.from_doc(doc)


def register_user(
    store: DocumentStore,
    *,
    username: str,
    name: str,
    email: str,
    age: int,
    password: str,
) -> UserRecord:
    """Create an account. The email is checked before the (slow) hash is computed."""
    e = normalize_email(email)
    if find_user_by_email(store, e):
        raise DuplicateUser()

    doc = {
        "username": (username or "").strip(),
        "name": (name or "").strip(),
        "email": e,
        "age": int(age),
        "password": hash_password(password),
        "profile_picture": None,
        "posts": [],
    }
    try:
        created = store.create(USERS, doc, unique=("email",))
    except DuplicateKeyError as exc:
        # Lost a race with a concurrent registration for the same email.
        raise DuplicateUser() from exc
    logger.info("Registered user %s", created["_id"])
    return UserRecord.from_doc(created)


def authenticate(store: DocumentStore, email: str, password: str) -> UserRecord:
    u = find_user_by_email(store, email)
    if not u:
        raise UserNotFound()
    if not verify_password(u.password_hash, password):
        logger.info("Rejected login for user %s", u.id)
        raise InvalidCredentials()
    return u


def set_profile_picture(store: DocumentStore, user_id: str, filename: str) -> UserRecord:
    doc = store.update(USERS, user_id, {"profile_picture": filename})
    if not doc:
        raise NotFound("User not found")
    return UserRecord.from_doc(doc)
