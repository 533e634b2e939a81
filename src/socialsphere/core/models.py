# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Typed views over the documents held in the ``users`` and ``posts`` collections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

USERS = "users"
POSTS = "posts"


@dataclass(frozen=True)
class UserRecord:
    id: str
    username: str
    name: str
    email: str
    age: int
    password_hash: str
    profile_picture: Optional[str] = None
    posts: Tuple[str, ...] = field(default_factory=tuple)
    created_at: str = ""

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "UserRecord":
        return cls(
            id=str(doc["_id"]),
            username=str(doc.get("username") or ""),
            name=str(doc.get("name") or ""),
            email=str(doc.get("email") or ""),
            age=int(doc.get("age") or 0),
            password_hash=str(doc.get("password") or ""),
            profile_picture=doc.get("profile_picture") or None,
            posts=tuple(str(p) for p in (doc.get("posts") or [])),
            created_at=str(doc.get("created_at") or ""),
        )


@dataclass(frozen=True)
class PostRecord:
    id: str
    user: str
    username: str
    content: str
    likes: Tuple[str, ...] = field(default_factory=tuple)
    created_at: str = ""

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "PostRecord":
        return cls(
            id=str(doc["_id"]),
            user=str(doc.get("user") or ""),
            username=str(doc.get("username") or ""),
            content=str(doc.get("content") or ""),
            likes=tuple(dict.fromkeys(str(u) for u in (doc.get("likes") or []))),
            created_at=str(doc.get("created_at") or ""),
        )

    def liked_by(self, user_id: str) -> bool:
        return user_id in self.likes
