# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import List

from socialsphere.core.models import POSTS, USERS, PostRecord, UserRecord
from socialsphere.errors import NotFound
from socialsphere.infra.document_store import DocumentStore


def create_post(store: DocumentStore, author: UserRecord, content: str) -> PostRecord:
    """Create a post and append its id to the author's post list.

    The two writes are not atomic. A post left behind by a failure between
    them still carries its owner id, and ``list_posts_for_user`` finds it.
    """
    doc = store.create(
        POSTS,
        {
            "user": author.id,
            "username": author.username,
            "content": content or "",
            "likes": [],
        },
    )
    store.push(USERS, author.id, "posts", doc["_id"])
    return PostRecord.from_doc(doc)


def get_post(store: DocumentStore, post_id: str) -> PostRecord:
    doc = store.find_by_id(POSTS, post_id)
    if not doc:
        raise NotFound("Post not found")
    return PostRecord.from_doc(doc)


def list_posts_for_user(store: DocumentStore, user_id: str) -> List[PostRecord]:
    """Posts owned by the user, newest first."""
    posts = [PostRecord.from_doc(d) for d in store.find_many(POSTS, user=user_id)]
    return sorted(posts, key=lambda p: p.created_at, reverse=True)


def toggle_like(store: DocumentStore, post_id: str, user_id: str) -> PostRecord:
    doc = store.toggle_member(POSTS, post_id, "likes", user_id)
    if not doc:
        raise NotFound("Post not found")
    return PostRecord.from_doc(doc)


def update_post_content(store: DocumentStore, post_id: str, content: str) -> PostRecord:
    # TODO: restrict edits to the post owner once authorization rules are agreed.
    doc = store.update(POSTS, post_id, {"content": content or ""})
    if not doc:
        raise NotFound("Post not found")
    return PostRecord.from_doc(doc)
