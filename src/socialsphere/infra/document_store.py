# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import copy
import os
import secrets
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

Document = Dict[str, Any]


class DuplicateKeyError(Exception):
    def __init__(self, collection: str, field: str, value: Any) -> None:
        super().__init__(f"Duplicate value for '{field}' in '{collection}': {value!r}")
        self.collection = collection
        self.field = field
        self.value = value


def new_object_id() -> str:
    """24 hex chars, the same shape as a Mongo ObjectId."""
    return secrets.token_hex(12)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _matches(doc: Document, filters: Dict[str, Any]) -> bool:
    return all(doc.get(k) == v for k, v in filters.items())


class DocumentStore:
    """Schema-less collections of documents persisted to a single YAML file.

    Documents are plain dicts keyed by ``_id``. Every public method returns
    copies, so callers never mutate the stored state by accident.

    With ``path=None`` the store lives only in memory (tests).
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path else None
        self._lock = threading.RLock()
        self._data: Dict[str, Dict[str, Document]] = {}
        self._mtime = 0.0
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._reload()

    # ------------------ persistence ------------------

    def _reload(self) -> None:
        if self.path is None or not self.path.exists():
            return
        raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        collections = (raw.get("collections") or {}) if isinstance(raw, dict) else {}
        data: Dict[str, Dict[str, Document]] = {}
        for name, docs in collections.items():
            if not isinstance(docs, dict):
                continue
            data[str(name)] = {str(k): dict(v) for k, v in docs.items() if isinstance(v, dict)}
        self._data = data
        self._mtime = self.path.stat().st_mtime

    def _refresh(self) -> None:
        """Pick up writes made by another process (e.g. scripts/create_user.py)."""
        if self.path is None:
            return
        try:
            mtime = self.path.stat().st_mtime if self.path.exists() else 0.0
        except OSError:
            return
        if mtime and mtime != self._mtime:
            self._reload()

    def _flush(self) -> None:
        if self.path is None:
            return
        payload = {"version": 1, "collections": self._data}
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(yaml.safe_dump(payload, sort_keys=False, allow_unicode=True), encoding="utf-8")
        os.replace(tmp, self.path)
        self._mtime = self.path.stat().st_mtime

    def _collection(self, name: str) -> Dict[str, Document]:
        return self._data.setdefault(name, {})

    # ------------------ queries ------------------

    def find_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            self._refresh()
            doc = self._collection(collection).get(str(doc_id or ""))
            return copy.deepcopy(doc) if doc is not None else None

    def find_one(self, collection: str, **filters: Any) -> Optional[Document]:
        with self._lock:
            self._refresh()
            for doc in self._collection(collection).values():
                if _matches(doc, filters):
                    return copy.deepcopy(doc)
            return None

    def find_many(self, collection: str, **filters: Any) -> List[Document]:
        with self._lock:
            self._refresh()
            return [copy.deepcopy(d) for d in self._collection(collection).values() if _matches(d, filters)]

    # ------------------ writes ------------------

    def create(self, collection: str, doc: Document, *, unique: Iterable[str] = ()) -> Document:
        """Insert a new document, stamping ``_id`` and ``created_at``.

        Raises DuplicateKeyError if any field named in ``unique`` already
        holds the same value in another document of the collection.
        """
        with self._lock:
            self._refresh()
            docs = self._collection(collection)
            for field in unique:
                value = doc.get(field)
                if any(existing.get(field) == value for existing in docs.values()):
                    raise DuplicateKeyError(collection, field, value)
            stored = copy.deepcopy(doc)
            stored["_id"] = new_object_id()
            stored.setdefault("created_at", _utcnow())
            docs[stored["_id"]] = stored
            self._flush()
            return copy.deepcopy(stored)

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> Optional[Document]:
        """Set the given fields on one document; returns the updated copy or None."""
        with self._lock:
            self._refresh()
            doc = self._collection(collection).get(str(doc_id or ""))
            if doc is None:
                return None
            for key, value in fields.items():
                if key == "_id":
                    continue
                doc[key] = copy.deepcopy(value)
            self._flush()
            return copy.deepcopy(doc)

    def push(self, collection: str, doc_id: str, field: str, value: Any) -> Optional[Document]:
        """Append ``value`` to the list stored in ``field``."""
        with self._lock:
            self._refresh()
            doc = self._collection(collection).get(str(doc_id or ""))
            if doc is None:
                return None
            items = list(doc.get(field) or [])
            items.append(copy.deepcopy(value))
            doc[field] = items
            self._flush()
            return copy.deepcopy(doc)

    def toggle_member(self, collection: str, doc_id: str, field: str, value: Any) -> Optional[Document]:
        """Add ``value`` to the set stored in ``field`` if absent, else remove it."""
        with self._lock:
            self._refresh()
            doc = self._collection(collection).get(str(doc_id or ""))
            if doc is None:
                return None
            members = [m for m in (doc.get(field) or [])]
            if value in members:
                members = [m for m in members if m != value]
            else:
                members.append(value)
            doc[field] = members
            self._flush()
            return copy.deepcopy(doc)
