# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Profile-picture intake.

Accepted files are written to a flat upload directory under a random name:
16 random bytes, hex-encoded, plus the original extension when it is a plain
alphanumeric suffix. Nothing else from the client's filename is kept.
"""

from __future__ import annotations

import logging
import re
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from socialsphere.config import DEFAULT_MAX_UPLOAD_BYTES
from socialsphere.errors import NoFileProvided, PayloadTooLarge, UnsupportedMediaType

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
_EXT_RE = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


@dataclass(frozen=True)
class StoredUpload:
    filename: str
    path: Path
    size: int
    content_type: str


def safe_extension(original_name: str) -> str:
    suffix = Path(original_name or "").suffix
    return suffix if _EXT_RE.match(suffix) else ""


def random_filename(original_name: str) -> str:
    return secrets.token_bytes(16).hex() + safe_extension(original_name)


class UploadIntake:
    def __init__(self, upload_dir: Path, *, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
        self.upload_dir = Path(upload_dir)
        self.max_bytes = int(max_bytes)

    def check_content_type(self, content_type: Optional[str]) -> str:
        ct = (content_type or "").strip().lower()
        if not ct.startswith("image/"):
            raise UnsupportedMediaType()
        return ct

    def store(self, upload) -> StoredUpload:
        """Validate and persist an uploaded file (anything with filename/content_type/file)."""
        if upload is None or not getattr(upload, "filename", None):
            raise NoFileProvided()
        content_type = self.check_content_type(getattr(upload, "content_type", None))

        declared = getattr(upload, "size", None)
        if declared is not None and declared > self.max_bytes:
            raise PayloadTooLarge()

        return self.write_stream(upload.file, original_name=upload.filename, content_type=content_type)

    def write_stream(self, stream: BinaryIO, *, original_name: str, content_type: str) -> StoredUpload:
        """Copy ``stream`` to disk in chunks, aborting once it passes ``max_bytes``."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        filename = random_filename(original_name)
        out_path = self.upload_dir / filename

        written = 0
        try:
            with out_path.open("xb") as out:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_bytes:
                        raise PayloadTooLarge()
                    out.write(chunk)
        except BaseException:
            out_path.unlink(missing_ok=True)
            raise

        logger.info("Stored upload %s (%d bytes, %s)", filename, written, content_type)
        return StoredUpload(filename=filename, path=out_path, size=written, content_type=content_type)
