"""Local blob store for uploaded images, served read-only under a URL prefix."""

from __future__ import annotations

import asyncio
import logging
import secrets
import time
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from garagehub.config import Settings
from garagehub.exceptions import StorageError, UploadTooLargeError, ValidationError

logger = logging.getLogger(__name__)

_MAX_NAME_ATTEMPTS = 5


def _sanitize_field(field: str) -> str:
    cleaned = "".join(ch for ch in str(field or "") if ch.isalnum() or ch in {"_", "-"})
    return cleaned[:64] or "file"


def _extension(original_name: str) -> str:
    suffix = PurePosixPath(str(original_name or "").replace("\\", "/")).suffix
    if not suffix or len(suffix) > 16:
        return ""
    if not all(ch.isalnum() for ch in suffix[1:]):
        return ""
    return suffix.lower()


def generate_blob_name(field: str, original_name: str) -> str:
    """Return `<field>-<epoch_ms>-<random>.<ext>`."""
    epoch_ms = time.time_ns() // 1_000_000
    rand = secrets.randbelow(1_000_000_000)
    return f"{_sanitize_field(field)}-{epoch_ms}-{rand}{_extension(original_name)}"


class BlobStore:
    """Blob store rooted at `settings.upload_dir`.

    A BlobRef is the relative path `"<upload_url_prefix>/<name>"`, so the ref
    doubles as the public path under the static mount.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.base_dir = Path(settings.upload_dir)
        self.prefix = str(settings.upload_url_prefix)
        self.max_bytes = int(settings.upload_max_bytes)

    def ref_for(self, name: str) -> str:
        return f"{self.prefix}/{name}"

    def url_for(self, ref: str) -> str:
        return "/" + str(ref).lstrip("/")

    def path_for(self, ref: str) -> Path:
        raw = str(ref or "").strip().replace("\\", "/")
        parts = PurePosixPath(raw).parts
        if len(parts) != 2 or parts[0] != self.prefix or parts[1] in {".", ".."}:
            raise ValidationError(f"invalid blob ref: {ref!r}")
        return self.base_dir / parts[1]

    async def store(self, data: bytes, original_name: str, *, field: str = "file") -> str:
        if len(data) > self.max_bytes:
            raise UploadTooLargeError(original_name, self.max_bytes)
        return await asyncio.to_thread(self._store_sync, bytes(data), original_name, field)

    def _store_sync(self, data: bytes, original_name: str, field: str) -> str:
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            for _ in range(_MAX_NAME_ATTEMPTS):
                name = generate_blob_name(field, original_name)
                try:
                    with (self.base_dir / name).open("xb") as f:
                        f.write(data)
                except FileExistsError:
                    continue
                ref = self.ref_for(name)
                logger.debug("blob stored (ref=%s, size=%d)", ref, len(data))
                return ref
        except OSError as exc:
            raise StorageError(f"failed to store {original_name!r}: {exc}") from exc
        raise StorageError(f"could not allocate a unique name for {original_name!r}")

    async def exists(self, ref: str) -> bool:
        try:
            path = self.path_for(ref)
        except ValidationError:
            return False
        return await asyncio.to_thread(path.is_file)

    async def delete(self, ref: str) -> bool:
        """Best-effort delete; returns True only if a file was removed."""
        return await asyncio.to_thread(self._delete_sync, ref)

    def _delete_sync(self, ref: str) -> bool:
        try:
            path = self.path_for(ref)
        except ValidationError:
            logger.warning("blob delete skipped, invalid ref: %r", ref)
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("blob delete failed (ref=%s): %s", ref, exc)
            return False
        logger.debug("blob deleted (ref=%s)", ref)
        return True

    async def delete_many(self, refs: Iterable[str | None]) -> int:
        removed = 0
        for ref in refs:
            if not ref:
                continue
            if await self.delete(ref):
                removed += 1
        return removed

    async def list_refs(self) -> list[str]:
        def _list() -> list[str]:
            if not self.base_dir.exists():
                return []
            return sorted(self.ref_for(p.name) for p in self.base_dir.iterdir() if p.is_file())

        return await asyncio.to_thread(_list)
