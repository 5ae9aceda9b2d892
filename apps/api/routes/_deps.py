from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from fastapi import BackgroundTasks, HTTPException, Request, UploadFile

from garagehub.config import Settings
from garagehub.exceptions import UploadTooLargeError
from garagehub.models import Upload
from garagehub.services import BlobStore, Mailer

logger = logging.getLogger("garagehub.api")

_CHUNK_SIZE = 1024 * 1024


def settings(request: Request) -> Settings:
    settings_obj: Settings | None = getattr(request.app.state, "settings", None)
    if settings_obj is None:
        raise HTTPException(status_code=500, detail="settings not initialized")
    return settings_obj


def pool(request: Request):
    pool_obj = getattr(request.app.state, "db_pool", None)
    if pool_obj is None:
        raise HTTPException(status_code=500, detail="db pool not initialized")
    return pool_obj


def redis(request: Request):
    redis_obj = getattr(request.app.state, "redis", None)
    if redis_obj is None:
        raise HTTPException(status_code=500, detail="redis not initialized")
    return redis_obj


def mailer(request: Request) -> Mailer:
    mailer_obj = getattr(request.app.state, "mailer", None)
    if mailer_obj is None:
        return Mailer(settings(request).smtp)
    return mailer_obj


def blob_store(request: Request) -> BlobStore:
    return BlobStore(settings(request))


def _sanitize_filename(filename: str | None) -> str:
    raw = str(filename or "").strip()
    base = Path(raw.replace("\\", "/")).name
    base = base.replace("\x00", "")
    if not base:
        return "upload.bin"
    return base[:255]


async def read_upload(upload: UploadFile | None, *, max_bytes: int) -> Upload | None:
    """Read a multipart file into memory; None for absent or empty file fields."""
    if upload is None or not upload.filename:
        return None
    name = _sanitize_filename(upload.filename)
    chunks: list[bytes] = []
    size = 0
    try:
        while True:
            chunk = await upload.read(_CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > max_bytes:
                raise UploadTooLargeError(name, max_bytes)
            chunks.append(chunk)
    finally:
        await upload.close()
    return Upload(filename=name, content=b"".join(chunks), content_type=upload.content_type)


async def read_uploads(
    uploads: Iterable[UploadFile] | None, *, max_bytes: int, max_count: int | None = None
) -> list[Upload]:
    files = [u for u in list(uploads or []) if u is not None and u.filename]
    if max_count is not None and len(files) > max_count:
        raise HTTPException(status_code=400, detail=f"too many files (max {max_count})")
    out: list[Upload] = []
    for upload in files:
        item = await read_upload(upload, max_bytes=max_bytes)
        if item is not None:
            out.append(item)
    return out


async def _delete_blobs(blobs: BlobStore, refs: list[str]) -> None:
    try:
        removed = await blobs.delete_many(refs)
        logger.info("blob cleanup done (requested=%d, removed=%d)", len(refs), removed)
    except Exception as exc:
        logger.warning("blob cleanup failed (refs=%s): %s", refs, exc)


def schedule_blob_cleanup(
    background_tasks: BackgroundTasks, blobs: BlobStore, refs: Iterable[str | None]
) -> None:
    """Delete refs after the response has been sent."""
    pending = [r for r in refs if r]
    if pending:
        background_tasks.add_task(_delete_blobs, blobs, pending)
