import base64
import logging
import shutil
from pathlib import Path
from typing import Optional
from uuid import uuid4

import httpx
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from config import settings
from errors import UpstreamFetchError, ValidationError
from fetch import fetch_bytes

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_TYPE = "image/jpeg"


def has_file(upload: Optional[UploadFile]) -> bool:
    # Browsers send an empty part when the file input is left blank
    return upload is not None and bool(upload.filename)


def copy_to(upload: UploadFile, dest: Path) -> None:
    upload.file.seek(0)
    with dest.open("wb") as out:
        shutil.copyfileobj(upload.file, out)


async def save_upload(upload: UploadFile) -> str:
    suffix = Path(upload.filename or "").suffix.lower()
    if not suffix[1:].isalnum():
        suffix = ""
    filename = f"{uuid4().hex}{suffix}"

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    await run_in_threadpool(copy_to, upload, upload_dir / filename)
    logger.info("Stored upload %s as %s", upload.filename, filename)
    return f"/uploads/{filename}"


async def fetch_image_data_uri(client: httpx.AsyncClient, url: str) -> str:
    try:
        body, content_type = await fetch_bytes(client, url)
    except UpstreamFetchError as e:
        raise UpstreamFetchError("Error fetching image", e.details) from e
    mime = content_type.split(";")[0].strip().lower()
    if not mime.startswith("image/"):
        mime = DEFAULT_IMAGE_TYPE
    return f"data:{mime};base64,{base64.b64encode(body).decode()}"


async def resolve_image(client: httpx.AsyncClient, upload: Optional[UploadFile], url: Optional[str]) -> str:
    """Uploaded file -> stored path, url -> embedded data URI, neither -> ""."""
    url = (url or "").strip()
    if has_file(upload) and url:
        raise ValidationError("Provide either an image file or a url, not both")
    if has_file(upload):
        return await save_upload(upload)
    if url:
        return await fetch_image_data_uri(client, url)
    return ""
