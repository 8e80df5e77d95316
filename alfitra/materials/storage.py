"""
Object-store gateway for reference PDFs (Cloudinary).

Only PDFs are accepted. Files are uploaded as ``raw`` resources so the store
never applies image transformations, and stored URLs are normalized to the
raw resource path.
"""
import re
import time

import cloudinary
import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader
import requests
from flask import current_app
from urllib.parse import urlparse

from alfitra.config import config
from alfitra.common.errors import UpstreamError, ValidationError


PDF_MIMETYPE = "application/pdf"
CHUNK_SIZE = 65536  # 64KB chunks when proxying downloads

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_ .\-]")
_PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)


def is_pdf(filename: str | None, mimetype: str | None) -> bool:
    """A file counts as a PDF by MIME type or by its filename suffix."""
    if mimetype == PDF_MIMETYPE:
        return True
    return bool(filename) and filename.lower().endswith(".pdf")


def build_public_id(filename: str, timestamp_ms: int | None = None) -> str:
    """``<folder>/<sanitized base name>_<epoch ms>``."""
    base = _PDF_SUFFIX.sub("", filename or "document")
    safe = _UNSAFE_KEY_CHARS.sub("_", base) or "document"
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{config.STORAGE_FOLDER}/{safe}_{timestamp_ms}"


def normalize_pdf_url(url: str | None) -> str | None:
    """Point at the raw resource path and drop any query string."""
    if not url:
        return url
    fixed = url.replace("/image/upload/", "/raw/upload/")
    return fixed.split("?")[0]


def ensure_pdf_title(title: str) -> str:
    if not title.lower().endswith(".pdf"):
        title += ".pdf"
    return title


def download_filename(original_filename: str | None, title: str | None) -> str:
    """Filename for Content-Disposition: always ends in .pdf, unsafe chars replaced."""
    name = original_filename or title or "document.pdf"
    name = _PDF_SUFFIX.sub("", name) + ".pdf"
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


def is_store_url(url: str | None) -> bool:
    if not url:
        return False
    host = (urlparse(url).hostname or "").lower()
    domain = config.STORAGE_DOMAIN.lower()
    return host == domain or host.endswith("." + domain)


def ensure_configured() -> None:
    """Configure the SDK from the environment, or refuse the upload."""
    if not config.storage_configured:
        raise ValidationError(
            "File storage not configured. Set CLOUDINARY_CLOUD_NAME, "
            "CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET."
        )
    cloudinary.config(
        cloud_name=config.CLOUDINARY_CLOUD_NAME,
        api_key=config.CLOUDINARY_API_KEY,
        api_secret=config.CLOUDINARY_API_SECRET,
        secure=True,
    )


def validate_pdf_upload(file) -> None:
    if file is None or not file.filename:
        raise ValidationError("No file provided")
    if not is_pdf(file.filename, file.mimetype):
        raise ValidationError("Only PDF uploads are allowed")


def upload_pdf(file) -> dict:
    """
    Upload a PDF from a werkzeug FileStorage.

    Returns ``{"url", "public_id", "original_filename"}``. Validation happens
    before anything is sent to the store.
    """
    validate_pdf_upload(file)
    ensure_configured()

    public_id = build_public_id(file.filename)
    current_app.logger.info(f"Uploading PDF '{file.filename}' as {public_id}")
    try:
        result = cloudinary.uploader.upload(
            file.stream,
            public_id=public_id,
            resource_type="raw",
            type="upload",
            access_mode="public",
        )
    except cloudinary.exceptions.Error as e:
        current_app.logger.error(f"Storage upload failed for {public_id}: {e}")
        raise UpstreamError(f"Failed to upload file to storage: {e}")

    url = normalize_pdf_url(result.get("secure_url") or result.get("url"))
    current_app.logger.info(f"Upload successful: {url}")
    return {
        "url": url,
        "public_id": result.get("public_id", public_id),
        "original_filename": file.filename,
    }


def destroy_quietly(public_id: str) -> bool:
    """Best-effort delete; failures are logged and reported as False."""
    if not public_id:
        return False
    try:
        ensure_configured()
        result = cloudinary.uploader.destroy(public_id, resource_type="raw")
    except (ValidationError, cloudinary.exceptions.Error) as e:
        current_app.logger.warning(f"Could not delete {public_id} from storage: {e}")
        return False
    if result.get("result") != "ok":
        current_app.logger.warning(f"Storage delete of {public_id} returned {result.get('result')}")
        return False
    return True


def open_remote(url: str) -> requests.Response:
    """Open a streamed GET against the store, raising UpstreamError on failure."""
    try:
        response = requests.get(url, stream=True, timeout=config.STORAGE_HTTP_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        current_app.logger.error(f"Error fetching {url} from storage: {e}")
        raise UpstreamError("Failed to download file from storage")
    return response


def iter_remote(response: requests.Response):
    """Yield the body in chunks, closing the upstream connection at the end."""
    try:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if chunk:
                yield chunk
    finally:
        response.close()


def purge_folder() -> int:
    """Delete every raw resource under the configured folder. Returns the count."""
    ensure_configured()
    deleted = 0
    while True:
        try:
            listing = cloudinary.api.resources(
                resource_type="raw", type="upload",
                prefix=f"{config.STORAGE_FOLDER}/", max_results=500,
            )
            public_ids = [r["public_id"] for r in listing.get("resources", [])]
            if not public_ids:
                return deleted
            result = cloudinary.api.delete_resources(public_ids, resource_type="raw")
        except cloudinary.exceptions.Error as e:
            raise UpstreamError(f"Storage purge failed: {e}")
        removed = len(result.get("deleted", {}))
        deleted += removed
        if removed == 0:
            return deleted
