from __future__ import annotations
import re
from urllib.parse import unquote

from firebase_admin import storage
from google.api_core.exceptions import NotFound

from app.domain.errors import InvalidReferenceError, NotFoundError
from app.scripts.logging_config import get_logger
from config import settings

# download URLs look like .../v0/b/<bucket>/o/<url-encoded path>?alt=media&token=...
_PATH_RE = re.compile(r"/o/(.*?)\?")

# Lazy bucket init
_bucket = None

logger = get_logger("media_store")


def get_bucket():
    global _bucket
    if _bucket is None:
        bucket_name = settings.FIREBASE_STORAGE_BUCKET
        try:
            import firebase_admin
            app = firebase_admin.get_app()
            # If app initialized with storageBucket option it will appear in options
            opt_bucket = app.options.get('storageBucket') if hasattr(app, 'options') else None
            if not bucket_name and opt_bucket:
                bucket_name = opt_bucket
            if not bucket_name:
                project_id = getattr(app, 'project_id', None)
                if project_id:
                    bucket_name = f"{project_id}.appspot.com"
        except ValueError:
            # default app not initialised
            pass
        if not bucket_name:
            raise RuntimeError("Storage bucket not configured and cannot derive project id")
        _bucket = storage.bucket(bucket_name)
    return _bucket


def resolve_storage_path(image_url: str) -> str:
    """Turn an encoded download URL into the literal object path.

    The URL is decoded once as a whole, the segment between ``/o/`` and the
    query string is taken, and that segment is decoded again.
    """
    decoded_url = unquote(image_url or "")
    match = _PATH_RE.search(decoded_url)
    if not match:
        raise InvalidReferenceError("Invalid imageUrl format")
    path = unquote(match.group(1))
    if not path:
        raise InvalidReferenceError("Invalid imageUrl format")
    return path


def download_image(image_url: str) -> bytes:
    path = resolve_storage_path(image_url)
    blob = get_bucket().blob(path)
    try:
        if not blob.exists():
            raise NotFoundError(f"No object found at {path}")
        data = blob.download_as_bytes()
    except NotFound as e:
        raise NotFoundError(f"No object found at {path}") from e
    logger.info("storage.download path=%s bytes=%d", path, len(data))
    return data
