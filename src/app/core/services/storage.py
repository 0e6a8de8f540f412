import logging
import os
import re
import secrets
import string
import time
from urllib.parse import urlparse

from anyio import to_thread

from ..config import settings
from ..exceptions.http_exceptions import BadRequestException

logger = logging.getLogger(__name__)

FOLDER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
_ALPHABET = string.ascii_lowercase + string.digits


def _random_suffix(length: int = 6) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


class MediaStorage:
    """Stores uploaded files on local disk and maps them to public URLs."""

    def __init__(self, root: str, url_prefix: str, public_base_url: str, max_bytes: int):
        self.root = os.path.abspath(root)
        self.url_prefix = "/" + url_prefix.strip("/")
        self.public_base_url = public_base_url.rstrip("/")
        self.max_bytes = max_bytes

    def build_key(self, folder: str, filename: str | None) -> str:
        if not FOLDER_PATTERN.match(folder):
            raise BadRequestException("Invalid upload folder")
        ext = ""
        if filename and "." in filename:
            ext = filename.rsplit(".", 1)[-1].lower()
        if ext and not ext.isalnum():
            raise BadRequestException("Invalid file extension")
        name = f"{int(time.time() * 1000)}-{_random_suffix()}"
        return f"{folder}/{name}.{ext}" if ext else f"{folder}/{name}"

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}{self.url_prefix}/{key}"

    def key_from_url(self, url: str) -> str:
        path = urlparse(url).path
        prefix = self.url_prefix + "/"
        if not path.startswith(prefix):
            raise BadRequestException("URL is outside the media storage")
        key = path[len(prefix):]
        full = os.path.abspath(os.path.join(self.root, key))
        if not key or not full.startswith(self.root + os.sep):
            raise BadRequestException("URL is outside the media storage")
        return key

    def _write(self, key: str, data: bytes) -> None:
        path = os.path.join(self.root, key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)

    def _remove(self, key: str) -> bool:
        path = os.path.join(self.root, key)
        if not os.path.isfile(path):
            return False
        os.remove(path)
        return True

    async def save(self, folder: str, filename: str | None, data: bytes) -> tuple[str, str]:
        if not data:
            raise BadRequestException("No file provided")
        if len(data) > self.max_bytes:
            raise BadRequestException(f"File too large. Maximum size is {self.max_bytes // (1024 * 1024)}MB")

        key = self.build_key(folder, filename)
        await to_thread.run_sync(self._write, key, data)
        logger.info("Stored upload %s (%d bytes)", key, len(data))
        return key, self.public_url(key)

    async def delete(self, url: str) -> bool:
        key = self.key_from_url(url)
        removed = await to_thread.run_sync(self._remove, key)
        if removed:
            logger.info("Deleted upload %s", key)
        return removed


media_storage = MediaStorage(
    root=settings.MEDIA_ROOT,
    url_prefix=settings.MEDIA_URL_PREFIX,
    public_base_url=settings.MEDIA_PUBLIC_BASE_URL,
    max_bytes=settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024,
)


def get_media_storage() -> MediaStorage:
    return media_storage
