# utils/storage.py
import logging
import os
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from config import settings

logger = logging.getLogger(__name__)

# File modes used for the two visibilities of a local disk
VISIBILITY_MODES = {
    "public": 0o644,
    "private": 0o600,
}


class PublicStorage:
    """Local "public" disk.

    Files live under ``root`` and are reachable over HTTP as
    ``{url_prefix}{key}`` (the app mounts ``root`` at ``/storage``).
    """

    def __init__(self, root, url_prefix: str = "storage/"):
        self.root = Path(root)
        self.url_prefix = url_prefix

    def path(self, key: str) -> Path:
        return self.root / key

    def exists(self, key: Optional[str]) -> bool:
        return bool(key) and self.path(key).is_file()

    def url(self, key: Optional[str]) -> Optional[str]:
        if not key:
            return None
        return f"{self.url_prefix}{key.lstrip('/')}"

    def store(self, upload: UploadFile, visibility: str = "public", path: str = "", extension: Optional[str] = None) -> str:
        """Write ``upload`` under ``path`` and return its key.

        The file is written to a temporary name first and moved into place,
        so a reader never sees a partially written file.
        """
        if visibility not in VISIBILITY_MODES:
            raise ValueError(f"Unknown visibility: {visibility}")

        if extension is None:
            extension = Path(upload.filename or "").suffix.lstrip(".").lower() or "bin"
        key = "/".join(p for p in (path.strip("/"), f"{uuid.uuid4().hex}.{extension}") if p)

        target = self.path(key)
        target.parent.mkdir(parents=True, exist_ok=True)

        upload.file.seek(0)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".upload-")
        try:
            with os.fdopen(fd, "wb") as buffer:
                shutil.copyfileobj(upload.file, buffer)
            os.chmod(tmp_name, VISIBILITY_MODES[visibility])
            os.replace(tmp_name, target)
        except BaseException:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise

        logger.info("Stored %s (%s) as %s", upload.filename, visibility, key)
        return key

    def delete(self, key: Optional[str]) -> bool:
        if not self.exists(key):
            return False
        self.path(key).unlink()
        logger.info("Deleted %s", key)
        return True


def get_storage() -> PublicStorage:
    return PublicStorage(settings.STORAGE_ROOT, settings.STORAGE_URL_PREFIX)
