import os
import uuid
import logging

from ...config import settings
from ...application.ports.storage_repo import StorageRepository

logger = logging.getLogger(__name__)


class LocalStorageRepository(StorageRepository):
    """Writes uploads below UPLOAD_DIR; main mounts that directory at /uploads."""

    def __init__(self, upload_dir: str = None, base_url: str = None, folder: str = "rfi-attachments") -> None:
        self.upload_dir = upload_dir or settings.UPLOAD_DIR
        self.base_url = (base_url or settings.BASE_URL).rstrip("/")
        self.folder = folder

    def upload(self, data: bytes, filename: str, content_type: str, owner_id: int) -> str:
        stored_name = f"{uuid.uuid4().hex}_{filename}"
        relative_dir = os.path.join(self.folder, str(owner_id))
        dest_dir = os.path.join(self.upload_dir, relative_dir)
        os.makedirs(dest_dir, exist_ok=True)
        path = os.path.join(dest_dir, stored_name)
        with open(path, "wb") as f:
            f.write(data)
        logger.info(f"Stored {content_type} upload ({len(data)} bytes) for user {owner_id}")
        return f"{self.base_url}/uploads/{self.folder}/{owner_id}/{stored_name}"
