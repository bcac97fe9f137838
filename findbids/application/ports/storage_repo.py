from typing import Protocol


class StorageRepository(Protocol):
    def upload(self, data: bytes, filename: str, content_type: str, owner_id: int) -> str:
        """Store the bytes and return the URL they can be fetched from."""
        ...
