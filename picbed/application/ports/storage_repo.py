from typing import BinaryIO, Optional, Protocol


class StorageBackend(Protocol):
    """Blob store addressed by key. One implementation is chosen per process."""

    name: str

    def put(self, key: str, data: bytes, content_type: str) -> None:
        ...

    def get(self, key: str) -> Optional[BinaryIO]:
        ...

    def delete(self, key: str) -> bool:
        ...

    def url_for(self, key: str) -> str:
        ...
