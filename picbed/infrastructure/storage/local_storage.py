import logging
import os
from typing import BinaryIO, Optional

from ...application.ports.storage_repo import StorageBackend
from ...exceptions import StorageError

logger = logging.getLogger(__name__)


class LocalStorageBackend(StorageBackend):
    """Local filesystem storage. Keys are paths relative to ``root``."""

    name = "local"

    def __init__(self, root: str, base_url: str = "/uploads") -> None:
        self.root = os.path.abspath(root)
        self.base_url = base_url.rstrip("/")

    def _path_for(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, key))
        if os.path.commonpath([self.root, path]) != self.root or path == self.root:
            raise StorageError(f"Storage key {key!r} escapes the storage root")
        return path

    def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self._path_for(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Error writing {key} to local storage: {e}")
            raise StorageError(f"Could not write {key}") from e
        logger.info(f"File {key} uploaded to local storage successfully")

    def get(self, key: str) -> Optional[BinaryIO]:
        path = self._path_for(key)
        if not os.path.isfile(path):
            logger.warning(f"File {key} not found in local storage")
            return None
        try:
            return open(path, "rb")
        except OSError as e:
            logger.error(f"Error opening {key} from local storage: {e}")
            raise StorageError(f"Could not read {key}") from e

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Error deleting {key} from local storage: {e}")
            raise StorageError(f"Could not delete {key}") from e
        return True

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"
