from typing import List, Optional, Protocol
from dataclasses import dataclass
from datetime import datetime


@dataclass
class StoredImage:
    id: int
    file_name: str
    original_file_name: str
    file_extension: str
    file_size: int
    width: int
    height: int
    mime_type: str
    upload_time: datetime
    description: Optional[str]
    category: Optional[str]
    is_public: bool
    owner_id: int


class ImageRepository(Protocol):
    def create(self, *, file_name: str, original_file_name: str, file_extension: str, file_size: int,
               width: int, height: int, mime_type: str, owner_id: int,
               description: Optional[str] = None, category: Optional[str] = None) -> StoredImage:
        ...

    def get_by_id(self, image_id: int) -> Optional[StoredImage]:
        ...

    def get_by_file_name(self, file_name: str) -> Optional[StoredImage]:
        ...

    def list_page(self, offset: int, limit: int, category: Optional[str] = None) -> List[StoredImage]:
        ...

    def list_for_owner(self, owner_id: int) -> List[StoredImage]:
        ...

    def count_for_owner(self, owner_id: int) -> int:
        ...

    def delete(self, image_id: int) -> bool:
        ...
