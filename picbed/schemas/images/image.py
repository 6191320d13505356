# picbed/schemas/images/image.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime

__all__ = ["ImageResponse"]


class ImageResponse(BaseModel):
    id: int
    file_name: str
    original_file_name: str
    file_extension: str
    file_size: int
    width: int
    height: int
    mime_type: str
    upload_time: datetime
    description: Optional[str] = None
    category: Optional[str] = None
    is_public: bool
    owner_id: int
    url: str
    thumbnail_url: str

    @classmethod
    def from_record(cls, record, url: str, thumbnail_url: str) -> "ImageResponse":
        return cls(
            id=record.id,
            file_name=record.file_name,
            original_file_name=record.original_file_name,
            file_extension=record.file_extension,
            file_size=record.file_size,
            width=record.width,
            height=record.height,
            mime_type=record.mime_type,
            upload_time=record.upload_time,
            description=record.description,
            category=record.category,
            is_public=record.is_public,
            owner_id=record.owner_id,
            url=url,
            thumbnail_url=thumbnail_url,
        )
