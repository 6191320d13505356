# picbed/db/models/media/image.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone


class ImageInfo(SQLModel, table=True):
    __tablename__ = "images"
    id: Optional[int] = Field(default=None, primary_key=True)
    # Storage key of the original; the thumbnail key is derived from it
    file_name: str = Field(max_length=255, unique=True, index=True)
    original_file_name: str = Field(max_length=500)
    file_extension: str = Field(max_length=100)
    file_size: int
    width: int = 0
    height: int = 0
    mime_type: str = Field(max_length=100)
    upload_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    description: Optional[str] = Field(max_length=500, default=None)
    category: Optional[str] = Field(max_length=100, default=None, index=True)
    is_public: bool = Field(default=True, index=True)
    # Not a foreign key: images may outlive their owner under the "retain" policy
    owner_id: int = Field(index=True)
