import logging
import os
import uuid
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional, Tuple

from ..ports.image_repo import ImageRepository, StoredImage
from ..ports.storage_repo import StorageBackend
from ..ports.user_repo import UserDto
from ...exceptions import DecodeError, NotFoundError, PermissionDeniedError, QuotaError, ValidationError
from ...infrastructure.imaging.thumbnail_generator import ThumbnailGenerator

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass
class UploadPolicy:
    max_file_size: int = 10 * 1024 * 1024
    allowed_extensions: List[str] = field(default_factory=lambda: ["jpg", "jpeg", "png", "gif", "webp"])
    admin_username: str = "admin"
    per_user_limit: int = 1
    support_contact: str = "the site administrator"
    thumbnail_prefix: str = "thumb_"

    def quota_message(self) -> str:
        noun = "image" if self.per_user_limit == 1 else "images"
        return (
            f"Upload limit reached. You can only upload {self.per_user_limit} {noun}. "
            f"For more uploads, please contact {self.support_contact} to request additional permissions."
        )


@dataclass
class ImageService:
    image_repo: ImageRepository
    storage: StorageBackend
    thumbnails: ThumbnailGenerator
    policy: UploadPolicy = field(default_factory=UploadPolicy)

    def thumbnail_key(self, file_name: str) -> str:
        return f"{self.policy.thumbnail_prefix}{file_name}"

    def is_admin(self, user: UserDto) -> bool:
        return user.username == self.policy.admin_username

    # --- upload pipeline ---

    def validate_upload(self, data: bytes, filename: str) -> str:
        """Check size and extension; returns the lower-case extension with its dot."""
        if not data:
            raise ValidationError("No file uploaded")
        if len(data) > self.policy.max_file_size:
            raise ValidationError(f"File size exceeds maximum allowed size of {self.policy.max_file_size} bytes")
        extension = os.path.splitext(filename or "")[1].lower()
        if extension.lstrip(".") not in self.policy.allowed_extensions:
            raise ValidationError(f"File extension {extension or '(none)'} is not allowed")
        return extension

    def check_quota(self, owner: UserDto) -> None:
        if self.is_admin(owner):
            return
        # Not serialized with the insert below; concurrent uploads may both pass
        if self.image_repo.count_for_owner(owner.id) >= self.policy.per_user_limit:
            raise QuotaError(self.policy.quota_message())

    def upload_image(
        self,
        owner: UserDto,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> StoredImage:
        extension = self.validate_upload(data, filename)
        self.check_quota(owner)

        file_name = f"{uuid.uuid4()}{extension}"
        try:
            processed = self.thumbnails.process(data)
        except DecodeError as e:
            logger.error(f"Error processing image {file_name} ({filename}) for user {owner.id}")
            raise ValidationError("Invalid image file") from e

        mime_type = processed.mime_type
        if mime_type == "application/octet-stream" and content_type:
            mime_type = content_type

        written: List[str] = []
        try:
            self.storage.put(file_name, data, mime_type)
            written.append(file_name)
            thumb_key = self.thumbnail_key(file_name)
            self.storage.put(thumb_key, processed.thumbnail, processed.thumbnail_mime_type)
            written.append(thumb_key)

            record = self.image_repo.create(
                file_name=file_name,
                original_file_name=filename,
                file_extension=extension,
                file_size=len(data),
                width=processed.width,
                height=processed.height,
                mime_type=mime_type,
                owner_id=owner.id,
                description=description,
                category=category,
            )
        except Exception:
            logger.exception(f"Upload of {file_name} failed after writing {len(written)} blob(s)")
            self._discard_blobs(written)
            raise

        logger.info(f"Image {record.id} stored as {file_name} for user {owner.id}")
        return record

    def _discard_blobs(self, keys: List[str]) -> None:
        for key in reversed(keys):
            try:
                self.storage.delete(key)
            except Exception as e:
                logger.error(f"Cleanup of orphaned blob {key} failed: {e}")

    # --- retrieval ---

    def get_image(self, image_id: int) -> StoredImage:
        record = self.image_repo.get_by_id(image_id)
        if record is None:
            raise NotFoundError("Image not found")
        return record

    def get_image_by_file_name(self, file_name: str) -> StoredImage:
        record = self.image_repo.get_by_file_name(file_name)
        if record is None:
            raise NotFoundError("Image not found")
        return record

    def list_images(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE,
                    category: Optional[str] = None) -> List[StoredImage]:
        if page < 1:
            page = 1
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            page_size = DEFAULT_PAGE_SIZE
        return self.image_repo.list_page((page - 1) * page_size, page_size, category)

    def count_for_owner(self, owner_id: int) -> int:
        return self.image_repo.count_for_owner(owner_id)

    def open_original(self, file_name: str) -> Tuple[StoredImage, BinaryIO]:
        record = self.get_image_by_file_name(file_name)
        stream = self.storage.get(record.file_name)
        if stream is None:
            raise NotFoundError("Image file not found")
        return record, stream

    def open_thumbnail(self, file_name: str) -> Tuple[StoredImage, BinaryIO]:
        record = self.get_image_by_file_name(file_name)
        stream = self.storage.get(self.thumbnail_key(record.file_name))
        if stream is None:
            raise NotFoundError("Thumbnail not found")
        return record, stream

    def urls_for(self, record: StoredImage) -> Tuple[str, str]:
        return self.storage.url_for(record.file_name), self.storage.url_for(self.thumbnail_key(record.file_name))

    # --- deletion ---

    def delete_image(self, image_id: int, requester: Optional[UserDto] = None) -> None:
        record = self.get_image(image_id)
        if requester is not None and record.owner_id != requester.id and not self.is_admin(requester):
            raise PermissionDeniedError("You can only delete your own images")

        self.storage.delete(self.thumbnail_key(record.file_name))
        self.storage.delete(record.file_name)
        self.image_repo.delete(record.id)
        logger.info(f"Image {record.id} ({record.file_name}) deleted")
