import logging
from dataclasses import dataclass
from typing import Optional

from ..ports.audit_logger import AuditLogger
from ..ports.user_repo import UserRepository, UserDto
from .image_service import ImageService
from ...exceptions import NotFoundError, PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)

RETAIN_IMAGES = "retain"
CASCADE_IMAGES = "cascade"
DELETE_POLICIES = (RETAIN_IMAGES, CASCADE_IMAGES)


@dataclass
class UserService:
    user_repo: UserRepository
    image_service: ImageService
    delete_policy: str = RETAIN_IMAGES
    audit_logger: Optional[AuditLogger] = None

    def __post_init__(self):
        if self.delete_policy not in DELETE_POLICIES:
            raise ValueError(f"Unknown user delete policy {self.delete_policy!r}; expected one of {DELETE_POLICIES}")

    def delete_user(self, user_id: int, requester: UserDto) -> int:
        """Delete a user; returns how many of their images were removed with them."""
        if not self.image_service.is_admin(requester):
            raise PermissionDeniedError("Only the administrator can delete users")
        if requester.id == user_id:
            raise ValidationError("The administrator account cannot delete itself")

        user = self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        removed = 0
        if self.delete_policy == CASCADE_IMAGES:
            for image in self.image_service.image_repo.list_for_owner(user_id):
                self.image_service.delete_image(image.id)
                removed += 1

        self.user_repo.delete(user_id)
        logger.info(f"User {user_id} deleted ({self.delete_policy}, {removed} image(s) removed)")
        if self.audit_logger is not None:
            self.audit_logger.log("delete_user", user.username, user_id=user_id,
                                  details={"policy": self.delete_policy, "images_removed": removed})
        return removed
