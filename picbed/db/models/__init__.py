# Models package (re-export feature modules for stable imports)
from .users.user import User
from .media.image import ImageInfo

__all__ = [
    "User",
    "ImageInfo",
]
