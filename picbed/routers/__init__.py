# Routers package
from . import auth_router
from . import images_router
from . import users_router

__all__ = [
    "auth_router",
    "images_router",
    "users_router",
]
