from fastapi import APIRouter, Depends

from ..application.ports.user_repo import UserDto
from ..application.services.user_service import UserService
from .dependencies import get_current_user, get_user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    current_user: UserDto = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    removed = user_service.delete_user(user_id, requester=current_user)
    return {"message": "User deleted", "images_removed": removed}
