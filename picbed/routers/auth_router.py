import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials

from ..application.services.auth_service import AuthService, LoginResult
from ..exceptions import AuthError, ValidationError
from ..schemas import LoginRequest, LoginResponse, MessageResponse, RegisterRequest, UserResponse
from .dependencies import get_auth_service, oauth2_scheme

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _success(result: LoginResult, message: str) -> LoginResponse:
    return LoginResponse(
        success=True,
        message=message,
        token=result.token,
        expires_at=result.expires_at,
        user=UserResponse.from_dto(result.user),
    )


def _failure(message: str) -> JSONResponse:
    body = LoginResponse(success=False, message=message)
    return JSONResponse(status_code=400, content=body.model_dump(mode="json"))


@router.post("/login", response_model=LoginResponse)
def login(request: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    try:
        result = auth_service.login(request.username, request.password)
    except AuthError as e:
        return _failure(e.message)
    return _success(result, "Login successful")


@router.post("/register", response_model=LoginResponse)
def register(request: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    try:
        result = auth_service.register(request.username, request.password, request.email)
    except ValidationError as e:
        return _failure(e.message)
    return _success(result, "Registration successful")


@router.get("/validate", response_model=MessageResponse)
def validate_token(
    credentials: HTTPAuthorizationCredentials = Depends(oauth2_scheme),
    auth_service: AuthService = Depends(get_auth_service),
):
    if not credentials or not credentials.credentials:
        return JSONResponse(status_code=401, content={"message": "Token is required"})
    if not auth_service.validate_token(credentials.credentials):
        return JSONResponse(status_code=401, content={"message": "Invalid token"})
    return MessageResponse(message="Token is valid")
