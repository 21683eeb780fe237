from fastapi import APIRouter, Depends, Response, status

from autoheal.exceptions import AuthError
from autoheal.models.user import User
from autoheal.schemas.common import MessageResponse
from autoheal.schemas.user import AuthResponse, CurrentUserResponse, UserCreate, UserLogin, UserPublic
from autoheal.security import end_session, get_optional_user, start_session
from autoheal.services.auth_service import AuthService
from autoheal.storage import Storage, get_storage

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(data: UserCreate, response: Response, storage: Storage = Depends(get_storage)):
    user = await AuthService(storage).register(data.username, data.password)
    start_session(response, user)
    return AuthResponse(user=UserPublic.model_validate(user), message="Registration successful")


@router.post("/login", response_model=AuthResponse)
async def login(data: UserLogin, response: Response, storage: Storage = Depends(get_storage)):
    user = await AuthService(storage).authenticate(data.username, data.password)
    start_session(response, user)
    return AuthResponse(user=UserPublic.model_validate(user), message="Login successful")


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    end_session(response)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(user: User | None = Depends(get_optional_user)):
    # Never logged in and expired session look the same to the dashboard
    if user is None:
        raise AuthError("Not authenticated")
    return CurrentUserResponse(user=UserPublic.model_validate(user))
