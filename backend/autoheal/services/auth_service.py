"""Account registration and credential checks."""

import logging

from autoheal.exceptions import AuthError
from autoheal.models.user import User
from autoheal.security import get_password_hash, verify_password
from autoheal.storage import Storage

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, storage: Storage):
        self.storage = storage

    async def register(self, username: str, password: str) -> User:
        """Create a user. Raises ConflictError if the username is taken."""
        user = await self.storage.create_user(username, get_password_hash(password))
        await self.storage.commit()
        logger.info("Registered user %s", user.username)
        return user

    async def authenticate(self, username: str, password: str) -> User:
        user = await self.storage.get_user_by_username(username)
        if not user or not verify_password(password, user.password_hash):
            logger.info("Rejected login for %s", username)
            raise AuthError("Incorrect username or password")
        return user
