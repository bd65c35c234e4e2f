"""
Users service - business logic for user management
"""

import logging
from typing import Iterable, Optional

from fastapi import Depends

from database.connection import get_database
from services.base_service import BaseService, ServiceResult
from utils.helpers import generate_document_id
from utils.security import hash_password

logger = logging.getLogger(__name__)

class UsersService(BaseService):
    """Service for user operations"""

    def __init__(self, database):
        super().__init__("users", database)

    async def create_user(
        self,
        username: str,
        password: str,
        user_id: Optional[str] = None
    ) -> ServiceResult:
        """
        Create a new user with an empty message list

        Args:
            username: Unique username
            password: Plain text password, stored only as a salted hash
            user_id: Client supplied identifier (optional, generated if omitted)

        Returns:
            ServiceResult with created user, or CONFLICT if the username is taken
        """
        existing = await self.get_user_by_username(username)
        if not existing.success:
            return existing
        if existing.data:
            return ServiceResult(
                success=False,
                error=f"Username already exists: {username}",
                error_type="CONFLICT"
            )

        user_data = {
            "_id": user_id or generate_document_id(),
            "username": username,
            "password_hash": hash_password(password),
            "messages": []
        }

        logger.info(f"Creating user: {username}")
        return await self.create(user_data)

    async def get_user(self, user_id: str) -> ServiceResult:
        return await self.get_by_id(user_id)

    async def get_user_by_username(self, username: str) -> ServiceResult:
        return await self.get_by_field("username", username)

    async def list_users(self, username: Optional[str] = None) -> ServiceResult:
        if username is not None:
            return await self.get_user_by_username(username)
        return await self.read()

    async def add_message(self, user_id: str, message_id: str) -> ServiceResult:
        """Append a message id to the user's messages index"""
        try:
            document = await self.collection.push(user_id, "messages", message_id)
        except Exception as e:
            return self._database_error("Update", e)

        if document is None:
            return self._not_found(user_id)
        return ServiceResult(success=True, data=[document], count=1)

    async def remove_message(self, user_id: str, message_id: str) -> ServiceResult:
        """Drop a message id from the user's messages index"""
        try:
            document = await self.collection.pull(user_id, "messages", message_id)
        except Exception as e:
            return self._database_error("Update", e)

        if document is None:
            return self._not_found(user_id)
        return ServiceResult(success=True, data=[document], count=1)

    async def delete_users_by_username(self, usernames: Iterable[str]) -> ServiceResult:
        return await self.delete_many({"username": list(usernames)})


def get_users_service(database=Depends(get_database)) -> UsersService:
    """FastAPI dependency building a users service on the app's database"""
    return UsersService(database)
