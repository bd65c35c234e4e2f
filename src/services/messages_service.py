"""
Messages service - business logic for message management
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends

from database.connection import get_database
from services.base_service import BaseService, ServiceResult
from utils.helpers import generate_document_id

logger = logging.getLogger(__name__)

class MessagesService(BaseService):
    """Service for message operations"""

    def __init__(self, database):
        super().__init__("messages", database)

    async def list_messages(self) -> ServiceResult:
        return await self.read()

    async def get_message(self, message_id: str) -> ServiceResult:
        return await self.get_by_id(message_id)

    async def get_messages_by_author(self, user_id: str) -> ServiceResult:
        """
        Get all messages whose author is the given user

        Message.author is the authoritative side of the user/message
        relation, so this is the source of truth for a user's messages.
        """
        return await self.get_by_field("author", user_id)

    async def create_message(
        self,
        title: str,
        body: str,
        author_id: Optional[str] = None,
        message_id: Optional[str] = None
    ) -> ServiceResult:
        """
        Create a new message

        Args:
            title: Message title
            body: Message body
            author_id: Identifier of an existing user (optional)
            message_id: Client supplied identifier (optional, generated if omitted)

        Returns:
            ServiceResult with created message
        """
        message_data = {
            "_id": message_id or generate_document_id(),
            "title": title,
            "body": body,
            "author": author_id
        }

        logger.info(f"Creating message {message_data['_id']} for author: {author_id}")
        return await self.create(message_data)

    async def update_message(self, message_id: str, updates: Dict[str, Any]) -> ServiceResult:
        logger.info(f"Updating message {message_id} fields: {sorted(updates)}")
        return await self.update(message_id, updates)

    async def delete_message(self, message_id: str) -> ServiceResult:
        logger.info(f"Deleting message {message_id}")
        return await self.delete(message_id)

    async def delete_messages_by_title(self, titles) -> ServiceResult:
        return await self.delete_many({"title": list(titles)})


def get_messages_service(database=Depends(get_database)) -> MessagesService:
    """FastAPI dependency building a messages service on the app's database"""
    return MessagesService(database)
