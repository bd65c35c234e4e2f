"""
Message API routes
All storage access goes through the service layer. The handlers keep the
author relation consistent: Message.author is authoritative and the author's
User.messages list is maintained alongside it.
"""

import logging
from fastapi import APIRouter, HTTPException, Depends

from models.message import MessageCreateRequest, MessageUpdateRequest, serialize_message
from services.messages_service import MessagesService, get_messages_service
from services.users_service import UsersService, get_users_service
from utils.error_handling import raise_for_service_error

router = APIRouter()
logger = logging.getLogger(__name__)

MESSAGE_NOT_FOUND = "Message not found"

@router.get("")
async def list_messages(
    messages_service: MessagesService = Depends(get_messages_service)
):
    """List all messages"""
    result = await messages_service.list_messages()
    raise_for_service_error(result)

    return {"allMessages": [serialize_message(doc) for doc in result.data]}

@router.get("/{message_id}")
async def get_message(
    message_id: str,
    messages_service: MessagesService = Depends(get_messages_service)
):
    """Get one message"""
    result = await messages_service.get_message(message_id)
    raise_for_service_error(result, MESSAGE_NOT_FOUND)

    return serialize_message(result.data[0])

@router.post("")
async def create_message(
    request: MessageCreateRequest,
    messages_service: MessagesService = Depends(get_messages_service),
    users_service: UsersService = Depends(get_users_service)
):
    """Create a new message, linking it to its author"""
    author_id = request.author_id()

    if author_id is not None:
        author_result = await users_service.get_user(author_id)
        if not author_result.success:
            if author_result.error_type == "RESOURCE_NOT_FOUND":
                raise HTTPException(status_code=400, detail=f"Author not found: {author_id}")
            raise_for_service_error(author_result)

    result = await messages_service.create_message(
        title=request.title,
        body=request.body,
        author_id=author_id,
        message_id=request.id
    )
    raise_for_service_error(result)

    message = result.data[0]

    if author_id is not None:
        link_result = await users_service.add_message(author_id, message["_id"])
        if not link_result.success:
            # The message is stored; only the author's index is stale
            logger.warning(
                f"Message {message['_id']} created but not added to user {author_id}: {link_result.error}"
            )

    return serialize_message(message)

@router.put("/{message_id}")
async def update_message(
    message_id: str,
    request: MessageUpdateRequest,
    messages_service: MessagesService = Depends(get_messages_service)
):
    """Update message fields; omitted fields keep their values"""
    updates = {}
    if request.title is not None:
        updates["title"] = request.title
    if request.body is not None:
        updates["body"] = request.body

    if not updates:
        raise HTTPException(status_code=400, detail="No fields provided for update")

    result = await messages_service.update_message(message_id, updates)
    raise_for_service_error(result, MESSAGE_NOT_FOUND)

    return {"selectedMessage": serialize_message(result.data[0])}

@router.delete("/{message_id}")
async def delete_message(
    message_id: str,
    messages_service: MessagesService = Depends(get_messages_service),
    users_service: UsersService = Depends(get_users_service)
):
    """Delete a message and unlink it from its author"""
    result = await messages_service.delete_message(message_id)
    raise_for_service_error(result, MESSAGE_NOT_FOUND)

    author_id = result.data[0].get("author")
    if author_id:
        unlink_result = await users_service.remove_message(author_id, message_id)
        if not unlink_result.success:
            logger.warning(
                f"Message {message_id} deleted but not removed from user {author_id}: {unlink_result.error}"
            )

    return {"message": "Message was deleted.", "_id": message_id}
