"""
User API routes
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query

from models.message import serialize_message
from models.user import UserCreateRequest, serialize_user
from services.messages_service import MessagesService, get_messages_service
from services.users_service import UsersService, get_users_service
from utils.error_handling import raise_for_service_error

router = APIRouter()
logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"

@router.post("", status_code=201)
async def create_user(
    request: UserCreateRequest,
    users_service: UsersService = Depends(get_users_service)
):
    """Create a new user"""
    result = await users_service.create_user(
        username=request.username,
        password=request.password,
        user_id=request.id
    )
    raise_for_service_error(result)

    return serialize_user(result.data[0])

@router.get("")
async def list_users(
    username: Optional[str] = Query(None, description="Exact match on username"),
    users_service: UsersService = Depends(get_users_service)
):
    """List users, optionally looking one up by username"""
    result = await users_service.list_users(username=username)
    raise_for_service_error(result)

    return {"allUsers": [serialize_user(doc) for doc in result.data]}

@router.get("/{user_id}")
async def get_user(
    user_id: str,
    users_service: UsersService = Depends(get_users_service)
):
    """Get user details"""
    result = await users_service.get_user(user_id)
    raise_for_service_error(result, USER_NOT_FOUND)

    return serialize_user(result.data[0])

@router.get("/{user_id}/messages")
async def get_user_messages(
    user_id: str,
    users_service: UsersService = Depends(get_users_service),
    messages_service: MessagesService = Depends(get_messages_service)
):
    """Get all messages authored by a user"""
    user_result = await users_service.get_user(user_id)
    raise_for_service_error(user_result, USER_NOT_FOUND)

    result = await messages_service.get_messages_by_author(user_id)
    raise_for_service_error(result)

    return {"messages": [serialize_message(doc) for doc in result.data]}
