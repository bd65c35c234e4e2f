"""
pytest configuration and fixtures shared by the API test suites
"""

import httpx
import pytest_asyncio

from app import create_app
from fakes import InMemoryDatabase
from sample_data import MESSAGE_OBJECT_ID, USER_OBJECT_ID
from services.messages_service import MessagesService
from services.users_service import UsersService


@pytest_asyncio.fixture
async def database():
    """Fresh in-memory document database per test"""
    db = InMemoryDatabase()
    await db.connect()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def client(database):
    """HTTP client talking to the app in-process"""
    app = create_app(database=database)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def sample_user(database):
    """One user with one message authored by them"""
    users_service = UsersService(database)
    messages_service = MessagesService(database)

    user_result = await users_service.create_user(
        username="testuser1",
        password="securepassword1",
        user_id=USER_OBJECT_ID
    )
    assert user_result.success, user_result.error

    message_result = await messages_service.create_message(
        title="Test Message 1",
        body="Test Body 1",
        author_id=USER_OBJECT_ID,
        message_id=MESSAGE_OBJECT_ID
    )
    assert message_result.success, message_result.error

    link_result = await users_service.add_message(USER_OBJECT_ID, MESSAGE_OBJECT_ID)
    return link_result.data[0]
