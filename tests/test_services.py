"""
Service layer tests against the in-memory document database
"""

import pytest

from sample_data import MESSAGE_OBJECT_ID, USER_OBJECT_ID
from services.messages_service import MessagesService
from services.users_service import UsersService


class TestUsersService:

    @pytest.mark.asyncio
    async def test_create_user_stores_hash_and_empty_index(self, database):
        result = await UsersService(database).create_user("testuser2", "pw", user_id="u2")

        assert result.success
        user = result.data[0]
        assert user["_id"] == "u2"
        assert user["messages"] == []
        assert "password" not in user
        assert user["password_hash"]

    @pytest.mark.asyncio
    async def test_create_user_generates_id(self, database):
        result = await UsersService(database).create_user("testuser2", "pw")

        assert result.success
        assert len(result.data[0]["_id"]) == 32

    @pytest.mark.asyncio
    async def test_duplicate_username_is_a_conflict(self, database, sample_user):
        result = await UsersService(database).create_user("testuser1", "pw")

        assert not result.success
        assert result.error_type == "CONFLICT"

    @pytest.mark.asyncio
    async def test_add_and_remove_message_on_missing_user(self, database):
        service = UsersService(database)

        assert (await service.add_message("nobody", "m1")).error_type == "RESOURCE_NOT_FOUND"
        assert (await service.remove_message("nobody", "m1")).error_type == "RESOURCE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_remove_message_keeps_other_entries_in_order(self, database, sample_user):
        service = UsersService(database)
        await service.add_message(USER_OBJECT_ID, "m2")
        await service.add_message(USER_OBJECT_ID, "m3")

        result = await service.remove_message(USER_OBJECT_ID, "m2")

        assert result.data[0]["messages"] == [MESSAGE_OBJECT_ID, "m3"]

    @pytest.mark.asyncio
    async def test_delete_users_by_username(self, database, sample_user):
        service = UsersService(database)
        await service.create_user("testuser2", "pw")
        await service.create_user("keepme", "pw")

        result = await service.delete_users_by_username(["testuser1", "testuser2"])

        assert result.success
        assert result.count == 2
        remaining = await service.list_users()
        assert [u["username"] for u in remaining.data] == ["keepme"]


class TestMessagesService:

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, database, sample_user):
        result = await MessagesService(database).update_message(MESSAGE_OBJECT_ID, {"body": "New body"})

        assert result.success
        message = result.data[0]
        assert message == {
            "_id": MESSAGE_OBJECT_ID,
            "title": "Test Message 1",
            "body": "New body",
            "author": USER_OBJECT_ID
        }

    @pytest.mark.asyncio
    async def test_get_missing_message(self, database):
        result = await MessagesService(database).get_message("missing")

        assert not result.success
        assert result.error_type == "RESOURCE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_delete_messages_by_title(self, database, sample_user):
        service = MessagesService(database)
        await service.create_message("Test Message 2", "Test Body 2")
        await service.create_message("Keep", "Keep")

        result = await service.delete_messages_by_title(["Test Message 1", "Test Message 2"])

        assert result.count == 2
        remaining = await service.list_messages()
        assert [m["title"] for m in remaining.data] == ["Keep"]

    @pytest.mark.asyncio
    async def test_storage_errors_become_database_error_results(self, database):
        database.fail_with = TimeoutError("timed out")

        result = await MessagesService(database).list_messages()

        assert not result.success
        assert result.error_type == "DATABASE_ERROR"
        assert "timed out" in result.error
