"""
Message API endpoint tests
Each test starts from one user ("testuser1") who authored one message
("Test Message 1", _id "aaaaaaaaaaaa").
"""

import pytest

from sample_data import MESSAGE_OBJECT_ID, USER_OBJECT_ID


class TestMessageEndpoints:

    @pytest.mark.asyncio
    async def test_load_all_messages(self, client, database, sample_user):
        messages_before_viewing = await database.collection("messages").find()

        response = await client.get("/messages")

        assert response.status_code == 200
        all_messages = response.json()["allMessages"]
        assert isinstance(all_messages, list)
        assert len(all_messages) == len(messages_before_viewing)
        assert {m["_id"] for m in all_messages} == {m["_id"] for m in messages_before_viewing}

    @pytest.mark.asyncio
    async def test_load_all_messages_when_empty(self, client):
        response = await client.get("/messages")

        assert response.status_code == 200
        assert response.json() == {"allMessages": []}

    @pytest.mark.asyncio
    async def test_get_one_specific_message(self, client, database, sample_user):
        message = await database.collection("messages").find_one({"title": "Test Message 1"})

        response = await client.get(f"/messages/{message['_id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Test Message 1"
        assert body["body"] == "Test Body 1"
        assert body["author"] == USER_OBJECT_ID

    @pytest.mark.asyncio
    async def test_get_unknown_message_returns_404(self, client, sample_user):
        response = await client.get("/messages/doesnotexist")

        assert response.status_code == 404
        assert response.json()["message"] == "Message not found"

    @pytest.mark.asyncio
    async def test_post_new_message(self, client, database, sample_user):
        user_response = await client.get(f"/users/{USER_OBJECT_ID}")
        user = user_response.json()

        response = await client.post("/messages", json={
            "title": "Test Message 2",
            "body": "Test Body 2",
            "author": user
        })

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Test Message 2"
        assert body["body"] == "Test Body 2"
        assert body["author"] == f"{user['_id']}"

        stored = await database.collection("messages").find({"title": "Test Message 2"})
        assert len(stored) == 1

        author = await database.collection("users").find_by_id(USER_OBJECT_ID)
        assert author["messages"] == [MESSAGE_OBJECT_ID, body["_id"]]

    @pytest.mark.asyncio
    async def test_post_message_with_author_id_string(self, client, sample_user):
        response = await client.post("/messages", json={
            "title": "Test Message 2",
            "body": "Test Body 2",
            "author": USER_OBJECT_ID
        })

        assert response.status_code == 200
        assert response.json()["author"] == USER_OBJECT_ID

    @pytest.mark.asyncio
    async def test_post_message_without_author(self, client, database):
        response = await client.post("/messages", json={"title": "Orphan", "body": "No author"})

        assert response.status_code == 200
        body = response.json()
        assert body["author"] is None
        assert await database.collection("messages").find_by_id(body["_id"]) is not None

    @pytest.mark.asyncio
    async def test_post_message_with_client_supplied_id(self, client):
        response = await client.post("/messages", json={
            "_id": "bbbbbbbbbbbb",
            "title": "Test Message 2",
            "body": "Test Body 2"
        })

        assert response.status_code == 200
        assert response.json()["_id"] == "bbbbbbbbbbbb"

    @pytest.mark.asyncio
    async def test_post_message_with_duplicate_id_conflicts(self, client, sample_user):
        response = await client.post("/messages", json={
            "_id": MESSAGE_OBJECT_ID,
            "title": "Test Message 2",
            "body": "Test Body 2"
        })

        assert response.status_code == 409

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"body": "Test Body 2"},
        {"title": "Test Message 2"},
        {"title": "", "body": "Test Body 2"},
        {"title": 42, "body": "Test Body 2"},
    ])
    async def test_post_message_validation_errors(self, client, database, payload):
        response = await client.post("/messages", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Validation Error"
        assert await database.collection("messages").count() == 0

    @pytest.mark.asyncio
    async def test_post_message_with_unknown_author(self, client, database):
        response = await client.post("/messages", json={
            "title": "Test Message 2",
            "body": "Test Body 2",
            "author": "nobody"
        })

        assert response.status_code == 400
        assert "Author not found" in response.json()["message"]
        assert await database.collection("messages").count() == 0

    @pytest.mark.asyncio
    async def test_update_message(self, client, database, sample_user):
        message = await database.collection("messages").find_one({"title": "Test Message 1"})

        response = await client.put(
            f"/messages/{message['_id']}",
            json={"title": "Test Message 1 Updated"}
        )

        assert response.status_code == 200
        selected = response.json()["selectedMessage"]
        assert selected["title"] == "Test Message 1 Updated"
        assert selected["body"] == "Test Body 1"
        assert selected["author"] == USER_OBJECT_ID

        updated = await database.collection("messages").find_one({"title": "Test Message 1 Updated"})
        assert updated["title"] == "Test Message 1 Updated"
        assert updated["body"] == "Test Body 1"

    @pytest.mark.asyncio
    async def test_update_unknown_message_returns_404(self, client):
        response = await client.put("/messages/doesnotexist", json={"title": "New"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_without_fields_returns_400(self, client, sample_user):
        response = await client.put(f"/messages/{MESSAGE_OBJECT_ID}", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "No fields provided for update"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"title": ""},
        {"body": ""},
        {"title": 5},
    ])
    async def test_update_message_validation_errors(self, client, database, sample_user, payload):
        response = await client.put(f"/messages/{MESSAGE_OBJECT_ID}", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Validation Error"

        stored = await database.collection("messages").find_by_id(MESSAGE_OBJECT_ID)
        assert stored["title"] == "Test Message 1"
        assert stored["body"] == "Test Body 1"

    @pytest.mark.asyncio
    async def test_delete_message(self, client, database, sample_user):
        message = await database.collection("messages").find_one({"title": "Test Message 1"})

        response = await client.delete(f"/messages/{message['_id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Message was deleted.", "_id": MESSAGE_OBJECT_ID}
        assert await database.collection("messages").find_by_id(MESSAGE_OBJECT_ID) is None

        author = await database.collection("users").find_by_id(USER_OBJECT_ID)
        assert author["messages"] == []

    @pytest.mark.asyncio
    async def test_delete_twice_returns_404(self, client, sample_user):
        first = await client.delete(f"/messages/{MESSAGE_OBJECT_ID}")
        second = await client.delete(f"/messages/{MESSAGE_OBJECT_ID}")

        assert first.status_code == 200
        assert second.status_code == 404
        assert second.json()["message"] == "Message not found"

    @pytest.mark.asyncio
    async def test_storage_failure_returns_500(self, client, database, sample_user):
        database.fail_with = ConnectionError("connection refused")

        response = await client.get("/messages")

        assert response.status_code == 500
        assert response.json()["error"] == "HTTP 500"
        assert "connection refused" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_responses_carry_trace_id(self, client):
        response = await client.get("/messages")

        assert response.headers.get("X-Trace-ID")
