"""End-to-end tests of the HTTP routes with in-memory collaborators."""

import httpx
import pytest

from app.api.dependencies import get_database, get_llm_client
from app.main import app


@pytest.fixture
async def client(database, llm_client):
    app.dependency_overrides[get_database] = lambda: database
    app.dependency_overrides[get_llm_client] = lambda: llm_client
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://test", headers={"X-User-Id": "u1"}
    ) as client:
        yield client
    app.dependency_overrides.clear()


async def test_health(client):
    response = await client.get("/health")
    assert response.json() == {"status": "healthy"}


async def test_missing_user_header_is_unauthorized(client):
    response = await client.get("/api/v1/threads", headers={"X-User-Id": ""})
    assert response.status_code == 401


async def test_create_then_list_thread(client):
    created = await client.post("/api/v1/threads")
    assert created.status_code == 201
    thread_id = created.json()["id"]

    response = await client.get("/api/v1/threads")

    assert response.status_code == 200
    [thread] = response.json()
    assert thread["id"] == thread_id
    assert thread["label"] == "New Thread"
    assert thread["lastMessage"] == ""
    assert thread["userId"] == "u1"


async def test_append_message_updates_preview(client):
    thread_id = (await client.post("/api/v1/threads")).json()["id"]

    response = await client.post(
        f"/api/v1/threads/{thread_id}/messages",
        json={"role": "user", "content": "Hello there"},
    )
    assert response.status_code == 201
    assert response.json()["threadId"] == thread_id

    [thread] = (await client.get("/api/v1/threads")).json()
    assert thread["lastMessage"] == "Hello there"
    assert thread["updatedAt"] >= thread["createdAt"]


async def test_system_message_is_rejected(client):
    thread_id = (await client.post("/api/v1/threads")).json()["id"]

    response = await client.post(
        f"/api/v1/threads/{thread_id}/messages",
        json={"role": "system", "content": "You are a pirate."},
    )

    assert response.status_code == 422


async def test_first_exchange_then_messages_in_order(client):
    thread_id = (await client.post("/api/v1/threads")).json()["id"]

    response = await client.post(
        f"/api/v1/threads/{thread_id}/first-exchange",
        json={"userMessage": "Plan a weekend in Lisbon", "assistantMessage": "Here is a relaxed plan for Lisbon."},
    )
    assert response.status_code == 204

    messages = (await client.get(f"/api/v1/threads/{thread_id}/messages")).json()
    assert [m["role"] for m in messages] == ["user", "assistant"]
    thread = (await client.get(f"/api/v1/threads/{thread_id}")).json()
    assert thread["label"] == "Here is a relaxed"
    assert thread["title"] == "Plan a weekend in Lisbon..."


async def test_other_users_thread_is_not_found(client):
    thread_id = (await client.post("/api/v1/threads", headers={"X-User-Id": "u2"})).json()["id"]

    assert (await client.get(f"/api/v1/threads/{thread_id}")).status_code == 404
    assert (await client.get(f"/api/v1/threads/{thread_id}/messages")).status_code == 404
    assert (await client.get("/api/v1/threads/not-an-id")).status_code == 404


async def test_patch_updates_label(client):
    thread_id = (await client.post("/api/v1/threads")).json()["id"]

    response = await client.patch(f"/api/v1/threads/{thread_id}", json={"label": "Renamed"})

    assert response.status_code == 200
    assert response.json()["label"] == "Renamed"
    assert response.json()["title"] == "New Thread"


async def test_search_filters_threads(client):
    first = (await client.post("/api/v1/threads")).json()["id"]
    await client.post("/api/v1/threads")
    await client.post(f"/api/v1/threads/{first}/messages", json={"role": "user", "content": "Sourdough starter tips"})

    response = await client.get("/api/v1/threads", params={"q": "SOURDOUGH"})

    assert [t["id"] for t in response.json()] == [first]


async def test_listing_reconciles_only_on_request(client):
    thread_id = (await client.post("/api/v1/threads")).json()["id"]
    await client.post(f"/api/v1/threads/{thread_id}/messages", json={"role": "user", "content": "Hi"})
    await client.post(
        f"/api/v1/threads/{thread_id}/messages",
        json={"role": "assistant", "content": "Hello, what can I do?"},
    )

    [plain] = (await client.get("/api/v1/threads")).json()
    assert plain["label"] == "New Thread"

    [reconciled] = (await client.get("/api/v1/threads", params={"reconcile": "true"})).json()
    assert reconciled["label"] == "Hello, what can I"

    response = await client.post("/api/v1/threads/reconcile")
    assert response.json() == {"updated": 0}


async def test_generate_title(client):
    response = await client.post(
        "/api/v1/threads/generate-title",
        json={"userMessage": "What is the capital of France?", "aiResponse": "Paris."},
    )
    assert response.json() == {"title": "Capital of France"}


async def test_chat_streams_reply_and_stores_thread(client):
    response = await client.post("/api/v1/chat", json={"message": "What is the capital of France?"})

    assert response.status_code == 200
    assert response.text == "Paris is the capital."
    thread_id = response.headers["X-Thread-Id"]

    messages = (await client.get(f"/api/v1/threads/{thread_id}/messages")).json()
    assert [(m["role"], m["content"]) for m in messages] == [
        ("user", "What is the capital of France?"),
        ("assistant", "Paris is the capital."),
    ]

    follow_up = await client.post("/api/v1/chat", json={"threadId": thread_id, "message": "Thanks"})
    assert follow_up.headers["X-Thread-Id"] == thread_id
    messages = (await client.get(f"/api/v1/threads/{thread_id}/messages")).json()
    assert len(messages) == 4


async def test_chat_without_api_key_fails_before_streaming(client, make_llm_client):
    app.dependency_overrides[get_llm_client] = lambda: make_llm_client(lambda request: None, api_key=None)

    response = await client.post("/api/v1/chat", json={"message": "Hi"})

    assert response.status_code == 500
    assert (await client.get("/api/v1/threads")).json() == []
