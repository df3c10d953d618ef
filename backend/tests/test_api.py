from httpx import ASGITransport, AsyncClient

from facility_assistant.api.deps import decode_session_token
from facility_assistant.api.routes.assistant import get_gateway
from facility_assistant.config import Settings, get_settings
from facility_assistant.db.models import Problem, ProblemPriority, ProblemStatus
from facility_assistant.main import app
from facility_assistant.services.chat_service import FALLBACK_REPLY, ChatService
from facility_assistant.services.conversation import REACTION_EMOJIS, SEED_MESSAGE_ID
from facility_assistant.services.session_manager import ClientSession, SessionRegistry

ADMIN_CODE = get_settings().admin_code


def _session(client: AsyncClient, registry: SessionRegistry) -> ClientSession:
    token = client.headers["Authorization"].split()[1]
    return registry.get(decode_session_token(token))


async def _login_student(client: AsyncClient, username: str = "sam") -> None:
    await client.post("/auth/role", json={"role": "student"})
    await client.post("/auth/register", json={"username": username, "password": "pw"})
    response = await client.post("/auth/login", json={"username": username, "password": "pw"})
    assert response.status_code == 200


async def _login_admin(client: AsyncClient) -> None:
    await client.post("/auth/role", json={"role": "admin"})
    response = await client.post("/auth/login", json={"username": "admin", "password": "password123"})
    assert response.status_code == 200


async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.json() == {"status": "healthy"}


async def test_session_is_reused_across_requests(client: AsyncClient, registry: SessionRegistry):
    await client.get("/auth/me")
    await client.get("/auth/me")
    assert len(registry) == 1


async def test_auth_flow(client: AsyncClient):
    me = (await client.get("/auth/me")).json()
    assert me["state"] == "role_unselected"
    assert me["account"] is None

    response = await client.post("/auth/role", json={"role": "student"})
    assert response.status_code == 200
    assert (await client.get("/auth/me")).json()["state"] == "awaiting_credentials"

    response = await client.post("/auth/register", json={"username": "Lee", "password": "pw"})
    assert response.status_code == 201
    assert response.json()["message"] == "Registration successful! Please log in."

    response = await client.post("/auth/register", json={"username": "lee", "password": "x"})
    assert response.status_code == 409
    assert response.json()["detail"] == "Username already exists."

    response = await client.post("/auth/login", json={"username": "lee", "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid username or password."

    response = await client.post("/auth/login", json={"username": "lee", "password": "pw"})
    assert response.status_code == 200
    me = (await client.get("/auth/me")).json()
    assert me["state"] == "authenticated"
    assert me["account"] == {"username": "Lee", "role": "student"}


async def test_admin_registration_needs_admin_code(client: AsyncClient):
    await client.post("/auth/role", json={"role": "admin"})

    response = await client.post("/auth/register", json={"username": "root2", "password": "pw", "admin_code": "bad"})
    assert response.status_code == 403
    assert response.json()["detail"] == "Invalid Admin Code."

    response = await client.post(
        "/auth/register", json={"username": "root", "password": "pw", "admin_code": ADMIN_CODE}
    )
    assert response.status_code == 201
    assert response.json()["role"] == "admin"


async def test_password_reset_flow(client: AsyncClient):
    await _login_student(client, "pat")
    await client.post("/auth/logout")

    response = await client.post("/auth/password-reset/find", json={"username": "ghost"})
    assert response.status_code == 404

    response = await client.post("/auth/password-reset/find", json={"username": "PAT"})
    assert response.json()["role"] == "student"
    assert (await client.get("/auth/me")).json()["reset_step"] == "reset_credential"

    response = await client.post("/auth/password-reset", json={"username": "pat", "new_password": "new"})
    assert response.status_code == 200

    response = await client.post("/auth/password-reset", json={"username": "admin", "new_password": "new"})
    assert response.status_code == 403

    response = await client.post("/auth/login", json={"username": "pat", "password": "new"})
    assert response.status_code == 200


async def test_chat_requires_login(client: AsyncClient):
    response = await client.get("/chat/messages")
    assert response.status_code == 401


async def test_protected_requests_without_session_do_not_create_one(
    client: AsyncClient, registry: SessionRegistry
):
    before = len(registry)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as anonymous:
        for _ in range(20):
            response = await anonymous.get("/chat/messages")
            assert response.status_code == 401
            assert "X-Session-Token" not in response.headers

    assert len(registry) == before


async def test_send_message_and_list(client: AsyncClient, gateway):
    await _login_student(client)

    response = await client.post("/chat/messages", json={"message": "Where is the library?"})
    assert response.status_code == 200
    body = response.json()
    assert body["user_message"]["sender"] == "user"
    assert body["reply"]["text"] == "Happy to help!"
    assert body["utterance"]["text"] == "Happy to help!"
    assert body["failed"] is False

    messages = (await client.get("/chat/messages")).json()["messages"]
    assert [m["sender"] for m in messages] == ["bot", "user", "bot"]
    assert messages[0]["id"] == SEED_MESSAGE_ID


async def test_blank_message_is_rejected(client: AsyncClient, gateway):
    await _login_student(client)

    response = await client.post("/chat/messages", json={"message": "   "})

    assert response.status_code == 422
    assert gateway.calls == []
    assert len((await client.get("/chat/messages")).json()["messages"]) == 1


async def test_send_message_with_failing_gateway_returns_fallback(client: AsyncClient, gateway):
    gateway.fail = True
    await _login_student(client)

    response = await client.post("/chat/messages", json={"message": "Where is the library?"})

    assert response.status_code == 200
    assert response.json()["failed"] is True
    messages = (await client.get("/chat/messages")).json()["messages"]
    assert messages[-1] == {**messages[-1], "sender": "bot", "text": FALLBACK_REPLY}


async def test_reactions_and_clear(client: AsyncClient):
    await _login_student(client)
    reply_id = (await client.post("/chat/messages", json={"message": "hi"})).json()["reply"]["id"]
    heart = REACTION_EMOJIS[1]

    await client.post(f"/chat/messages/{reply_id}/reactions", json={"emoji": heart})
    response = await client.post(f"/chat/messages/{reply_id}/reactions", json={"emoji": heart})
    assert response.json()["messages"][-1]["reactions"] == {heart: 2}

    before = response.json()["messages"]
    response = await client.post("/chat/messages/unknown/reactions", json={"emoji": heart})
    assert response.json()["messages"] == before

    response = await client.post(f"/chat/messages/{reply_id}/reactions", json={"emoji": "x"})
    assert response.status_code == 400

    response = await client.delete("/chat/messages")
    assert response.status_code == 403


async def test_admin_clears_chat(client: AsyncClient):
    await _login_admin(client)
    await client.post("/chat/messages", json={"message": "hi"})

    response = await client.delete("/chat/messages")

    assert [m["id"] for m in response.json()["messages"]] == [SEED_MESSAGE_ID]


async def test_problems_are_admin_only(client: AsyncClient):
    await _login_student(client)
    response = await client.get("/problems/")
    assert response.status_code == 403


async def test_problem_board_operations(client: AsyncClient, registry: SessionRegistry):
    await _login_admin(client)
    board = _session(client, registry).tickets
    board.add(Problem(id="PRB-1", description="Leak", location="Library", priority=ProblemPriority.HIGH))
    board.add(Problem(id="PRB-2", description="Lights out", location="Gym", status=ProblemStatus.RESOLVED))
    board.add(Problem(id="PRB-3", description="Door stuck", location="Library annex", status=ProblemStatus.CLOSED))

    body = (await client.get("/problems/")).json()
    assert [p["id"] for p in body["problems"]] == ["PRB-1", "PRB-2", "PRB-3"]
    assert body["has_resolved_or_closed"] is True

    body = (await client.get("/problems/", params={"q": "library", "status": "Closed"})).json()
    assert [p["id"] for p in body["problems"]] == ["PRB-3"]

    body = (await client.get("/problems/", params={"priority": "High"})).json()
    assert [p["id"] for p in body["problems"]] == ["PRB-1"]

    response = await client.patch("/problems/PRB-1", json={"status": "In Progress"})
    assert response.json()["status"] == "In Progress"

    response = await client.patch("/problems/missing", json={"status": "Closed"})
    assert response.status_code == 404

    response = await client.delete("/problems/resolved")
    assert response.json() == {"removed": 2}

    response = await client.delete("/problems/PRB-1")
    assert response.status_code == 204
    assert (await client.get("/problems/")).json()["total"] == 0


async def test_logout_resets_chat_and_tickets(client: AsyncClient, registry: SessionRegistry):
    await _login_admin(client)
    session = _session(client, registry)
    session.tickets.add(Problem(description="Leak", location="Lab"))
    await client.post("/chat/messages", json={"message": "hello"})

    response = await client.post("/auth/logout")
    assert response.status_code == 204

    assert len(session.conversation) == 1
    assert len(session.tickets) == 0
    assert (await client.get("/auth/me")).json()["state"] == "role_unselected"


async def test_voice_settings_and_utterance(client: AsyncClient):
    await _login_admin(client)

    settings = (await client.get("/voice/settings")).json()
    assert settings["rate"] == 1.0
    assert settings["text_to_speech"] is True

    response = await client.put("/voice/settings", json={"voice_id": "en-GB", "rate": 1.5})
    assert response.json()["voice_id"] == "en-GB"
    assert response.json()["rate"] == 1.5

    response = await client.put("/voice/settings", json={"rate": 3})
    assert response.status_code == 422

    assert (await client.get("/voice/utterance")).status_code == 204
    await client.post("/chat/messages", json={"message": "hi"})
    utterance = (await client.get("/voice/utterance")).json()
    assert utterance == {**utterance, "text": "Happy to help!", "voice_id": "en-GB", "rate": 1.5}
    assert (await client.get("/voice/utterance")).status_code == 204


async def test_students_cannot_change_voice_settings(client: AsyncClient):
    await _login_student(client)

    response = await client.put("/voice/settings", json={"voice_id": "en-GB", "rate": 1.5})

    assert response.status_code == 403
    assert (await client.get("/voice/settings")).json()["rate"] == 1.0


async def test_listening_and_transcript(client: AsyncClient, gateway):
    await _login_student(client)

    response = await client.post("/voice/listen")
    assert response.json() == {"status": "ok", "listening": True}

    response = await client.post("/voice/transcript", json={"transcript": "Is the pool open?"})
    assert response.json()["turn"]["user_message"]["text"] == "Is the pool open?"
    assert gateway.calls[-1][0] == "Is the pool open?"
    assert (await client.get("/voice/settings")).json()["listening"] is False

    response = await client.post("/voice/transcript", json={"transcript": ""})
    assert response.json() == {"turn": None}


async def test_assistant_endpoint(client: AsyncClient, gateway):
    app.dependency_overrides[get_gateway] = lambda: gateway

    response = await client.post(
        "/api/assistant",
        json={"prompt": "Where is the gym?", "history": [{"sender": "user", "text": "hi"}]},
    )
    assert response.status_code == 200
    assert response.json() == {"text": "Happy to help!"}
    assert gateway.calls[-1] == ("Where is the gym?", [{"sender": "user", "text": "hi"}])

    gateway.fail = True
    response = await client.post("/api/assistant", json={"prompt": "again"})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to get response from AI."}


async def test_assistant_endpoint_without_api_key(client: AsyncClient):
    app.dependency_overrides[get_gateway] = lambda: ChatService(Settings(anthropic_api_key=None))

    response = await client.post("/api/assistant", json={"prompt": "hello"})

    assert response.status_code == 500
    assert response.json() == {"error": "API key is not configured."}


async def test_assistant_endpoint_rejects_malformed_body(client: AsyncClient, gateway):
    app.dependency_overrides[get_gateway] = lambda: gateway

    response = await client.post("/api/assistant", json={"history": "not a list"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body."}
    assert gateway.calls == []

    response = await client.post("/auth/login", json={"username": ["not", "a", "string"]})
    assert response.status_code == 422
    assert "detail" in response.json()
