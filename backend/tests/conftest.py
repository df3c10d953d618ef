"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Sequence
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from facility_assistant.db.flat_store import FlatStore
from facility_assistant.main import app
from facility_assistant.services.chat_service import GatewayError
from facility_assistant.services.credential_store import CredentialStore
from facility_assistant.services.session_manager import SessionRegistry, get_session_registry


class FakeGateway:
    """Records calls and answers with a canned reply, or fails on demand."""

    def __init__(self, reply: str = "Happy to help!"):
        self.reply = reply
        self.fail = False
        self.calls: list[tuple[str, list[dict[str, str]]]] = []

    async def generate_reply(self, prompt: str, history: Sequence[dict[str, str]]) -> str:
        self.calls.append((prompt, list(history)))
        if self.fail:
            raise GatewayError("upstream unavailable")
        return self.reply


@pytest.fixture
def flat_store(tmp_path: Path) -> FlatStore:
    return FlatStore(tmp_path / "store.json")


@pytest.fixture
def credentials(flat_store: FlatStore) -> CredentialStore:
    return CredentialStore(flat_store)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def registry(credentials: CredentialStore, gateway: FakeGateway) -> SessionRegistry:
    return SessionRegistry(credentials=credentials, gateway=gateway)


@pytest.fixture
async def client(registry: SessionRegistry) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to one client session."""
    app.dependency_overrides[get_session_registry] = lambda: registry
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        response = await ac.get("/auth/me")
        ac.headers["Authorization"] = f"Bearer {response.headers['X-Session-Token']}"
        yield ac
    app.dependency_overrides.clear()
