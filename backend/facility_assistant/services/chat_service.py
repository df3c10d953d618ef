"""Assistant gateway: relays a prompt plus chat history to the Anthropic API."""

import logging
from collections.abc import Sequence
from typing import Protocol

from anthropic import APIError, AsyncAnthropic

from facility_assistant.config import Settings, get_settings

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a friendly and helpful AI assistant for the VMCC campus facility services. "
    "Provide concise and accurate information about campus facilities, maintenance requests, "
    "and general campus questions. If a user reports a problem, acknowledge the report, "
    "summarize the location and description, and inform them that an admin has been notified "
    "and a ticket will be created shortly. Do not invent a ticket ID."
)

FALLBACK_REPLY = "Sorry, I'm having trouble connecting to my brain right now. Please try again later."


class GatewayError(Exception):
    """The assistant could not produce a reply (missing key, network or provider error)."""


class MissingApiKeyError(GatewayError):
    """No provider credential is configured."""


class AssistantGateway(Protocol):
    async def generate_reply(self, prompt: str, history: Sequence[dict[str, str]]) -> str: ...


def build_transcript(prompt: str, history: Sequence[dict[str, str]]) -> list[dict[str, str]]:
    """
    Convert sender/text history into a role-tagged Messages API transcript.

    ``user`` stays ``user`` and ``bot`` becomes ``assistant``. Consecutive turns
    from the same role are merged and leading assistant turns are dropped, since
    the transcript must open with a user turn. The prompt is appended last.
    """
    messages: list[dict[str, str]] = []
    turns = [*history, {"sender": "user", "text": prompt}]
    for turn in turns:
        role = "user" if turn.get("sender") == "user" else "assistant"
        text = turn.get("text", "")
        if not messages and role == "assistant":
            continue
        if messages and messages[-1]["role"] == role:
            messages[-1]["content"] = f"{messages[-1]['content']}\n\n{text}"
        else:
            messages.append({"role": role, "content": text})
    return messages


class ChatService:
    """Gateway backed by the Anthropic Messages API."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._client: AsyncAnthropic | None = None

    @property
    def client(self) -> AsyncAnthropic:
        if not self.settings.anthropic_api_key:
            raise MissingApiKeyError("API key is not configured.")
        if self._client is None:
            self._client = AsyncAnthropic(
                api_key=self.settings.anthropic_api_key,
                timeout=self.settings.gateway_timeout_seconds,
            )
        return self._client

    async def generate_reply(self, prompt: str, history: Sequence[dict[str, str]]) -> str:
        """
        Get a single, non-streamed reply.

        Args:
            prompt: Latest user utterance
            history: Prior sender/text pairs, seed greeting excluded

        Raises:
            GatewayError: on a missing key or any provider/network failure
        """
        client = self.client
        try:
            message = await client.messages.create(
                model=self.settings.llm_model,
                max_tokens=self.settings.llm_max_tokens,
                system=SYSTEM_INSTRUCTION,
                messages=build_transcript(prompt, history),
            )
        except APIError as e:
            raise GatewayError("Failed to get response from AI.") from e

        text = "".join(block.text for block in message.content if getattr(block, "type", None) == "text")
        if not text:
            raise GatewayError("Empty response from AI.")
        return text

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None


# Singleton instance
chat_service = ChatService()
