"""In-memory conversation log with emoji reaction tallies."""

from collections.abc import Iterator

from facility_assistant.db.models import ChatMessage, Sender

SEED_MESSAGE_ID = "initial-message"
SEED_MESSAGE_TEXT = (
    "Hello! I'm the VMCC Facility Assistant. How can I help you today? "
    "You can ask me about campus facilities or report a problem."
)

# Emoji offered by the reaction picker.
REACTION_EMOJIS = ("\U0001f44d", "❤️", "\U0001f602", "\U0001f62e", "\U0001f622", "\U0001f64f")


def seed_message() -> ChatMessage:
    return ChatMessage(id=SEED_MESSAGE_ID, sender=Sender.BOT, text=SEED_MESSAGE_TEXT)


class ConversationLog:
    """
    Ordered chat history for one client session.

    The log is never empty: it starts with, and resets to, the seed greeting.
    Messages are only ever appended; the single mutable part of a message is
    its reaction tally, which only grows.
    """

    def __init__(self):
        self._messages: list[ChatMessage] = [seed_message()]

    def append_user_message(self, text: str) -> ChatMessage:
        message = ChatMessage(sender=Sender.USER, text=text)
        self._messages.append(message)
        return message

    def append_bot_message(self, text: str) -> ChatMessage:
        message = ChatMessage(sender=Sender.BOT, text=text)
        self._messages.append(message)
        return message

    def get(self, message_id: str) -> ChatMessage | None:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def add_reaction(self, message_id: str, emoji: str) -> ChatMessage | None:
        """Increment ``emoji`` on a message. Unknown ids are ignored."""
        message = self.get(message_id)
        if message is None:
            return None
        message.reactions[emoji] = message.reactions.get(emoji, 0) + 1
        return message

    def reset(self) -> None:
        self._messages = [seed_message()]

    def history(self) -> list[dict[str, str]]:
        """Sender/text pairs for every message after the seed greeting."""
        return [m.to_history_item() for m in self._messages[1:]]

    @property
    def last(self) -> ChatMessage:
        return self._messages[-1]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(list(self._messages))
