"""Chat and message records."""

from dataclasses import dataclass, field

USER = "user"
ASSISTANT = "assistant"
ROLES = (USER, ASSISTANT)


@dataclass(frozen=True)
class Message:
    """A single persisted chat message. Never mutated after creation."""

    id: str
    chat_id: str
    role: str
    content: str
    created_at: str


@dataclass(frozen=True)
class Chat:
    """A conversation: metadata plus its messages in creation order."""

    id: str
    title: str = ""
    model: str = ""
    created_at: str = ""
    updated_at: str = ""
    messages: tuple[Message, ...] = field(default_factory=tuple)

    @property
    def assistant_messages(self) -> tuple[Message, ...]:
        return tuple(m for m in self.messages if m.role == ASSISTANT)
