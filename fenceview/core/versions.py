"""Version index over the assistant messages of a chat.

The index is a derived view: it is rebuilt from the chat, the live
artifact and the selected message on every observation and keeps no
state of its own. The only mutable piece is the selection cursor.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from ..models import ASSISTANT, Message
from .extractor import Artifact


@dataclass(frozen=True)
class VersionIndex:
    assistant_messages: tuple[Message, ...]
    current: int
    live: bool = False

    @property
    def total(self) -> int:
        return max(self.current + 1, len(self.assistant_messages))

    @property
    def current_message(self) -> Optional[Message]:
        """The stored message at the current position (None for the live slot)."""
        if self.live or self.current >= len(self.assistant_messages):
            return None
        return self.assistant_messages[self.current]

    @property
    def previous(self) -> Optional[Message]:
        if self.current > 0:
            return self.assistant_messages[self.current - 1]
        return None

    @property
    def next(self) -> Optional[Message]:
        # The live slot blocks forward navigation until it is persisted.
        if not self.live and self.current < len(self.assistant_messages) - 1:
            return self.assistant_messages[self.current + 1]
        return None

    @property
    def can_go_previous(self) -> bool:
        return self.previous is not None

    @property
    def can_go_next(self) -> bool:
        return self.next is not None

    @property
    def label(self) -> str:
        return f"Version {self.current + 1} of {self.total}"


def build_version_index(
    messages: Iterable[Message],
    live_artifact: Optional[Artifact] = None,
    selected: Optional[Message] = None,
) -> VersionIndex:
    """Compute the version position for a chat.

    ``messages`` may be the whole chat; only assistant messages count as
    versions. A live artifact always occupies the slot after the last
    stored message. Otherwise the selected message is current, falling
    back to the most recent one.
    """
    assistant = tuple(m for m in messages if m.role == ASSISTANT)

    if live_artifact is not None:
        return VersionIndex(assistant, current=len(assistant), live=True)

    if selected is not None:
        ids = [m.id for m in assistant]
        if selected.id in ids:
            return VersionIndex(assistant, current=ids.index(selected.id))

    return VersionIndex(assistant, current=max(len(assistant) - 1, 0))


class VersionCursor:
    """Selection cursor for the version viewer.

    ``selected_id`` None means "follow the newest version" (the live
    slot while streaming, the last stored message otherwise). Writes are
    last-write-wins.
    """

    def __init__(self, selected_id: Optional[str] = None):
        self.selected_id = selected_id

    @property
    def following_latest(self) -> bool:
        return self.selected_id is None

    def select(self, message: Optional[Message]) -> None:
        self.selected_id = message.id if message is not None else None

    def follow_latest(self) -> None:
        self.selected_id = None

    def resolve(self, messages: Iterable[Message]) -> Optional[Message]:
        """Return the selected message if it is still part of ``messages``."""
        if self.selected_id is None:
            return None
        for message in messages:
            if message.id == self.selected_id:
                return message
        return None

    def go_to_previous(self, index: VersionIndex) -> Optional[Message]:
        """Move to the previous version. No-op when there is none."""
        target = index.previous
        if target is not None:
            self.select(target)
        return target

    def go_to_next(self, index: VersionIndex) -> Optional[Message]:
        """Move to the next version. No-op when there is none."""
        target = index.next
        if target is not None:
            self.select(target)
        return target
