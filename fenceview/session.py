"""Conversation controller.

A ChatSession owns the explicit per-chat state: the in-flight stream (if
any), the version cursor and the listeners that want to hear about
changes. Everything shown to the user is derived from that state by
observe(), which rebuilds the version index from scratch every time.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

import httpx

from .core.extractor import Artifact, live_artifact, message_artifact
from .core.ingest import StreamEvent, StreamIngestor
from .core.layout import TWO_UP_LANGUAGES, LayoutMode, classify
from .core.segments import CodeOpenIncomplete, Segment, code_segment, scan
from .core.versions import VersionCursor, VersionIndex, build_version_index
from .history import HistoryDB
from .models import ASSISTANT, USER, Chat, Message
from .prompts import build_fix_request, build_system_prompt
from .providers.base import BaseProvider

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Observation:
    """Everything a renderer needs to draw the viewer once."""

    segments: list[Segment]
    artifact: Optional[Artifact]
    layout: LayoutMode
    version: VersionIndex
    generating: bool = False
    stream_error: Optional[str] = None

    @property
    def can_go_previous(self) -> bool:
        return self.version.can_go_previous

    @property
    def can_go_next(self) -> bool:
        return self.version.can_go_next

    @property
    def is_live(self) -> bool:
        return self.version.live


UpdateListener = Callable[[Observation], None]
EventListener = Callable[[StreamEvent, str], None]


class ChatSession:
    """Streams assistant turns into a chat and tracks the displayed version."""

    def __init__(
        self,
        store: HistoryDB,
        chat_id: str,
        provider: Optional[BaseProvider] = None,
        system_prompt: Optional[str] = None,
        two_up_languages: Iterable[str] = TWO_UP_LANGUAGES,
    ):
        if store.get_chat(chat_id) is None:
            raise KeyError(chat_id)
        self.store = store
        self.chat_id = chat_id
        self.provider = provider
        self.system_prompt = build_system_prompt(system_prompt)
        self.two_up_languages = frozenset(two_up_languages)
        self.cursor = VersionCursor()
        self.stream_error: Optional[str] = None
        self._ingestor: Optional[StreamIngestor] = None
        self._update_listeners: list[UpdateListener] = []
        self._event_listeners: list[EventListener] = []
        self._lock = threading.RLock()

    # -- state --

    @property
    def chat(self) -> Chat:
        chat = self.store.get_chat(self.chat_id)
        if chat is None:
            raise KeyError(self.chat_id)
        return chat

    @property
    def is_streaming(self) -> bool:
        with self._lock:
            return self._ingestor is not None and not self._ingestor.finished

    @property
    def stream_text(self) -> str:
        with self._lock:
            return self._ingestor.text if self._ingestor is not None else ""

    def on_update(self, listener: UpdateListener) -> None:
        self._update_listeners.append(listener)

    def on_event(self, listener: EventListener) -> None:
        self._event_listeners.append(listener)

    def _live_artifact(self) -> Optional[Artifact]:
        # Navigating away from the live slot detaches the viewer from the
        # stream until the stream is persisted.
        if self._ingestor is None or not self.cursor.following_latest:
            return None
        return live_artifact(self._ingestor.text)

    def version_index(self) -> VersionIndex:
        with self._lock:
            chat = self.chat
            selected = self.cursor.resolve(chat.assistant_messages)
            return build_version_index(chat.messages, self._live_artifact(), selected)

    def observe(self) -> Observation:
        """Build the current view of the chat."""
        with self._lock:
            chat = self.chat
            live = self._live_artifact()
            selected = self.cursor.resolve(chat.assistant_messages)
            index = build_version_index(chat.messages, live, selected)

            if live is not None:
                segments = scan(self._ingestor.text)
                artifact = live
                generating = isinstance(code_segment(segments), CodeOpenIncomplete)
            elif self.stream_error is not None and self._ingestor is not None \
                    and self.cursor.following_latest:
                # A failed reply that never opened a fence still shows its text.
                segments = scan(self._ingestor.text)
                artifact = None
                generating = False
            else:
                message = index.current_message
                if message is not None:
                    segments = scan(message.content)
                    artifact = message_artifact(message.content)
                else:
                    segments = scan(self.stream_text)
                    artifact = None
                generating = False

            language = artifact.language if artifact is not None else None
            return Observation(
                segments=segments,
                artifact=artifact,
                layout=classify(language, self.two_up_languages),
                version=index,
                generating=generating,
                stream_error=self.stream_error,
            )

    def _notify(self) -> None:
        if not self._update_listeners:
            return
        observation = self.observe()
        for listener in self._update_listeners:
            listener(observation)

    # -- navigation --

    def go_to_previous(self) -> Optional[Message]:
        with self._lock:
            target = self.cursor.go_to_previous(self.version_index())
        if target is not None:
            self._notify()
        return target

    def go_to_next(self) -> Optional[Message]:
        with self._lock:
            target = self.cursor.go_to_next(self.version_index())
        if target is not None:
            self._notify()
        return target

    def select(self, message_id: Optional[str]) -> Optional[Message]:
        """Select an assistant message by id; None follows the newest version."""
        with self._lock:
            if message_id is None:
                self.cursor.follow_latest()
                target = None
            else:
                target = next(
                    (m for m in self.chat.assistant_messages if m.id == message_id),
                    None,
                )
                if target is None:
                    raise KeyError(message_id)
                self.cursor.select(target)
        self._notify()
        return target

    def select_version(self, number: int) -> Message:
        """Select a stored version by its 1-based number."""
        messages = self.chat.assistant_messages
        if not 1 <= number <= len(messages):
            raise IndexError(f"Version {number} does not exist (1-{len(messages)})")
        target = messages[number - 1]
        self.select(target.id)
        return target

    # -- streaming --

    def send(self, prompt: str) -> Optional[Message]:
        """Append a user message and stream the assistant's reply."""
        self.store.append_message(self.chat_id, prompt, USER)
        return self.complete()

    def request_fix(self, error: str) -> Optional[Message]:
        """Ask the assistant to fix the current artifact given an error."""
        return self.send(build_fix_request(error))

    def complete(self) -> Optional[Message]:
        """Stream an assistant reply for the chat as it stands."""
        if self.provider is None:
            raise RuntimeError("ChatSession has no provider to stream from")
        chunks = self.provider.stream_chunks(self.chat.messages, self.system_prompt)
        return self.run_stream(chunks)

    def run_stream(self, chunks: Iterable[Union[bytes, str]]) -> Optional[Message]:
        """Ingest a chunk stream and persist the result as an assistant message.

        Returns the persisted message, or None if the transport failed; in
        that case the partial text stays visible as an unfinished live
        artifact and ``stream_error`` is set.
        """
        ingestor = StreamIngestor()
        for listener in self._event_listeners:
            ingestor.subscribe(listener)

        with self._lock:
            self._ingestor = ingestor
            self.stream_error = None
            self.cursor.follow_latest()

        try:
            for chunk in chunks:
                with self._lock:
                    ingestor.feed_raw(chunk)
                self._notify()
        except (httpx.HTTPError, OSError) as e:
            _log.error("Stream for chat %s failed after %d chars: %s",
                       self.chat_id, len(ingestor.text), e)
            with self._lock:
                ingestor.finish()
                self.stream_error = str(e) or e.__class__.__name__
            self._notify()
            return None
        except Exception as e:
            _log.exception("Stream for chat %s aborted", self.chat_id)
            with self._lock:
                ingestor.finish()
                self.stream_error = str(e) or e.__class__.__name__
            raise

        with self._lock:
            text = ingestor.finish()
            if ingestor.skipped_lines:
                _log.info("Skipped %d malformed lines in chat %s",
                          ingestor.skipped_lines, self.chat_id)
            # Persisting and clearing the live slot happen under one lock so
            # observers never see neither artifact.
            message = self.store.append_message(self.chat_id, text, ASSISTANT)
            self._ingestor = None
            self.cursor.select(message)
        self._notify()
        return message
