"""Stream ingestion: accumulate streamed text and emit code transitions.

Transport chunks are line-delimited JSON records shaped like OpenAI
chat-completion deltas::

    {"choices": [{"delta": {"content": "..."}, "text": "..."}]}

``delta.content`` wins over ``text``. SSE framing (``data:`` prefixes and
the ``[DONE]`` marker) is accepted as well. A malformed line is logged and
skipped; it never aborts the stream or drops text already received.
"""

import codecs
import json
import logging
from enum import Enum
from typing import Callable, Optional, Union

from .segments import Code, Segment, code_segment, scan

_log = logging.getLogger(__name__)

_DATA_PREFIX = "data:"
_DONE_MARKER = "[DONE]"


class StreamEvent(Enum):
    ENTERED_CODE = "entered_code"
    CODE_FINALIZED = "code_finalized"


EventListener = Callable[[StreamEvent, str], None]


def parse_record(line: str) -> str:
    """Return the text delta carried by one record line.

    Raises ValueError when the line is not a record of the expected shape.
    """
    payload = line.strip()
    if payload.startswith(_DATA_PREFIX):
        payload = payload[len(_DATA_PREFIX):].strip()
    if not payload or payload == _DONE_MARKER:
        return ""

    try:
        record = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ValueError(f"not JSON: {e}") from e
    if not isinstance(record, dict):
        raise ValueError("record is not an object")

    choices = record.get("choices") or []
    if not isinstance(choices, list):
        raise ValueError("choices is not a list")
    if not choices:
        # Usage-only records carry no text.
        return ""

    choice = choices[0]
    if not isinstance(choice, dict):
        raise ValueError("choice is not an object")
    delta = choice.get("delta") or {}
    if not isinstance(delta, dict):
        raise ValueError("delta is not an object")

    text = delta.get("content") or choice.get("text") or ""
    if not isinstance(text, str):
        raise ValueError("content is not a string")
    return text


class StreamIngestor:
    """Cumulative buffer for one streamed assistant message.

    Usage:
        ingestor = StreamIngestor()
        ingestor.subscribe(on_event)
        for chunk in provider.stream_chunks(messages):
            ingestor.feed_raw(chunk)
        text = ingestor.finish()

    Each transition event fires at most once per ingestor.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self._listeners: list[EventListener] = []
        self.text = ""
        self.entered_code = False
        self.code_finalized = False
        self.skipped_lines = 0
        self.finished = False

    @property
    def segments(self) -> list[Segment]:
        return scan(self.text)

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def feed(self, delta: str) -> list[StreamEvent]:
        """Append decoded text and return the transitions it caused."""
        if not delta:
            return []
        self.text += delta

        events: list[StreamEvent] = []
        segment = code_segment(scan(self.text))
        if segment is not None and not self.entered_code:
            self.entered_code = True
            events.append(StreamEvent.ENTERED_CODE)
        if isinstance(segment, Code) and not self.code_finalized:
            self.code_finalized = True
            events.append(StreamEvent.CODE_FINALIZED)

        for event in events:
            _log.debug("stream event %s at %d chars", event.value, len(self.text))
            for listener in self._listeners:
                listener(event, self.text)
        return events

    def feed_raw(self, chunk: Union[bytes, str]) -> list[StreamEvent]:
        """Decode a transport chunk and feed every complete record in it."""
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._pending += chunk

        *lines, tail = self._pending.split("\n")
        events: list[StreamEvent] = []
        for line in lines:
            events.extend(self._feed_line(line))

        # A record need not be followed by a newline within its chunk; the
        # tail is held back only while it does not parse yet.
        try:
            delta = parse_record(tail)
        except ValueError:
            self._pending = tail
        else:
            self._pending = ""
            events.extend(self.feed(delta))
        return events

    def finish(self) -> str:
        """Flush any buffered bytes and the trailing partial line."""
        if not self.finished:
            tail = self._decoder.decode(b"", final=True)
            self._pending += tail
            if self._pending:
                self._feed_line(self._pending)
                self._pending = ""
            self.finished = True
        return self.text

    def _feed_line(self, line: str) -> list[StreamEvent]:
        if not line.strip():
            return []
        try:
            delta = parse_record(line)
        except ValueError as e:
            self.skipped_lines += 1
            _log.warning("Skipping malformed stream line (%s): %.80r", e, line)
            return []
        return self.feed(delta)


def ingest(
    chunks,
    ingestor: Optional[StreamIngestor] = None,
    on_chunk: Optional[Callable[[StreamIngestor], None]] = None,
) -> str:
    """Drive ``chunks`` through an ingestor and return the final text."""
    ingestor = ingestor or StreamIngestor()
    for chunk in chunks:
        ingestor.feed_raw(chunk)
        if on_chunk is not None:
            on_chunk(ingestor)
    return ingestor.finish()
