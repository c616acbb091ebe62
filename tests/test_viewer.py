"""Tests for fenceview.ui rendering."""

import re
from io import StringIO

from rich.console import Console

from fenceview.core.extractor import Artifact, FileName
from fenceview.core.ingest import StreamEvent
from fenceview.core.layout import LayoutMode
from fenceview.core.segments import Code, CodeOpenIncomplete, Prose
from fenceview.core.versions import build_version_index
from fenceview.models import Message
from fenceview.session import Observation
from fenceview.ui.code_block import render_code_container
from fenceview.ui.viewer import (
    render_error,
    render_observation,
    render_stream_event,
    render_version_list,
)


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def _capture_console() -> Console:
    return Console(file=StringIO(), width=80, force_terminal=True)


def _output(con: Console) -> str:
    return _strip_ansi(con.file.getvalue())


def _msg(msg_id: str, content: str) -> Message:
    return Message(id=msg_id, chat_id="c", role="assistant", content=content,
                   created_at="2026-03-01T12:00:00+00:00")


ARTIFACT = Artifact(code="def foo():\n    return 42", language="python",
                    filename=FileName("main", "py"))


def test_code_container_header_and_lines():
    con = _capture_console()
    render_code_container(ARTIFACT, con)
    output = _output(con)
    assert "main.py . python" in output
    assert "def foo" in output
    assert "return 42" in output
    assert "╭" in output
    assert "╰" in output


def test_code_container_without_language():
    con = _capture_console()
    render_code_container(Artifact(code="hello"), con, status="generating")
    output = _output(con)
    assert "text . generating" in output
    assert "hello" in output


def test_render_historical_observation():
    messages = [_msg("a1", "v1"), _msg("a2", "v2")]
    observation = Observation(
        segments=[Prose("Here is the app."), Code(ARTIFACT.code, None)],
        artifact=ARTIFACT,
        layout=LayoutMode.TWO_UP,
        version=build_version_index(messages, selected=messages[0]),
    )
    con = _capture_console()
    render_observation(observation, con)
    output = _output(con)
    assert "Here is the app." in output
    assert "def foo" in output
    assert "Version 1 of 2" in output
    assert "code | output" in output
    assert "live" not in output


def test_render_live_observation():
    messages = [_msg("a1", "v1")]
    observation = Observation(
        segments=[Prose("Working on it"), CodeOpenIncomplete("tsx")],
        artifact=Artifact(code="const x", language="tsx"),
        layout=LayoutMode.TABBED,
        version=build_version_index(messages, live_artifact=Artifact(code="const x")),
        generating=True,
    )
    con = _capture_console()
    render_observation(observation, con)
    output = _output(con)
    assert "generating" in output
    assert "Version 2 of 2" in output
    assert "live" in output
    assert "code / preview tabs" in output


def test_render_stream_error():
    observation = Observation(
        segments=[Prose("partial")],
        artifact=None,
        layout=LayoutMode.TABBED,
        version=build_version_index([]),
        stream_error="connection reset",
    )
    con = _capture_console()
    render_observation(observation, con)
    assert "stream interrupted: connection reset" in _output(con)


def test_render_stream_events():
    con = _capture_console()
    render_stream_event(StreamEvent.ENTERED_CODE, con)
    render_stream_event(StreamEvent.CODE_FINALIZED, con)
    output = _output(con)
    assert "writing code" in output
    assert "code complete" in output


def test_render_error():
    con = _capture_console()
    render_error("boom", con)
    assert "err | boom" in _output(con)


def test_render_version_list():
    messages = [
        _msg("a1", "```python{filename=app.py}\nprint(1)\n```"),
        _msg("a2", "no code this time"),
    ]
    con = _capture_console()
    render_version_list(messages, con, current=0)
    output = _output(con)
    assert "* v1" in output
    assert "app.py" in output
    assert "two-up" in output
    assert "(no code)" in output


def test_render_code_segment_without_artifact():
    observation = Observation(
        segments=[Prose("Here:\n"), Code("const body = 1;", "tsx"), Prose("\nbye")],
        artifact=None,
        layout=LayoutMode.TABBED,
        version=build_version_index([]),
    )
    con = _capture_console()
    render_observation(observation, con)
    output = _output(con)
    assert "const body = 1;" in output
    assert "bye" in output


def test_render_version_list_closing_fence_on_code_line():
    con = _capture_console()
    render_version_list([_msg("a1", "```python{filename=app.py}\nprint(1)```")], con)
    output = _output(con)
    assert "app.py" in output
    assert "(no code)" not in output
