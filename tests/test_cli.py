"""Tests for the fenceview CLI."""

import json
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from fenceview import cli as cli_module
from fenceview.cli import cli, get_app
from fenceview.providers.base import BaseProvider, ProviderConfig
from fenceview.session import ChatSession


class EchoProvider(BaseProvider):
    """Streams a fixed artifact reply."""

    def stream_chunks(self, messages, system=None):
        for delta in ["Done:\n", "```tsx{filename=Counter.tsx}\n", "export default 1;", "\n```"]:
            yield (json.dumps({"choices": [{"delta": {"content": delta}}]}) + "\n").encode()


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_module, "_app", None)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({
        "providers": {"together": {"enabled": False}},
        "defaults": {"provider": "together"},
        "history": {"db_path": str(tmp_path / "chats.db")},
    }))
    return str(path)


@pytest.fixture
def runner():
    return CliRunner()


def _seed_chat(config_path):
    store = get_app(config_path).store
    chat = store.create_chat(title="Counter app", model="m")
    store.append_message(chat.id, "make a counter", "user")
    store.append_message(chat.id, "```tsx{filename=Counter.tsx}\nlet n = 0;\n```", "assistant")
    store.append_message(chat.id, "add a button", "user")
    store.append_message(chat.id, "```tsx{filename=Counter.tsx}\nlet n = 1;\n```", "assistant")
    return chat


def test_history_empty(runner, config_path):
    result = runner.invoke(cli, ["--config", config_path, "history"])
    assert result.exit_code == 0
    assert "No chats found." in result.output


def test_history_lists_chats(runner, config_path):
    chat = _seed_chat(config_path)
    result = runner.invoke(cli, ["--config", config_path, "history"])
    assert result.exit_code == 0
    assert chat.id in result.output
    assert "Counter app" in result.output


def test_show_latest_and_specific_version(runner, config_path):
    chat = _seed_chat(config_path)

    result = runner.invoke(cli, ["--config", config_path, "show", chat.id])
    assert result.exit_code == 0
    assert "let n = 1;" in result.output
    assert "Version 2 of 2" in result.output

    result = runner.invoke(cli, ["--config", config_path, "show", chat.id, "--version", "1"])
    assert result.exit_code == 0
    assert "let n = 0;" in result.output
    assert "Version 1 of 2" in result.output


def test_show_missing_version(runner, config_path):
    chat = _seed_chat(config_path)
    result = runner.invoke(cli, ["--config", config_path, "show", chat.id, "-n", "9"])
    assert result.exit_code != 0
    assert "does not exist" in result.output


def test_show_unknown_chat(runner, config_path):
    result = runner.invoke(cli, ["--config", config_path, "show", "missing"])
    assert result.exit_code != 0
    assert "not found" in result.output


def test_versions(runner, config_path):
    chat = _seed_chat(config_path)
    result = runner.invoke(cli, ["--config", config_path, "versions", chat.id])
    assert result.exit_code == 0
    assert "v1" in result.output
    assert "* v2" in result.output
    assert "Counter.tsx" in result.output


def test_new_without_enabled_provider(runner, config_path):
    result = runner.invoke(cli, ["--config", config_path, "new", "build", "a", "counter"])
    assert result.exit_code != 0
    assert "not found or not enabled" in result.output


def test_new_streams_and_saves(runner, config_path):
    app = get_app(config_path)
    app.providers["together"] = EchoProvider(ProviderConfig(api_key="k", model="echo"))

    result = runner.invoke(cli, ["--config", config_path, "new", "build", "a", "counter"])
    assert result.exit_code == 0, result.output
    assert "export default 1;" in result.output
    assert "Version 1 of 1" in result.output

    chats = app.store.list_chats()
    assert len(chats) == 1
    assert chats[0].title == "build a counter"
    assert chats[0].model == "echo"
    messages = app.store.get_messages(chats[0].id)
    assert [m.role for m in messages] == ["user", "assistant"]


def test_fix_sends_error(runner, config_path):
    chat = _seed_chat(config_path)
    app = get_app(config_path)
    app.providers["together"] = EchoProvider(ProviderConfig(api_key="k", model="echo"))

    result = runner.invoke(cli, ["--config", config_path, "fix", chat.id, "ReferenceError:", "n"])
    assert result.exit_code == 0, result.output
    user = [m for m in app.store.get_messages(chat.id) if m.role == "user"][-1]
    assert user.content.endswith("Here's the error:\n\nReferenceError: n")
    assert "Version 3 of 3" in result.output


def test_fix_goes_through_session_request_fix(runner, config_path):
    chat = _seed_chat(config_path)
    app = get_app(config_path)
    app.providers["together"] = EchoProvider(ProviderConfig(api_key="k", model="echo"))

    with patch.object(ChatSession, "request_fix", autospec=True, side_effect=ChatSession.request_fix) as request_fix:
        result = runner.invoke(cli, ["--config", config_path, "fix", chat.id, "boom"])
    assert result.exit_code == 0, result.output
    request_fix.assert_called_once()
    assert request_fix.call_args.args[1] == "boom"


def test_delete(runner, config_path):
    chat = _seed_chat(config_path)
    result = runner.invoke(cli, ["--config", config_path, "delete", chat.id])
    assert result.exit_code == 0
    result = runner.invoke(cli, ["--config", config_path, "delete", chat.id])
    assert result.exit_code != 0


def test_config_command(runner, config_path):
    result = runner.invoke(cli, ["--config", config_path, "config"])
    assert result.exit_code == 0
    assert "Default provider: together" in result.output
