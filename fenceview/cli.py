"""fenceview CLI - chat with a code-writing assistant and browse its artifacts."""

import logging
import sys
from typing import Optional

import click

from .config import ConfigManager
from .history import HistoryDB
from .providers.base import BaseProvider
from .providers.registry import discover_providers, get_registry
from .session import ChatSession
from .ui import console, render_error, render_observation, render_stream_event, render_version_list
from .ui.theme import PALETTE

_log = logging.getLogger(__name__)

_TITLE_LENGTH = 60


class FenceviewApp:
    """Wires configuration, the chat store and providers together."""

    def __init__(self, config_path: Optional[str] = None):
        self.config = ConfigManager(config_path)
        self.store = HistoryDB(self.config.get_history_path())
        self.providers: dict[str, BaseProvider] = {}
        self._init_providers()

    def _init_providers(self) -> None:
        """Initialize enabled providers from the registry."""
        discover_providers()
        for provider_name, provider_class in get_registry().items():
            config = self.config.get_provider_config(provider_name)
            if config:
                try:
                    self.providers[provider_name] = provider_class(config)
                except Exception as e:
                    _log.warning("Failed to initialize %s: %s", provider_name, e)

    def get_provider(self, name: Optional[str] = None) -> BaseProvider:
        """Get a provider by name or default."""
        provider_name = name or self.config.get_default_provider()

        if provider_name not in self.providers:
            raise click.ClickException(
                f"Provider '{provider_name}' not found or not enabled. "
                f"Available: {list(self.providers.keys())}"
            )

        return self.providers[provider_name]

    def open_session(
        self,
        chat_id: str,
        provider: Optional[str] = None,
        streaming: bool = True,
    ) -> ChatSession:
        """Open a session on an existing chat (read-only when not streaming)."""
        prov = self.get_provider(provider) if streaming else None
        try:
            return ChatSession(
                self.store,
                chat_id,
                provider=prov,
                system_prompt=self.config.get_system_prompt() or None,
                two_up_languages=self.config.get_two_up_languages(),
            )
        except KeyError:
            raise click.ClickException(f"Chat '{chat_id}' not found")

    def stream_turn(self, session: ChatSession, prompt: str, fix: bool = False) -> None:
        """Send a prompt (or an error to fix), report stream transitions, then draw the result."""
        session.on_event(lambda event, _text: render_stream_event(event, console))
        with console.status("streaming...", spinner="dots"):
            if fix:
                message = session.request_fix(prompt)
            else:
                message = session.send(prompt)
        render_observation(session.observe(), console)
        if message is None:
            raise click.ClickException("The response stream failed; the partial reply was not saved.")


# Global app instance
_app = None


def get_app(config_path: Optional[str] = None) -> FenceviewApp:
    """Get or create the app instance."""
    global _app
    if _app is None or (config_path and str(_app.config.config_path) != config_path):
        _app = FenceviewApp(config_path)
    return _app


def _run(fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except click.ClickException:
        raise
    except Exception as e:
        _log.debug("Command failed", exc_info=True)
        render_error(str(e), console)
        sys.exit(1)


# CLI Commands
@click.group()
@click.option("--config", "config_path", default=None, help="Path to config.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """FENCEVIEW - stream code artifacts and browse their versions."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"config_path": config_path}


def _app_from(ctx) -> FenceviewApp:
    return get_app(ctx.obj.get("config_path") if ctx.obj else None)


@cli.command()
@click.argument("prompt", nargs=-1, required=True)
@click.option("--provider", "-p", help="Provider to use (together, openai)")
@click.pass_context
def new(ctx, prompt, provider):
    """Start a new chat with PROMPT."""
    app = _app_from(ctx)
    prompt_text = " ".join(prompt)

    def _new():
        prov = app.get_provider(provider)
        chat = app.store.create_chat(title=prompt_text[:_TITLE_LENGTH], model=prov.config.model)
        console.print(f"chat {chat.id}", style=f"dim {PALETTE.accent}")
        session = app.open_session(chat.id, provider)
        app.stream_turn(session, prompt_text)

    _run(_new)


@cli.command()
@click.argument("chat_id")
@click.argument("prompt", nargs=-1, required=True)
@click.option("--provider", "-p", help="Provider to use")
@click.pass_context
def reply(ctx, chat_id, prompt, provider):
    """Continue chat CHAT_ID with PROMPT."""
    app = _app_from(ctx)
    _run(lambda: app.stream_turn(app.open_session(chat_id, provider), " ".join(prompt)))


@cli.command()
@click.argument("chat_id")
@click.argument("error", nargs=-1, required=True)
@click.option("--provider", "-p", help="Provider to use")
@click.pass_context
def fix(ctx, chat_id, error, provider):
    """Ask the assistant to fix the latest artifact given ERROR."""
    app = _app_from(ctx)

    def _fix():
        session = app.open_session(chat_id, provider)
        app.stream_turn(session, " ".join(error), fix=True)

    _run(_fix)


@cli.command()
@click.argument("chat_id")
@click.option("--version", "-n", "version", type=int, default=None,
              help="1-based version to show (default: latest)")
@click.pass_context
def show(ctx, chat_id, version):
    """Show an artifact version of CHAT_ID."""
    app = _app_from(ctx)
    session = app.open_session(chat_id, streaming=False)
    if version is not None:
        try:
            session.select_version(version)
        except IndexError as e:
            raise click.ClickException(str(e))
    render_observation(session.observe(), console)


@cli.command()
@click.argument("chat_id")
@click.pass_context
def versions(ctx, chat_id):
    """List the artifact versions of CHAT_ID."""
    app = _app_from(ctx)
    session = app.open_session(chat_id, streaming=False)
    index = session.version_index()
    if not index.assistant_messages:
        console.print("No versions yet.", style="dim")
        return
    render_version_list(
        index.assistant_messages,
        console,
        current=index.current,
        two_up_languages=session.two_up_languages,
    )


@cli.command()
@click.option("--limit", "-n", default=20, help="Number of chats to show")
@click.option("--search", "-s", default="", help="Search chats by keyword")
@click.pass_context
def history(ctx, limit, search):
    """Show recent chats."""
    app = _app_from(ctx)
    chats = app.store.search_chats(search, limit=limit) if search else app.store.list_chats(limit=limit)

    if not chats:
        console.print("No chats found.", style="dim")
        return

    console.print(f"\nChats ({len(chats)}):\n", style=f"bold {PALETTE.accent}")
    for chat in chats:
        title = chat.title or "(untitled)"
        console.print(
            f"  {chat.id}  {title}  [{chat.model}]  {chat.created_at[:16]}",
            style="dim",
        )
    console.print()


@cli.command()
@click.argument("chat_id")
@click.pass_context
def delete(ctx, chat_id):
    """Delete CHAT_ID and its messages."""
    app = _app_from(ctx)
    if not app.store.delete_chat(chat_id):
        raise click.ClickException(f"Chat '{chat_id}' not found")
    console.print(f"Deleted {chat_id}", style="dim")


@cli.command()
@click.pass_context
def config(ctx):
    """Show configuration."""
    app = _app_from(ctx)
    console.print(f"Config file: {app.config.config_path}")
    console.print(f"Enabled providers: {app.config.get_enabled_providers()}")
    console.print(f"Default provider: {app.config.get_default_provider()}")
    console.print(f"Two-up languages: {sorted(app.config.get_two_up_languages())}")


if __name__ == "__main__":
    cli()
