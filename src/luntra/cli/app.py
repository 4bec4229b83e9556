"""Main CLI application using Typer."""
import asyncio
import json
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.text import Text

from ..chat import (
    ChatSession,
    ExportFormat,
    Message,
    Role,
    StreamingSession,
    default_filename,
    export_conversation,
)
from ..chat.streaming import TurnHandle
from ..config import (
    ASSISTANT_NAME,
    DEFAULT_REPLAY_CHUNK_SIZE,
    LIVE_REFRESH_PER_SECOND,
    TRANSCRIPT_TIMESTAMP_FORMAT,
    USER_LABEL,
    load_settings,
)
from ..log import configure_logging
from ..markdown import RenderDriver, RenderUpdate, render, to_plain_data, to_rich
from ..sources import ScriptedMessageSource
from ..storage import ChatRepository
from .providers import get_store, require_source

# Create Typer app
app = typer.Typer(
    name="luntra",
    help="Chat client with a streaming markdown renderer",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


class Theme(str, Enum):
    """Color themes accepted by `luntra preferences`."""

    DARK = "dark"
    LIGHT = "light"


@app.callback()
def main(
    log_level: str = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level (debug, info, warning, error); defaults to LUNTRA_LOG_LEVEL"
    )
):
    """Luntra command line interface."""
    configure_logging(log_level or load_settings().log_level)


@app.command("render")
def render_file(
    path: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="Markdown file to render"
    ),
    stream: bool = typer.Option(
        False,
        "--stream",
        "-s",
        help="Replay the file chunk by chunk, re-rendering after each chunk"
    ),
    chunk_size: int = typer.Option(
        DEFAULT_REPLAY_CHUNK_SIZE,
        "--chunk-size",
        "-c",
        min=1,
        help="Characters per chunk when streaming"
    ),
    delay: float = typer.Option(
        0.03,
        "--delay",
        "-d",
        min=0.0,
        help="Seconds between chunks when streaming"
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the rendered blocks as JSON instead of styled output"
    )
):
    """Render a markdown file, optionally simulating a streamed reply."""
    text = path.read_text(encoding="utf-8")

    if as_json:
        print(json.dumps(to_plain_data(render(text, final=True)), indent=2, ensure_ascii=False))
        return

    if not stream:
        console.print(to_rich(render(text, final=True)))
        return

    async def _replay():
        source = ScriptedMessageSource.from_text(text, chunk_size, delay=delay)
        driver = RenderDriver()

        with Live(console=console, refresh_per_second=LIVE_REFRESH_PER_SECOND) as live:
            def on_update(handle: TurnHandle) -> None:
                update = driver.update(handle.buffer)
                if not update.is_noop:
                    live.update(to_rich(update.blocks))

            def on_complete(handle: TurnHandle) -> None:
                live.update(to_rich(driver.update(handle.buffer, final=True).blocks))

            streaming = StreamingSession(on_update=on_update, on_complete=on_complete)
            handle = streaming.start_turn()
            await streaming.consume(handle, source.stream(str(path)))

        console.print(f"[dim]{handle.chunk_count} chunks, {driver.render_count} renders[/dim]")

    asyncio.run(_replay())


@app.command()
def chat(
    conversation: str = typer.Option(
        None,
        "--conversation",
        "-c",
        help="Resume a stored conversation by id"
    )
):
    """Chat interactively. Type /new for a new chat, /exit to quit."""
    settings = load_settings()

    async def _chat():
        store = get_store(settings)
        source = None
        try:
            await store.connect()
            repository = ChatRepository(store)
            preferences = await repository.load_preferences()
            source = require_source(settings, console, model=settings.gemini_model or preferences.model)
            live_holder: dict[str, Live] = {}

            def on_render(message: Message, update: RenderUpdate) -> None:
                live = live_holder.get("live")
                if live is not None:
                    live.update(to_rich(update.blocks))

            session = ChatSession(source, repository, on_render=on_render)
            if conversation:
                messages = await session.load_conversation(conversation)
                for message in messages:
                    _print_message(message)

            while True:
                try:
                    text = await asyncio.to_thread(console.input, f"[bold cyan]{USER_LABEL}:[/] ")
                except (EOFError, KeyboardInterrupt):
                    break

                command = text.strip().lower()
                if not command:
                    continue
                if command in ("/exit", "/quit"):
                    break
                if command == "/new":
                    session.new_chat()
                    console.print("[dim]New conversation started.[/dim]")
                    continue

                console.print(f"[bold green]{ASSISTANT_NAME}:[/]")
                with Live(console=console, refresh_per_second=LIVE_REFRESH_PER_SECOND) as live:
                    live_holder["live"] = live
                    await session.send_message(text)
                live_holder.pop("live", None)

                if session.state.error:
                    console.print(f"[red]Error: {session.state.error}[/red]")

            console.print(f"[dim]Conversation saved as {session.conversation_id}[/dim]")
        finally:
            if source is not None:
                await source.close()
            await store.disconnect()

    asyncio.run(_chat())


def _print_message(message: Message) -> None:
    if message.role == Role.USER:
        console.print(Text.assemble((f"{USER_LABEL}: ", "bold cyan"), message.content))
    else:
        console.print(f"[bold green]{ASSISTANT_NAME}:[/]")
        console.print(to_rich(render(message.content, final=True)))


@app.command()
def conversations():
    """List stored conversations."""
    settings = load_settings()

    async def _list():
        store = get_store(settings)
        try:
            await store.connect()
            items = await ChatRepository(store).load_conversations()
        finally:
            await store.disconnect()

        if not items:
            console.print("[dim]No conversations stored.[/dim]")
            return

        table = Table(title="Conversations", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim")
        table.add_column("Title", style="cyan")
        table.add_column("Messages", justify="right")
        table.add_column("Updated")
        for item in items:
            table.add_row(
                item.id,
                item.title,
                str(item.message_count),
                item.timestamp.strftime(TRANSCRIPT_TIMESTAMP_FORMAT),
            )
        console.print(table)

    asyncio.run(_list())


@app.command()
def preferences(
    theme: Theme = typer.Option(
        None,
        "--theme",
        "-t",
        help="Color theme"
    ),
    model: str = typer.Option(
        None,
        "--model",
        "-m",
        help="Gemini model used by chat when GEMINI_MODEL is unset"
    ),
    sidebar: bool = typer.Option(
        None,
        "--sidebar/--no-sidebar",
        help="Whether the conversation sidebar starts open"
    )
):
    """Show saved preferences, or update the ones given as options."""
    settings = load_settings()
    changes: dict[str, object] = {}
    if theme is not None:
        changes["theme"] = theme.value
    if model and model.strip():
        changes["model"] = model.strip()
    if sidebar is not None:
        changes["sidebar_open"] = sidebar

    async def _preferences():
        store = get_store(settings)
        try:
            await store.connect()
            repository = ChatRepository(store)
            current = await repository.load_preferences()
            if changes:
                current = current.model_copy(update=changes)
                await repository.save_preferences(current)
        finally:
            await store.disconnect()

        table = Table(title="Preferences", show_header=True, header_style="bold magenta")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        table.add_row("theme", current.theme)
        table.add_row("model", current.model)
        table.add_row("sidebar", "open" if current.sidebar_open else "closed")
        console.print(table)
        if changes:
            console.print("[green]Preferences saved.[/green]")
        if settings.gemini_model and settings.gemini_model != current.model:
            console.print(f"[dim]GEMINI_MODEL={settings.gemini_model} overrides the saved model.[/dim]")

    asyncio.run(_preferences())


@app.command()
def export(
    conversation_id: str = typer.Argument(..., help="Conversation to export"),
    fmt: ExportFormat = typer.Option(
        ExportFormat.MARKDOWN,
        "--format",
        "-f",
        help="Export format"
    ),
    output: Path = typer.Option(
        None,
        "--output",
        "-o",
        help="File to write; use '-' for stdout (default: <title>.<format>)"
    )
):
    """Export a stored conversation as text, JSON or markdown."""
    settings = load_settings()

    async def _export():
        store = get_store(settings)
        try:
            await store.connect()
            repository = ChatRepository(store)
            messages = await repository.load_history(conversation_id)
            summaries = await repository.load_conversations()
        finally:
            await store.disconnect()

        if not messages:
            console.print(f"[red]Error: No messages stored for conversation {conversation_id}[/red]")
            raise typer.Exit(code=1)

        title = next((c.title for c in summaries if c.id == conversation_id), None)
        document = export_conversation(messages, fmt, title=title)

        if output is not None and str(output) == "-":
            print(document, end="")
            return

        target = output or Path(default_filename(title, fmt))
        target.write_text(document, encoding="utf-8")
        console.print(f"[green]Exported {len(messages)} messages to {target}[/green]")

    asyncio.run(_export())


if __name__ == "__main__":
    app()
