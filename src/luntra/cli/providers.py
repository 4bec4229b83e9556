"""Provider factory functions for CLI.

Centralizes creation of stores and message sources from settings.
Hides configuration details from command implementations.
"""

from rich.console import Console

from ..config import DEFAULT_MODEL, Settings
from ..sources import MessageSource, create_message_source
from ..storage import KeyValueStore, create_key_value_store

# Default console for output
_console = Console()


def get_store(settings: Settings) -> KeyValueStore:
    """Create the key-value store selected by the settings.

    Returns:
        SQLite store at ``settings.database_path``, or an in-memory store
        when LUNTRA_STORE=memory
    """
    if settings.store_backend == "sqlite":
        return create_key_value_store("sqlite", path=settings.database_path)
    return create_key_value_store("memory")


def require_source(
    settings: Settings,
    console: Console | None = None,
    model: str | None = None,
) -> MessageSource:
    """Create the Gemini message source, exiting if it is not configured.

    Args:
        settings: Resolved settings
        console: Console for the error message
        model: Model to use; falls back to GEMINI_MODEL, then the default

    Raises:
        SystemExit: If GEMINI_API_KEY is not set
    """
    import typer

    con = console or _console
    if not settings.gemini_api_key:
        con.print("[red]Error: GEMINI_API_KEY not set in environment[/red]")
        raise typer.Exit(code=1)

    return create_message_source(
        "gemini",
        api_key=settings.gemini_api_key,
        model=model or settings.gemini_model or DEFAULT_MODEL,
    )
