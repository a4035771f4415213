"""``turnbridge config`` — validate the Gemini configuration."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from turnbridge.backends.gemini.backend import GeminiBackend
from turnbridge.backends.gemini.config import GeminiConfig, default_config_path, load_config
from turnbridge.cli_commands._output import console, fail
from turnbridge.core.errors import BackendError
from turnbridge.core.models import ConversationState, TextDelta, UserMessage

_PING_PROMPT = "Hello, can you respond with a simple 'Hello world!' message?"


@click.group()
def config() -> None:
    """Inspect backend configuration."""


@config.command("check")
@click.option(
    "--path",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (defaults to $TURNBRIDGE_GEMINI_CONFIG or ~/.turnbridge).",
)
@click.option("--ping", is_flag=True, help="Send a short test request to the backend.")
def check(config_path: Path | None, ping: bool) -> None:
    """Load and validate the Gemini configuration."""
    path = config_path or default_config_path()
    try:
        settings = load_config(path)
    except BackendError as exc:
        fail(str(exc))

    console.print("[green]Gemini configuration loaded successfully![/green]")
    console.print(f"  Model: {settings.model}", markup=False)
    console.print(f"  Temperature: {settings.temperature}")
    console.print("  API key: [REDACTED]", markup=False)

    if not ping:
        return

    try:
        reply = asyncio.run(_ping(settings))
    except BackendError as exc:
        fail(f"Connection test failed: {exc}")

    console.print("[green]Connection test successful![/green]")
    console.print(f"  Response: {reply or '(non-text response)'}", markup=False)


async def _ping(settings: GeminiConfig) -> str:
    state = ConversationState(user_input=UserMessage(content=_PING_PROMPT))
    async with GeminiBackend(settings) as backend:
        stream = await backend.send_message(state)
    return "".join(event.content for event in stream if isinstance(event, TextDelta))
