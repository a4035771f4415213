"""``turnbridge translate`` — offline request/response translation."""

from __future__ import annotations

from pathlib import Path

import click
from pydantic import ValidationError

from turnbridge.backends.gemini.config import load_config
from turnbridge.backends.gemini.models import GenerationConfig
from turnbridge.backends.gemini.request import RequestTranslator
from turnbridge.backends.gemini.response import ResponseTranslator
from turnbridge.cli_commands._output import fail, load_data, print_events_table, print_json
from turnbridge.core.errors import BackendError, TranslationError
from turnbridge.core.models import ConversationState
from turnbridge.core.registry import ToolCallRegistry


@click.group()
def translate() -> None:
    """Translate conversations and replies without calling a backend."""


@translate.command("request")
@click.argument("state_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Gemini configuration supplying generationConfig.",
)
@click.option("--no-clean", is_flag=True, help="Send tool schemas unmodified.")
@click.option("--lenient", is_flag=True, help="Pair out-of-order tool results by position.")
def request_cmd(state_file: Path, config_path: Path | None, no_clean: bool, lenient: bool) -> None:
    """Print the Gemini request for a conversation state.

    STATE_FILE is a JSON or YAML conversation state.
    """
    state = _load_state(state_file)

    generation_config: GenerationConfig | None = None
    if config_path is not None:
        try:
            config = load_config(config_path)
        except BackendError as exc:
            fail(str(exc))
        generation_config = GenerationConfig(
            temperature=config.temperature,
            max_output_tokens=config.max_output_tokens,
        )

    translator = RequestTranslator(generation_config, clean_schemas=not no_clean)
    registry = ToolCallRegistry.build(state.history, strict=not lenient)
    try:
        request = translator.to_request(state, registry)
    except TranslationError as exc:
        fail(str(exc))
    print_json(request.to_wire())


@translate.command("response")
@click.argument("response_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--history",
    "history_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Conversation state whose tool calls seed the registry.",
)
@click.option("--json", "as_json", is_flag=True, help="Output events as JSON lines.")
def response_cmd(response_file: Path, history_file: Path | None, as_json: bool) -> None:
    """Print the normalized events for a Gemini reply.

    RESPONSE_FILE holds one reply object or a list of stream chunks.
    """
    history = _load_state(history_file).history if history_file else []
    registry = ToolCallRegistry.build(history)
    payload = load_data(response_file)

    try:
        events = ResponseTranslator().translate(payload, registry).collect()
    except (BackendError, TranslationError) as exc:
        fail(str(exc))

    if as_json:
        for event in events:
            click.echo(event.model_dump_json())
        return
    print_events_table(events)


def _load_state(path: Path) -> ConversationState:
    data = load_data(path)
    try:
        return ConversationState.model_validate(data)
    except ValidationError as exc:
        fail(f"Invalid conversation state in {path}: {exc}")
