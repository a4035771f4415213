"""Shared CLI helpers: file loading and output formatting."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, NoReturn

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from turnbridge.core.models import ResponseEvent, TextDelta, ToolUseStart, ToolUseStop

console = Console()


def load_data(path: Path) -> Any:
    """Read a JSON or YAML file."""
    try:
        raw = path.read_text(encoding="utf-8")
        return yaml.safe_load(raw)
    except (OSError, yaml.YAMLError) as exc:
        fail(f"Cannot read {path}: {exc}")


def fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(message)}")
    sys.exit(1)


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data))


def print_events_table(events: list[ResponseEvent]) -> None:
    """Pretty-print normalized events as a table."""
    table = Table(title="Response Events")
    table.add_column("#", justify="right")
    table.add_column("Event", style="cyan")
    table.add_column("Tool use id")
    table.add_column("Detail")

    for index, event in enumerate(events):
        if isinstance(event, TextDelta):
            table.add_row(str(index), "text", "", _truncate(event.content))
        elif isinstance(event, ToolUseStart):
            table.add_row(
                str(index),
                "tool_use_start",
                event.tool_use_id,
                _truncate(f"{event.name} {event.partial_input}"),
            )
        elif isinstance(event, ToolUseStop):
            table.add_row(str(index), "tool_use_stop", event.tool_use_id, "")

    console.print(table)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) > max_len:
        text = text[: max_len - 3] + "..."
    return escape(text)
