"""Word-list exports from a lexicon store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer

from ...config import get_config
from ...core.models import SENSE_SEPARATOR
from ..app import app, console, get_json_mode
from ..utils import Output, open_built_store

export_app = typer.Typer(help="Export word lists from a lexicon store")
app.add_typer(export_app, name="export")

EXPORT_ATTRIBUTES = (
    "definition",
    "front_hooks",
    "back_hooks",
    "inner_hooks",
    "probability_order",
)

INNER_HOOK_MARK = "·"


def inner_hooks(row: dict[str, Any]) -> str:
    """Word with a marker on each side where it is itself a hook."""
    before = INNER_HOOK_MARK if row.get("is_front_hook") else ""
    after = INNER_HOOK_MARK if row.get("is_back_hook") else ""
    return f"{before}{row['word']}{after}"


def export_record(row: dict[str, Any], attrs: list[str]) -> dict[str, Any]:
    """Select ``attrs`` from a stored word row; the word always comes first."""
    record: dict[str, Any] = {"word": row["word"]}
    for attr in attrs:
        if attr == "inner_hooks":
            record[attr] = inner_hooks(row)
        else:
            record[attr] = row.get(attr)
    return record


def format_text_line(record: dict[str, Any]) -> str:
    """One tab-separated line; multi-sense definitions are flattened."""
    cells = []
    for value in record.values():
        if value is None:
            cells.append("")
        else:
            cells.append(str(value).replace("\n", SENSE_SEPARATOR))
    return "\t".join(cells)


@export_app.command("words")
def export_words(
    to: Path = typer.Option(..., "--to", help="Output file"),
    db: Path | None = typer.Option(None, "--db", help="Lexicon store path"),
    length: int | None = typer.Option(None, "--length", min=1, help="Only this length"),
    attr: list[str] | None = typer.Option(
        None,
        "--attr",
        help=f"Extra column (repeatable): {', '.join(EXPORT_ATTRIBUTES)}",
    ),
    format: str = typer.Option("text", "--format", help="text|jsonl"),
):
    """Export stored words, one per line, with optional attribute columns."""
    out = Output(console=console, json_mode=get_json_mode())

    attrs = list(attr or [])
    unknown = [a for a in attrs if a not in EXPORT_ATTRIBUTES]
    if unknown:
        out.error(
            f"Unknown attribute(s): {', '.join(unknown)}",
            suggestion=f"Choose from {', '.join(EXPORT_ATTRIBUTES)}",
        )
        raise typer.Exit(out.finish())
    if format not in ("text", "jsonl"):
        out.error(f"Unknown format: {format}", suggestion="Use text or jsonl")
        raise typer.Exit(out.finish())

    db_path = db or Path(get_config().defaults.db_path)
    count = 0
    with open_built_store(db_path, out) as store:
        to.parent.mkdir(parents=True, exist_ok=True)
        with open(to, "w", encoding="utf-8") as f:
            for row in store.iter_words(length):
                record = export_record(row, attrs)
                if format == "jsonl":
                    f.write(json.dumps(record, ensure_ascii=False) + "\n")
                else:
                    f.write(format_text_line(record) + "\n")
                count += 1

    out.success(f"Exported {count} words -> {to}", exported=count, file=str(to))
    raise typer.Exit(out.finish())
