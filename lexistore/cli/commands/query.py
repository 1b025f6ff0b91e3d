"""Query commands for reading a built lexicon store."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import typer

from ...config import get_config
from ...storage import ReadOnlySQLRequest
from ..app import app, console, get_json_mode
from ..utils import ExitCode, Output, open_built_store

_ALLOWED_PREFIXES = ("select", "with", "explain")
_DENYLIST_TOKENS = (
    " insert ",
    " update ",
    " delete ",
    " alter ",
    " drop ",
    " create ",
    " attach ",
    " detach ",
    " vacuum ",
    " pragma ",
    " replace ",
    " reindex ",
)

_WORD_FIELDS = (
    "length",
    "alphagram",
    "num_anagrams",
    "num_unique_letters",
    "num_vowels",
    "point_value",
    "front_hooks",
    "back_hooks",
    "is_front_hook",
    "is_back_hook",
    "lexicon_symbols",
)


def _db_path(db: Path | None) -> Path:
    return db or Path(get_config().defaults.db_path)


def validate_read_only_sql(sql: str) -> str | None:
    """Return a rejection reason, or None if ``sql`` is a single read-only query."""
    normalized = sql.strip().lower()
    if not normalized.startswith(_ALLOWED_PREFIXES):
        return "Only read-only SELECT/WITH/EXPLAIN queries are allowed"
    if ";" in sql.strip().rstrip(";"):
        return "Multi-statement SQL is not allowed"
    padded = f" {' '.join(normalized.split())} "
    if any(tok in padded for tok in _DENYLIST_TOKENS):
        return "Mutating SQL tokens are not allowed"
    return None


@app.command("lookup")
def lookup_command(
    word: str = typer.Argument(..., help="Word to look up"),
    db: Path | None = typer.Option(None, "--db", help="Lexicon store path"),
):
    """Show a word's stored attributes, probability and definition."""
    out = Output(console=console, json_mode=get_json_mode())

    with open_built_store(_db_path(db), out) as store:
        row = store.get_word(word)
        probabilities = [store.get_probability(word, n) for n in range(3)]

    if row is None:
        out.error(f"Word not found: {word.upper()}", exit_code=ExitCode.VALIDATION_ERROR)
        raise typer.Exit(out.finish())

    out.set_data("word", row)
    out.set_data("probability", [p for p in probabilities if p is not None])

    if not out.json_mode:
        console.print()
        console.print(f"[bold]{row['word']}[/bold]")
        for key in _WORD_FIELDS:
            console.print(f"  {key:<20} {row[key]}")
        for prob in probabilities:
            if prob is None:
                continue
            console.print(
                f"  probability ({prob['num_blanks']} blanks) "
                f"#{prob['probability_order']} "
                f"[{prob['min_probability_order']}-{prob['max_probability_order']}] "
                f"combinations={prob['combinations']:.0f}"
            )
        if row["definition"]:
            console.print()
            console.print(row["definition"], markup=False)

    raise typer.Exit(out.finish())


@app.command("anagrams")
def anagrams_command(
    letters: str = typer.Argument(..., help="Letters to anagram"),
    db: Path | None = typer.Option(None, "--db", help="Lexicon store path"),
):
    """List stored words made of exactly these letters."""
    out = Output(console=console, json_mode=get_json_mode())

    with open_built_store(_db_path(db), out) as store:
        rows = store.get_anagrams(letters)

    out.set_data("count", len(rows))
    if not rows:
        out.text("[dim](no anagrams)[/dim]")
    else:
        out.table(
            f"Anagrams of {letters.upper()}",
            ["Word", "Hooks", "Definition"],
            [
                [
                    r["word"],
                    f"{r['front_hooks']} {r['word']} {r['back_hooks']}".strip(),
                    (r["definition"] or "").split("\n")[0],
                ]
                for r in rows
            ],
            data_key="anagrams",
        )

    raise typer.Exit(out.finish())


@app.command("sql")
def sql_command(
    sql: str = typer.Argument(..., help="Read-only SQL statement"),
    db: Path | None = typer.Option(None, "--db", help="Lexicon store path"),
    limit: int = typer.Option(1000, "--limit", min=1),
    format: str = typer.Option("table", "--format", help="table|json|jsonl"),
):
    """Run a read-only SQL query against a lexicon store."""
    out = Output(console=console, json_mode=get_json_mode())

    req = ReadOnlySQLRequest(sql=sql, limit=limit)
    reason = validate_read_only_sql(req.sql)
    if reason:
        out.error(reason)
        raise typer.Exit(out.finish())

    with open_built_store(_db_path(db), out) as store:
        try:
            rows = store.run_select(req.sql, limit=req.limit)
        except sqlite3.Error as e:
            out.error(f"Query failed: {e}")
            raise typer.Exit(out.finish())

    if out.json_mode:
        out.set_data("rows", rows)
        out.set_data("count", len(rows))
        raise typer.Exit(out.finish())

    if format == "json":
        console.print_json(data=rows)
        return
    if format == "jsonl":
        for row in rows:
            console.print(json.dumps(row, default=str), markup=False)
        return

    if not rows:
        console.print("[dim](no rows)[/dim]")
        return

    columns = list(rows[0].keys())
    console.print(" | ".join(columns))
    console.print("-" * max(20, len(" | ".join(columns))))
    for row in rows:
        console.print(
            " | ".join(str(row.get(c, "")) for c in columns), markup=False
        )
