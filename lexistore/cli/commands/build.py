"""Build command: create a lexicon store from word lists and definitions."""

from __future__ import annotations

import logging
import time
from datetime import date
from pathlib import Path
from threading import Event, Thread

import typer
from pydantic import ValidationError
from rich.live import Live
from rich.spinner import Spinner
from rich.text import Text

from ...build import (
    BuildConfigurationError,
    BuildError,
    BuildPipeline,
    BuildProgress,
    CancellationToken,
)
from ...config import get_config, load_lexicon_styles
from ...core import LetterTable, WordListOracle
from ...core.models import BuildRequest, BuildResult
from ..app import app, console, get_json_mode
from ..utils import ExitCode, Output, format_elapsed, setup_logging

logger = logging.getLogger(__name__)

_BAR_WIDTH = 30


def _build_progress_display(snap: dict, elapsed: float) -> Text:
    """Build a Rich Text renderable showing live build progress.

    Args:
        snap: Snapshot dict from BuildProgress.snapshot()
        elapsed: Elapsed seconds since build start

    Returns:
        Rich Text object for Live display
    """
    text = Text()
    total = snap.get("total_steps", 0)
    if total <= 0:
        text.append(f"Starting... | {format_elapsed(elapsed)}", style="cyan bold")
        return text

    fraction = snap.get("fraction", 0.0)
    filled = round(fraction * _BAR_WIDTH)
    bar = "█" * filled + "░" * (_BAR_WIDTH - filled)
    text.append(f"{bar} ", style="cyan")
    text.append(
        f"{fraction:>4.0%} | {snap.get('state', 'idle')} | {format_elapsed(elapsed)}",
        style="cyan bold",
    )
    return text


def _parse_compare(values: list[str]) -> list[tuple[str, Path]]:
    pairs = []
    for raw in values:
        name, sep, path = raw.partition("=")
        if not sep or not name or not path:
            raise ValueError(f"Expected NAME=FILE, got {raw!r}")
        pairs.append((name.strip(), Path(path.strip())))
    return pairs


def _remove_store(path: Path) -> None:
    """Delete a store file and its WAL side files."""
    for candidate in (path, Path(f"{path}-wal"), Path(f"{path}-shm")):
        candidate.unlink(missing_ok=True)


@app.command("build")
def build_command(
    ctx: typer.Context,
    lexicon: str = typer.Option(..., "--lexicon", "-l", help="Lexicon name"),
    words: Path = typer.Option(
        ..., "--words", "-w", help="Word-list file for the lexicon"
    ),
    compare: list[str] | None = typer.Option(
        None,
        "--compare",
        help="Comparison lexicon as NAME=FILE (repeatable)",
    ),
    definitions: Path | None = typer.Option(
        None, "--definitions", "-d", help="Definitions file (WORD definition...)"
    ),
    db: Path | None = typer.Option(
        None, "--db", help="Destination store (defaults to config defaults.db_path)"
    ),
    letters: Path | None = typer.Option(
        None, "--letters", help="YAML letter table (defaults to standard English)"
    ),
    styles: Path | None = typer.Option(
        None, "--styles", help="YAML lexicon styles (defaults to config)"
    ),
    lexicon_date: str | None = typer.Option(
        None, "--lexicon-date", help="Lexicon release date (YYYY-MM-DD)"
    ),
    max_length: int | None = typer.Option(
        None, "--max-length", min=1, help="Longest word length to include"
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Replace an existing store at the destination"
    ),
    keep_partial: bool = typer.Option(
        False, "--keep-partial", help="Keep the partial store when cancelled"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide progress display"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show phase logs"),
    debug: bool = typer.Option(False, "--debug", help="Show debug-level logs"),
):
    """Build a lexicon store.

    Example:
        lexistore build -l CSW -w csw.txt --compare TWL=twl.txt -d csw-defs.txt --db csw.db
    """
    ctx.call_on_close(setup_logging(console, verbose=verbose, debug=debug))
    json_mode = get_json_mode()
    out = Output(console=console, json_mode=json_mode)
    config = get_config()
    start_time = time.time()

    # Inputs
    for path in (words, definitions, letters, styles):
        if path is not None and not path.exists():
            out.error(f"File not found: {path}", exit_code=ExitCode.FILE_NOT_FOUND)
            raise typer.Exit(out.finish())

    try:
        compare_pairs = _parse_compare(compare or [])
    except ValueError as e:
        out.error(str(e))
        raise typer.Exit(out.finish())
    for _, path in compare_pairs:
        if not path.exists():
            out.error(f"File not found: {path}", exit_code=ExitCode.FILE_NOT_FOUND)
            raise typer.Exit(out.finish())

    try:
        parsed_date = date.fromisoformat(lexicon_date) if lexicon_date else None
    except ValueError:
        out.error(f"Invalid --lexicon-date: {lexicon_date}")
        raise typer.Exit(out.finish())

    oracle = WordListOracle()
    try:
        count = oracle.load_file(lexicon, words)
        for name, path in compare_pairs:
            oracle.load_file(name, path)
        letter_table = LetterTable.from_yaml(letters) if letters else None
        style_list = load_lexicon_styles(styles) if styles else config.lexicon_styles
    except (OSError, ValueError, ValidationError) as e:
        out.error(f"Failed to load inputs: {e}")
        raise typer.Exit(out.finish())

    if count == 0:
        out.error(f"Word list is empty: {words}")
        raise typer.Exit(out.finish())

    db_path = db or Path(config.defaults.db_path)
    if db_path.exists():
        if not force:
            out.error(
                f"Store already exists: {db_path}",
                suggestion="Use --force to replace it",
            )
            raise typer.Exit(out.finish())
        _remove_store(db_path)

    try:
        request = BuildRequest(
            lexicon=lexicon,
            db_path=db_path,
            definitions_path=definitions,
            lexicon_file=oracle.source_file(lexicon),
            lexicon_date=parsed_date,
            max_word_length=max_length or config.build.max_word_length,
            max_definition_links=config.build.max_definition_links,
            progress_step=config.build.progress_step,
        )
    except ValidationError as e:
        out.error(f"Invalid build settings: {e}")
        raise typer.Exit(out.finish())

    out.text(f"Building [bold]{lexicon}[/bold] ({count:,} words) → {db_path}")

    progress_state = BuildProgress()
    token = CancellationToken()
    pipeline = BuildPipeline(
        request,
        oracle,
        letter_table=letter_table,
        styles=style_list,
        progress=progress_state,
        token=token,
    )

    result: BuildResult | None = None
    build_error: Exception | None = None
    build_done = Event()

    def do_build():
        nonlocal result, build_error
        try:
            result = pipeline.run()
        except Exception as e:
            build_error = e
        finally:
            build_done.set()

    build_thread = Thread(target=do_build, daemon=True)
    build_thread.start()

    try:
        if not quiet and not json_mode:
            with Live(
                Spinner("dots", text="Starting...", style="cyan"),
                console=console,
                refresh_per_second=4,
                transient=True,
            ) as live:
                while not build_done.is_set():
                    elapsed = time.time() - start_time
                    live.update(
                        _build_progress_display(progress_state.snapshot(), elapsed)
                    )
                    time.sleep(0.25)
        else:
            while not build_done.wait(0.25):
                pass
    except KeyboardInterrupt:
        out.warning("Cancelling build...")
        token.cancel()
        build_done.wait()

    if build_error is not None:
        if isinstance(build_error, BuildConfigurationError):
            out.error(str(build_error))
        elif isinstance(build_error, BuildError):
            out.error(f"Build failed: {build_error}", exit_code=ExitCode.BUILD_ERROR)
        else:
            logger.exception("Unexpected build failure", exc_info=build_error)
            out.error(f"Build failed: {build_error}", exit_code=ExitCode.BUILD_ERROR)
        raise typer.Exit(out.finish())

    out.set_data("lexicon", result.lexicon)
    out.set_data("db_path", str(result.db_path))
    out.set_data("state", result.state.value)
    out.set_data("last_committed", result.last_committed.value)
    out.set_data("word_count", result.word_count)
    out.set_data("definition_count", result.definition_count)
    out.set_data("links_resolved", result.links_resolved)
    out.set_data("elapsed_seconds", result.elapsed_seconds)

    if result.cancelled:
        if keep_partial:
            out.warning(
                f"Build cancelled after {result.last_committed.value}; "
                f"partial store kept at {db_path}"
            )
        else:
            _remove_store(db_path)
            out.warning("Build cancelled; partial store removed")
        out.set_status("cancelled", ExitCode.USER_CANCELLED)
        raise typer.Exit(out.finish())

    out.blank()
    out.divider()
    out.success(f"Built {result.lexicon}")
    out.divider()
    out.text(f"Duration: {format_elapsed(result.elapsed_seconds)}")
    out.text(f"Words: {result.word_count:,}")
    out.text(f"Definitions: {result.definition_count:,}")
    out.text(f"Resolved links: {result.links_resolved:,}")
    out.text(f"Store: [bold]{db_path}[/bold]")

    raise typer.Exit(out.finish())
