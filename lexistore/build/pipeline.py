"""Build pipeline orchestrator.

Runs the phases of a store build in order, each inside its own transaction:

    idle -> schema_ready -> words_inserted -> probability_ranked
         -> definitions_applied -> links_resolved -> done

Cancellation is cooperative. The pipeline polls its ``CancellationToken``
every ``progress_step`` logical steps and at phase boundaries; when a stop is
requested the in-flight phase is rolled back, earlier phases stay committed
and ``run()`` returns a cancelled ``BuildResult``. Discarding the partial
store is up to the caller.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from pathlib import Path
from typing import Callable

from ..core.letters import LetterTable, MAX_BLANKS
from ..core.models import (
    BuildRequest,
    BuildResult,
    BuildState,
    BuildStatus,
    LexiconStyle,
)
from ..core.oracle import LexiconOracle
from ..storage import BuildMetadata, LexiconDB, SCHEMA_VERSION
from .attributes import AttributeDeriver, count_anagrams, resolve_lexicon_styles
from .definitions import DefinitionResolver, filter_definitions, iter_definition_file
from .progress import BuildProgress, CancellationToken
from .ranking import iter_probability_records, rank_probabilities

logger = logging.getLogger(__name__)

# Logical steps per word: 3 inserting words, 3 ranking (0-2 blanks),
# 1 applying definitions, 1 resolving links.
STEPS_PER_WORD = 8

ProgressCallback = Callable[[int, int], None]


class BuildError(Exception):
    """A build failed."""


class BuildConfigurationError(BuildError):
    """A build could not start: bad inputs or an unusable destination store."""


class _BuildCancelled(Exception):
    """Raised inside a phase to unwind its transaction on cancellation."""


def estimate_steps(num_words: int) -> tuple[int, int]:
    """Return (total_steps, head_start) for a build of ``num_words`` words.

    The head start is roughly 1% of the work so progress starts visibly.
    """
    work = num_words * STEPS_PER_WORD
    head_start = work // 99
    return work + head_start + 1, head_start


class BuildPipeline:
    """Builds one lexicon store from an oracle, a letter table and definitions."""

    def __init__(
        self,
        request: BuildRequest,
        oracle: LexiconOracle,
        letter_table: LetterTable | None = None,
        styles: list[LexiconStyle] | None = None,
        progress: BuildProgress | None = None,
        token: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ):
        self.request = request
        self.oracle = oracle
        self.letter_table = letter_table or LetterTable.standard()
        self.styles = styles or []
        self.progress = progress or BuildProgress()
        self.token = token or CancellationToken()
        self.on_progress = on_progress

        self.state = BuildState.IDLE
        self.last_committed = BuildState.IDLE
        self.word_count = 0
        self.definition_count = 0
        self.links_resolved = 0
        self._step = 0
        self._reported_step = 0

    # ── Public API ──

    def cancel(self) -> None:
        self.token.cancel()

    def run(self) -> BuildResult:
        """Run every phase.

        Returns:
            BuildResult with status completed or cancelled

        Raises:
            BuildConfigurationError: Inputs or destination unusable; nothing built
            BuildError: A database error aborted a phase (that phase is rolled back)
        """
        start_time = time.time()
        styles = self._preflight()
        num_words = self._count_words()
        db = self._open_store()

        total_steps, head_start = estimate_steps(num_words)
        self.progress.begin(total_steps, head_start)
        self._step = head_start
        self._reported_step = head_start
        self._emit()

        deriver = AttributeDeriver(
            self.request.lexicon, self.oracle, self.letter_table, styles
        )
        logger.info(
            "Building %s (%d words) into %s",
            self.request.lexicon,
            num_words,
            self.request.db_path,
        )

        try:
            self._run_phase(db, BuildState.SCHEMA_READY, self._create_schema)
            self._run_phase(
                db,
                BuildState.WORDS_INSERTED,
                lambda d: self._insert_words(d, deriver),
            )
            self._run_phase(db, BuildState.PROBABILITY_RANKED, self._rank_probabilities)
            self._run_phase(db, BuildState.DEFINITIONS_APPLIED, self._apply_definitions)
            self._run_phase(db, BuildState.LINKS_RESOLVED, self._resolve_links)
        except _BuildCancelled:
            logger.warning(
                "Build of %s cancelled after %s", self.request.lexicon, self.state.value
            )
            self.state = BuildState.CANCELLED
            self.progress.mark_cancelled()
            return self._result(BuildStatus.CANCELLED, start_time)
        except sqlite3.Error as e:
            raise BuildError(
                f"Database error after {self.state.value}: {e}"
            ) from e
        finally:
            db.close()

        self.state = BuildState.DONE
        self.progress.finish()
        self._emit()
        logger.info(
            "Built %s: %d words, %d definitions, %d resolved links",
            self.request.lexicon,
            self.word_count,
            self.definition_count,
            self.links_resolved,
        )
        return self._result(BuildStatus.COMPLETED, start_time)

    # ── Setup ──

    def _preflight(self) -> list[LexiconStyle]:
        """Validate inputs before touching the destination store."""
        lexicon = self.request.lexicon
        if not self.oracle.is_loaded(lexicon):
            raise BuildConfigurationError(f"Lexicon not loaded: {lexicon}")

        path = self.request.definitions_path
        if path is not None:
            try:
                with open(path, encoding="utf-8"):
                    pass
            except OSError as e:
                raise BuildConfigurationError(
                    f"Cannot read definitions file {path}: {e}"
                ) from e

        return resolve_lexicon_styles(self.styles, lexicon, self.oracle)

    def _count_words(self) -> int:
        return sum(
            len(self.oracle.words_of_length(self.request.lexicon, length))
            for length in range(1, self.request.max_word_length + 1)
        )

    def _open_store(self) -> LexiconDB:
        path = Path(self.request.db_path)
        existed = path.exists()
        try:
            db = LexiconDB(path)
        except (sqlite3.Error, OSError) as e:
            if not existed:
                path.unlink(missing_ok=True)
            raise BuildConfigurationError(f"Cannot open store {path}: {e}") from e

        try:
            populated = db.has_schema()
        except sqlite3.Error as e:
            db.close()
            if not existed:
                path.unlink(missing_ok=True)
            raise BuildConfigurationError(f"Cannot open store {path}: {e}") from e

        if populated:
            db.close()
            raise BuildConfigurationError(f"Store already built: {path}")
        return db

    # ── Progress and cancellation ──

    def _emit(self) -> None:
        if self.on_progress is not None:
            snap = self.progress.snapshot()
            self.on_progress(snap["current_step"], snap["total_steps"])

    def _check_cancelled(self) -> None:
        if self.token.cancelled:
            raise _BuildCancelled()

    def _tick(self, steps: int = 1) -> None:
        """Count logical steps; poll and report at each ``progress_step`` boundary."""
        interval = self.request.progress_step
        previous = self._step
        self._step += steps
        if self._step // interval == previous // interval:
            return
        self._check_cancelled()
        self.progress.advance(self._step - self._reported_step)
        self._reported_step = self._step
        self._emit()

    def _run_phase(
        self,
        db: LexiconDB,
        target: BuildState,
        phase: Callable[[LexiconDB], None],
    ) -> None:
        self._check_cancelled()
        logger.info("Phase %s: starting", target.value)
        phase_start = time.time()
        with db.transaction():
            phase(db)
        self.state = target
        self.last_committed = target
        self.progress.set_state(target)
        logger.info(
            "Phase %s: committed in %.2fs", target.value, time.time() - phase_start
        )

    # ── Phases ──

    def _create_schema(self, db: LexiconDB) -> None:
        lexicon_file = self.request.lexicon_file
        if lexicon_file is None and hasattr(self.oracle, "source_file"):
            lexicon_file = self.oracle.source_file(self.request.lexicon)

        db.create_schema()
        db.write_metadata(
            BuildMetadata(
                schema_version=SCHEMA_VERSION,
                lexicon=self.request.lexicon,
                lexicon_date=self.request.lexicon_date,
                lexicon_file=lexicon_file,
            )
        )

    def _insert_words(self, db: LexiconDB, deriver: AttributeDeriver) -> None:
        inserted = 0
        for length in range(1, self.request.max_word_length + 1):
            words = self.oracle.words_of_length(self.request.lexicon, length)
            if not words:
                continue

            records = []
            for word in words:
                records.append(deriver.derive(word))
                self._tick()

            count_anagrams(records)
            self._tick(len(records))

            for record in records:
                db.insert_word(record)
                self._tick()

            inserted += len(records)
            logger.debug("Inserted %d words of length %d", len(records), length)

        self.word_count = inserted

    def _rank_probabilities(self, db: LexiconDB) -> None:
        for length in range(1, self.request.max_word_length + 1):
            words = db.words_of_length(length)
            if not words:
                continue

            for num_blanks in range(MAX_BLANKS + 1):
                records = []
                for record in iter_probability_records(
                    words, length, num_blanks, self.letter_table
                ):
                    records.append(record)
                    self._tick()
                db.insert_probabilities(rank_probabilities(records))

            logger.debug("Ranked %d words of length %d", len(words), length)

    def _apply_definitions(self, db: LexiconDB) -> None:
        path = self.request.definitions_path
        if path is None:
            logger.info("No definitions file; skipping definitions")
            return

        defined: set[str] = set()
        unknown = 0
        for entry in iter_definition_file(path):
            if entry is not None and entry.raw_definition:
                if db.set_definition(entry.word, entry.raw_definition):
                    defined.add(entry.word)
                else:
                    unknown += 1
            self._tick()

        self.definition_count = len(defined)
        if unknown:
            logger.info(
                "Ignored %d definitions for words not in %s",
                unknown,
                self.request.lexicon,
            )

    def _resolve_links(self, db: LexiconDB) -> None:
        raw = db.get_definitions()
        definitions = filter_definitions(raw)
        self._tick(len(raw) - len(definitions))

        resolver = DefinitionResolver(definitions, self.request.max_definition_links)
        changed = 0
        for word, definition in definitions.items():
            resolved = resolver.resolve(definition)
            if resolved != definition:
                db.set_definition(word, resolved)
                changed += 1
            self._tick()

        self.links_resolved = changed

    def _result(self, status: BuildStatus, start_time: float) -> BuildResult:
        return BuildResult(
            status=status,
            state=self.state,
            last_committed=self.last_committed,
            lexicon=self.request.lexicon,
            db_path=self.request.db_path,
            word_count=self.word_count,
            definition_count=self.definition_count,
            links_resolved=self.links_resolved,
            elapsed_seconds=time.time() - start_time,
        )


def run_build(
    request: BuildRequest,
    oracle: LexiconOracle,
    letter_table: LetterTable | None = None,
    styles: list[LexiconStyle] | None = None,
    progress: BuildProgress | None = None,
    token: CancellationToken | None = None,
    on_progress: ProgressCallback | None = None,
) -> BuildResult:
    """Build a lexicon store. See ``BuildPipeline.run``."""
    return BuildPipeline(
        request,
        oracle,
        letter_table=letter_table,
        styles=styles,
        progress=progress,
        token=token,
        on_progress=on_progress,
    ).run()
