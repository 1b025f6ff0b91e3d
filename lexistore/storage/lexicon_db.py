"""Lexicon store for Lexistore.

This module provides the schema and helper operations for a built lexicon
database: the ``words`` and ``probability`` tables the build pipeline
populates, a key/value ``metadata`` table, and the read queries used by the
search and export commands.

The connection runs in autocommit mode; every write happens inside an
explicit ``transaction()`` block so that readers never see a partially
written phase.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator

from ..core.models import ProbabilityRecord, WordRecord
from .schemas import BuildMetadata

SCHEMA_VERSION = 1

_TABLES = (
    """
    CREATE TABLE words (
        word TEXT NOT NULL,
        length INTEGER NOT NULL,
        alphagram TEXT NOT NULL,
        num_anagrams INTEGER,
        num_unique_letters INTEGER,
        num_vowels INTEGER,
        point_value INTEGER,
        front_hooks TEXT,
        back_hooks TEXT,
        is_front_hook INTEGER,
        is_back_hook INTEGER,
        lexicon_symbols TEXT,
        definition TEXT
    )
    """,
    """
    CREATE TABLE probability (
        word TEXT NOT NULL,
        length INTEGER NOT NULL,
        num_blanks INTEGER NOT NULL,
        combinations REAL NOT NULL,
        probability_order INTEGER,
        min_probability_order INTEGER,
        max_probability_order INTEGER
    )
    """,
    """
    CREATE TABLE metadata (
        key TEXT PRIMARY KEY,
        value TEXT
    )
    """,
)

_INDEXES = (
    "CREATE UNIQUE INDEX word_index ON words (word)",
    "CREATE INDEX word_length_index ON words (length)",
    "CREATE INDEX word_alphagram_index ON words (alphagram)",
    "CREATE INDEX prob_word_blanks_index ON probability (word, num_blanks)",
    "CREATE INDEX prob_word_index ON probability (word)",
    "CREATE INDEX prob_length_index ON probability (length)",
    "CREATE INDEX prob_blanks_index ON probability (num_blanks)",
    "CREATE INDEX prob_order ON probability (num_blanks, probability_order)",
    "CREATE INDEX prob_min_max_order ON probability "
    "(num_blanks, min_probability_order, max_probability_order)",
)

_WORD_COLUMNS = (
    "word",
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
    "definition",
)

_PROBABILITY_COLUMNS = (
    "word",
    "length",
    "num_blanks",
    "combinations",
    "probability_order",
    "min_probability_order",
    "max_probability_order",
)


def _placeholders(columns: tuple[str, ...]) -> str:
    return ", ".join("?" for _ in columns)


def _row_dict(row: sqlite3.Row | None) -> dict[str, Any] | None:
    return dict(row) if row is not None else None


class LexiconDB:
    """SQLite-backed lexicon store."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(
            str(self.path), check_same_thread=False, isolation_level=None
        )
        self.conn.row_factory = sqlite3.Row
        try:
            self._set_pragmas()
        except sqlite3.Error:
            self.conn.close()
            raise

    def _set_pragmas(self) -> None:
        cursor = self.conn.cursor()
        cursor.execute("PRAGMA journal_mode = WAL")
        cursor.execute("PRAGMA synchronous = NORMAL")
        cursor.execute("PRAGMA temp_store = MEMORY")

    @contextmanager
    def transaction(self) -> Iterator["LexiconDB"]:
        """Scope writes to a single transaction.

        Commits on success, rolls back on any exception (including
        cancellation signals) and re-raises.
        """
        self.conn.execute("BEGIN")
        try:
            yield self
        except BaseException:
            if self.conn.in_transaction:
                self.conn.execute("ROLLBACK")
            raise
        else:
            self.conn.execute("COMMIT")

    def has_schema(self) -> bool:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'words'"
        )
        return cursor.fetchone() is not None

    def create_schema(self) -> None:
        """Create tables and indexes. Call inside ``transaction()``."""
        cursor = self.conn.cursor()
        for statement in _TABLES:
            cursor.execute(statement)
        for statement in _INDEXES:
            cursor.execute(statement)

    def write_metadata(self, metadata: BuildMetadata) -> None:
        self.conn.executemany(
            "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
            metadata.to_rows(),
        )

    def get_metadata(self) -> dict[str, str]:
        cursor = self.conn.cursor()
        cursor.execute("SELECT key, value FROM metadata ORDER BY key")
        return {row["key"]: row["value"] for row in cursor.fetchall()}

    # ── Words ──

    def insert_word(self, record: WordRecord) -> None:
        self.conn.execute(
            f"INSERT INTO words ({', '.join(_WORD_COLUMNS)}) "
            f"VALUES ({_placeholders(_WORD_COLUMNS)})",
            (
                record.word,
                record.length,
                record.alphagram,
                record.num_anagrams,
                record.num_unique_letters,
                record.num_vowels,
                record.point_value,
                record.front_hooks,
                record.back_hooks,
                int(record.is_front_hook),
                int(record.is_back_hook),
                record.lexicon_symbols,
                record.definition,
            ),
        )

    def set_definition(self, word: str, definition: str) -> bool:
        """Set a word's definition. Returns False if the word is not stored."""
        cursor = self.conn.execute(
            "UPDATE words SET definition = ? WHERE word = ?",
            (definition, word.upper()),
        )
        return cursor.rowcount > 0

    def get_definitions(self) -> dict[str, str]:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT word, definition FROM words WHERE definition IS NOT NULL ORDER BY word"
        )
        return {row["word"]: row["definition"] for row in cursor.fetchall()}

    def words_of_length(self, length: int) -> list[str]:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT word FROM words WHERE length = ? ORDER BY word", (length,)
        )
        return [row["word"] for row in cursor.fetchall()]

    def get_word(self, word: str) -> dict[str, Any] | None:
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM words WHERE word = ?", (word.upper(),))
        return _row_dict(cursor.fetchone())

    def get_anagrams(self, letters: str) -> list[dict[str, Any]]:
        """Words whose alphagram matches ``letters`` (in any order)."""
        alphagram = "".join(sorted(letters.upper()))
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT * FROM words WHERE alphagram = ? ORDER BY word", (alphagram,)
        )
        return [dict(row) for row in cursor.fetchall()]

    def iter_words(self, length: int | None = None) -> Iterator[dict[str, Any]]:
        """Words joined with their zero-blank probability order."""
        sql = (
            "SELECT w.*, p.probability_order FROM words w "
            "LEFT JOIN probability p ON p.word = w.word AND p.num_blanks = 0"
        )
        params: tuple[Any, ...] = ()
        if length is not None:
            sql += " WHERE w.length = ?"
            params = (length,)
        sql += " ORDER BY w.length, w.word"
        cursor = self.conn.cursor()
        cursor.execute(sql, params)
        for row in cursor:
            yield dict(row)

    # ── Probability ──

    def insert_probabilities(self, records: Iterable[ProbabilityRecord]) -> None:
        self.conn.executemany(
            f"INSERT INTO probability ({', '.join(_PROBABILITY_COLUMNS)}) "
            f"VALUES ({_placeholders(_PROBABILITY_COLUMNS)})",
            (
                (
                    r.word,
                    r.length,
                    r.num_blanks,
                    r.combinations,
                    r.probability_order,
                    r.min_probability_order,
                    r.max_probability_order,
                )
                for r in records
            ),
        )

    def get_probability(self, word: str, num_blanks: int = 0) -> dict[str, Any] | None:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT * FROM probability WHERE word = ? AND num_blanks = ?",
            (word.upper(), num_blanks),
        )
        return _row_dict(cursor.fetchone())

    def probability_band(
        self,
        num_blanks: int,
        length: int,
        min_order: int,
        max_order: int,
    ) -> list[dict[str, Any]]:
        """Records of one class whose tie band overlaps ``[min_order, max_order]``."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT * FROM probability
            WHERE num_blanks = ? AND length = ?
              AND max_probability_order >= ? AND min_probability_order <= ?
            ORDER BY probability_order
            """,
            (num_blanks, length, min_order, max_order),
        )
        return [dict(row) for row in cursor.fetchall()]

    # ── Generic ──

    def count_rows(self, table: str) -> int:
        if table not in ("words", "probability", "metadata"):
            raise ValueError(f"Unknown table: {table}")
        cursor = self.conn.cursor()
        cursor.execute(f"SELECT COUNT(*) FROM {table}")
        return int(cursor.fetchone()[0])

    def run_select(
        self,
        query: str,
        params: tuple[Any, ...] = (),
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        cursor = self.conn.cursor()
        sql = query.strip().rstrip(";")
        if limit is not None and " limit " not in sql.lower():
            sql = f"{sql} LIMIT {int(limit)}"
        cursor.execute(sql, params)
        cols = [d[0] for d in cursor.description or []]
        rows = []
        for row in cursor.fetchall():
            rows.append({k: row[idx] for idx, k in enumerate(cols)})
        return rows

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "LexiconDB":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


def open_lexicon_db(path: Path | str) -> LexiconDB:
    """Open a lexicon store (the schema is created by the build pipeline)."""
    return LexiconDB(path)
