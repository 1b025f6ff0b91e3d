"""Word-acceptability oracle.

The build consumes an external lexicon index through ``LexiconOracle``.
``WordListOracle`` is a plain in-memory implementation backed by word-list
files (one word per line, ``#`` comments allowed), used by the CLI and tests.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import Iterable, Protocol

logger = logging.getLogger(__name__)


class LexiconOracle(Protocol):
    """Read-only lookups against one or more loaded lexicons."""

    def is_acceptable(self, lexicon: str, word: str) -> bool: ...

    def words_of_length(self, lexicon: str, length: int) -> list[str]: ...

    def is_loaded(self, lexicon: str) -> bool: ...


class WordListOracle:
    """In-memory lexicons keyed by name."""

    def __init__(self):
        self._words: dict[str, frozenset[str]] = {}
        self._by_length: dict[str, dict[int, list[str]]] = {}
        self._sources: dict[str, str] = {}

    def add_lexicon(
        self,
        name: str,
        words: Iterable[str],
        source: str | None = None,
    ) -> int:
        """Register (or replace) a lexicon. Returns the number of unique words."""
        canonical = frozenset(w.strip().upper() for w in words if w.strip())
        by_length: dict[int, list[str]] = defaultdict(list)
        for word in sorted(canonical):
            by_length[len(word)].append(word)

        self._words[name] = canonical
        self._by_length[name] = dict(by_length)
        if source:
            self._sources[name] = source
        logger.info("Loaded lexicon %s: %d words", name, len(canonical))
        return len(canonical)

    def load_file(self, name: str, path: Path | str) -> int:
        """Load a word-list file. Only the first token of each line is used."""
        path = Path(path)
        words = []
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                words.append(line.split()[0])
        return self.add_lexicon(name, words, source=str(path))

    def is_acceptable(self, lexicon: str, word: str) -> bool:
        if not word:
            return False
        return word.upper() in self._words.get(lexicon, frozenset())

    def words_of_length(self, lexicon: str, length: int) -> list[str]:
        return list(self._by_length.get(lexicon, {}).get(length, []))

    def is_loaded(self, lexicon: str) -> bool:
        return lexicon in self._words

    def word_count(self, lexicon: str) -> int:
        return len(self._words.get(lexicon, frozenset()))

    def source_file(self, lexicon: str) -> str | None:
        return self._sources.get(lexicon)

    @property
    def lexicons(self) -> list[str]:
        return sorted(self._words)
