"""Per-word attribute derivation.

Computes everything about a word that depends only on the word itself and
the lexicon oracle: alphagram, letter statistics, point value, hooks and
cross-lexicon symbols. Anagram counts need the whole length class and are
filled in afterwards by ``count_anagrams``.
"""

from __future__ import annotations

import logging
import string
from collections import Counter
from typing import Iterable

from ..core.letters import LetterTable
from ..core.models import LexiconStyle, WordRecord
from ..core.oracle import LexiconOracle

logger = logging.getLogger(__name__)

VOWELS = frozenset("AEIOU")
HOOK_LETTERS = string.ascii_uppercase


def alphagram(word: str) -> str:
    """Letters of ``word`` sorted ascending, upper-cased."""
    return "".join(sorted(word.upper()))


def num_unique_letters(word: str) -> int:
    return len(set(word.upper()))


def num_vowels(word: str) -> int:
    return sum(1 for c in word.upper() if c in VOWELS)


def resolve_lexicon_styles(
    styles: Iterable[LexiconStyle],
    lexicon: str,
    oracle: LexiconOracle,
) -> list[LexiconStyle]:
    """Keep styles declared for ``lexicon`` whose compare lexicon is loaded."""
    resolved = []
    for style in styles:
        if style.lexicon != lexicon:
            continue
        if not oracle.is_loaded(style.compare_lexicon):
            logger.warning(
                "Skipping style %r for %s: compare lexicon %s is not loaded",
                style.symbol,
                lexicon,
                style.compare_lexicon,
            )
            continue
        resolved.append(style)
    return resolved


def style_symbols(
    word: str,
    styles: Iterable[LexiconStyle],
    oracle: LexiconOracle,
) -> str:
    """Concatenate the symbols of every style whose membership test matches."""
    symbols = ""
    for style in styles:
        acceptable = oracle.is_acceptable(style.compare_lexicon, word)
        if acceptable == style.in_compare_lexicon:
            symbols += style.symbol
    return symbols


class AttributeDeriver:
    """Derives ``WordRecord`` attributes for words of one lexicon.

    ``styles`` should already be resolved with ``resolve_lexicon_styles``.
    """

    def __init__(
        self,
        lexicon: str,
        oracle: LexiconOracle,
        letter_table: LetterTable,
        styles: list[LexiconStyle] | None = None,
    ):
        self.lexicon = lexicon
        self.oracle = oracle
        self.letter_table = letter_table
        self.styles = styles or []

    def is_front_hook(self, word: str) -> bool:
        return self.oracle.is_acceptable(self.lexicon, word[1:])

    def is_back_hook(self, word: str) -> bool:
        return self.oracle.is_acceptable(self.lexicon, word[:-1])

    def hook_letters(self, word: str, front: bool) -> str:
        """Alphabetical upper-case letters that extend ``word`` to a valid word."""
        letters = ""
        for letter in HOOK_LETTERS:
            extended = letter + word if front else word + letter
            if self.oracle.is_acceptable(self.lexicon, extended):
                letters += letter
        return letters

    def annotate_hooks(self, word: str, letters: str, front: bool) -> str:
        """Lower-case hook letters, each followed by its style symbols."""
        annotated = ""
        for letter in letters:
            extended = letter + word if front else word + letter
            annotated += letter.lower()
            if self.styles:
                annotated += style_symbols(extended, self.styles, self.oracle)
        return annotated

    def derive(self, word: str) -> WordRecord:
        word = word.upper()
        front = self.hook_letters(word, front=True)
        back = self.hook_letters(word, front=False)
        return WordRecord(
            word=word,
            length=len(word),
            alphagram=alphagram(word),
            num_unique_letters=num_unique_letters(word),
            num_vowels=num_vowels(word),
            point_value=self.letter_table.point_value(word),
            front_hooks=self.annotate_hooks(word, front, front=True),
            back_hooks=self.annotate_hooks(word, back, front=False),
            is_front_hook=self.is_front_hook(word),
            is_back_hook=self.is_back_hook(word),
            lexicon_symbols=(
                style_symbols(word, self.styles, self.oracle) if self.styles else ""
            ),
        )


def derive_attributes(
    word: str,
    lexicon: str,
    oracle: LexiconOracle,
    letter_table: LetterTable,
    styles: list[LexiconStyle] | None = None,
) -> WordRecord:
    """Derive a single word's record (``num_anagrams`` left at 0)."""
    return AttributeDeriver(lexicon, oracle, letter_table, styles).derive(word)


def count_anagrams(records: list[WordRecord]) -> list[WordRecord]:
    """Set ``num_anagrams`` on each record from its alphagram group size.

    Records must form a complete length class; the counts are only correct
    once every word sharing an alphagram is present.
    """
    counts = Counter(r.alphagram for r in records)
    for record in records:
        record.num_anagrams = counts[record.alphagram]
    return records
