"""Letter supply tables and draw-combination counting.

A ``LetterTable`` maps each tile letter to its point value and the number of
copies in the physical supply. Blanks are stored under ``BLANK``.

``combinations(word, num_blanks)`` counts the distinct unordered draws of
``len(word)`` tiles that can spell ``word`` using at most ``num_blanks``
blanks. Tiles are distinguishable, so a draw that uses ``j`` blanks and
covers the remaining letters exactly contributes

    C(blanks, j) * prod over letters c of C(supply[c], needed[c])

summed over every sub-multiset of the word's letters the blanks stand in for.
"""

from __future__ import annotations

from collections import Counter
from itertools import combinations_with_replacement
from math import comb
from pathlib import Path
from typing import Mapping

import yaml

from .models import LetterSpec

BLANK = "?"
MAX_BLANKS = 2

# Standard 100-tile English distribution: letter -> (value, count)
STANDARD_DISTRIBUTION: dict[str, tuple[int, int]] = {
    "A": (1, 9),
    "B": (3, 2),
    "C": (3, 2),
    "D": (2, 4),
    "E": (1, 12),
    "F": (4, 2),
    "G": (2, 3),
    "H": (4, 2),
    "I": (1, 9),
    "J": (8, 1),
    "K": (5, 1),
    "L": (1, 4),
    "M": (3, 2),
    "N": (1, 6),
    "O": (1, 8),
    "P": (3, 2),
    "Q": (10, 1),
    "R": (1, 6),
    "S": (1, 4),
    "T": (1, 6),
    "U": (1, 4),
    "V": (4, 2),
    "W": (4, 2),
    "X": (8, 1),
    "Y": (4, 2),
    "Z": (10, 1),
    BLANK: (0, 2),
}


class LetterTable:
    """Point values and supply counts for a tile set."""

    def __init__(self, letters: Mapping[str, LetterSpec]):
        self._letters = {k.upper(): v for k, v in letters.items()}

    @classmethod
    def standard(cls) -> "LetterTable":
        """The standard English 100-tile distribution with two blanks."""
        return cls(
            {
                letter: LetterSpec(value=value, count=count)
                for letter, (value, count) in STANDARD_DISTRIBUTION.items()
            }
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, int]]) -> "LetterTable":
        return cls({k: LetterSpec.model_validate(v) for k, v in data.items()})

    @classmethod
    def from_yaml(cls, path: Path | str) -> "LetterTable":
        """Load a table from YAML of the form ``A: {value: 1, count: 9}``."""
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Letter table must be a mapping: {path}")
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {k: v.model_dump() for k, v in sorted(self._letters.items())}

    def value(self, letter: str) -> int:
        spec = self._letters.get(letter.upper())
        return spec.value if spec else 0

    def count(self, letter: str) -> int:
        spec = self._letters.get(letter.upper())
        return spec.count if spec else 0

    @property
    def num_blanks(self) -> int:
        return self.count(BLANK)

    def point_value(self, word: str) -> int:
        return sum(self.value(c) for c in word)

    def _draws(self, needed: Counter) -> int:
        total = 1
        for letter, n in needed.items():
            if n <= 0:
                continue
            total *= comb(self.count(letter), n)
            if total == 0:
                return 0
        return total

    def combinations(self, word: str, num_blanks: int = 0) -> float:
        """Count the draws that can spell ``word`` with up to ``num_blanks`` blanks.

        Returns 0 when the supply cannot cover the word even after blanks.
        """
        if num_blanks < 0:
            raise ValueError(f"num_blanks must be >= 0, got {num_blanks}")

        needed = Counter(word.upper())
        total = self._draws(needed)

        distinct = sorted(needed)
        for used in range(1, min(num_blanks, len(word)) + 1):
            blank_ways = comb(self.num_blanks, used)
            if blank_ways == 0:
                break
            for substituted in combinations_with_replacement(distinct, used):
                reduced = needed.copy()
                reduced.subtract(substituted)
                if any(n < 0 for n in reduced.values()):
                    continue
                total += blank_ways * self._draws(reduced)

        return float(total)
