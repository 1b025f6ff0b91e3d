"""Probability ranking within (length, num_blanks) classes.

Words are ordered by descending draw combinations. Runs of equal
combinations form a tie band ``[min_probability_order, max_probability_order]``;
inside a band each word still gets its own ``probability_order``, assigned
by alphagram then by word so that rebuilds are reproducible.
"""

from __future__ import annotations

from itertools import groupby
from operator import attrgetter
from typing import Iterable, Iterator

from ..core.letters import LetterTable, MAX_BLANKS
from ..core.models import ProbabilityRecord
from .attributes import alphagram


def _sort_key(record: ProbabilityRecord) -> tuple[float, str, str]:
    return (-record.combinations, alphagram(record.word), record.word)


def rank_probabilities(records: Iterable[ProbabilityRecord]) -> list[ProbabilityRecord]:
    """Assign probability orders and tie bands to one class of records.

    Args:
        records: Records sharing the same length and num_blanks

    Returns:
        The records in rank order, with order fields filled in

    Raises:
        ValueError: If the records span more than one class
    """
    ordered = sorted(records, key=_sort_key)
    classes = {(r.length, r.num_blanks) for r in ordered}
    if len(classes) > 1:
        raise ValueError(
            f"rank_probabilities expects a single (length, num_blanks) class, "
            f"got {sorted(classes)}"
        )

    rank = 1
    for _, run in groupby(ordered, key=attrgetter("combinations")):
        band = list(run)
        max_order = rank + len(band) - 1
        for offset, record in enumerate(band):
            record.probability_order = rank + offset
            record.min_probability_order = rank
            record.max_probability_order = max_order
        rank = max_order + 1

    return ordered


def iter_probability_records(
    words: Iterable[str],
    length: int,
    num_blanks: int,
    letter_table: LetterTable,
) -> Iterator[ProbabilityRecord]:
    """Yield unranked records for ``words`` at one blank count."""
    for word in words:
        yield ProbabilityRecord(
            word=word,
            length=length,
            num_blanks=num_blanks,
            combinations=letter_table.combinations(word, num_blanks),
        )


def rank_length_class(
    words: list[str],
    length: int,
    letter_table: LetterTable,
    max_blanks: int = MAX_BLANKS,
) -> dict[int, list[ProbabilityRecord]]:
    """Rank every blank-count class of one word length.

    Returns:
        Mapping of num_blanks to ranked records
    """
    return {
        num_blanks: rank_probabilities(
            iter_probability_records(words, length, num_blanks, letter_table)
        )
        for num_blanks in range(max_blanks + 1)
    }
