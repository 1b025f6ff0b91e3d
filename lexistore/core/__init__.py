"""Core domain: models, letter tables and the lexicon oracle."""

from .letters import LetterTable, STANDARD_DISTRIBUTION, BLANK
from .oracle import LexiconOracle, WordListOracle

__all__ = [
    "LetterTable",
    "STANDARD_DISTRIBUTION",
    "BLANK",
    "LexiconOracle",
    "WordListOracle",
]
