"""Lexicon models for Lexistore.

This module contains:
- Letters: LetterSpec (point value and supply count of one tile letter)
- Styles: LexiconStyle (cross-lexicon membership symbols)
- Records: WordRecord, ProbabilityRecord (rows of the built store)
- Definitions: DefinitionEntry (one parsed line of a definitions file)
"""

from pydantic import BaseModel, Field, field_validator

SENSE_SEPARATOR = " / "


# =============================================================================
# Letters
# =============================================================================


class LetterSpec(BaseModel):
    """Point value and supply count of a single tile letter."""

    value: int = Field(ge=0, description="Points scored by the tile")
    count: int = Field(ge=0, description="Number of tiles in the physical supply")


# =============================================================================
# Lexicon styles
# =============================================================================


class LexiconStyle(BaseModel):
    """Annotate words of ``lexicon`` by their membership in ``compare_lexicon``.

    A word (or hook extension) gets ``symbol`` appended when its acceptability
    in ``compare_lexicon`` equals ``in_compare_lexicon``.
    """

    lexicon: str = Field(min_length=1)
    compare_lexicon: str = Field(min_length=1)
    in_compare_lexicon: bool
    symbol: str = Field(min_length=1)


# =============================================================================
# Store records
# =============================================================================


class WordRecord(BaseModel):
    """Derived attributes of one word, as stored in the ``words`` table."""

    word: str
    length: int = Field(ge=1)
    alphagram: str
    num_unique_letters: int = Field(ge=0)
    num_vowels: int = Field(ge=0)
    point_value: int = Field(ge=0)
    front_hooks: str = ""
    back_hooks: str = ""
    is_front_hook: bool = False
    is_back_hook: bool = False
    lexicon_symbols: str = ""
    num_anagrams: int = Field(default=0, ge=0)
    definition: str | None = None

    @field_validator("word")
    @classmethod
    def _canonical_word(cls, v: str) -> str:
        return v.upper()


class ProbabilityRecord(BaseModel):
    """Draw combinations and probability rank of one word for a blank count."""

    word: str
    length: int = Field(ge=1)
    num_blanks: int = Field(ge=0, le=2)
    combinations: float = Field(ge=0)
    probability_order: int | None = Field(default=None, ge=1)
    min_probability_order: int | None = Field(default=None, ge=1)
    max_probability_order: int | None = Field(default=None, ge=1)


# =============================================================================
# Definitions
# =============================================================================


class DefinitionEntry(BaseModel):
    """A word and its raw definition text, senses separated by `` / ``."""

    word: str = Field(min_length=1)
    raw_definition: str

    @field_validator("word")
    @classmethod
    def _canonical_word(cls, v: str) -> str:
        return v.upper()

    @property
    def senses(self) -> list[str]:
        return self.raw_definition.split(SENSE_SEPARATOR)
