"""Pydantic models for Lexistore, organized by domain.

- lexicon.py: letters, lexicon styles, word/probability records, definitions
- build.py: build requests, states and results
"""

from .lexicon import (
    LetterSpec,
    LexiconStyle,
    WordRecord,
    ProbabilityRecord,
    DefinitionEntry,
    SENSE_SEPARATOR,
)
from .build import (
    BuildState,
    BuildStatus,
    BuildRequest,
    BuildResult,
)

__all__ = [
    # Lexicon
    "LetterSpec",
    "LexiconStyle",
    "WordRecord",
    "ProbabilityRecord",
    "DefinitionEntry",
    "SENSE_SEPARATOR",
    # Build
    "BuildState",
    "BuildStatus",
    "BuildRequest",
    "BuildResult",
]
