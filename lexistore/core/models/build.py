"""Build models: the request a caller submits and the result it gets back."""

from datetime import date
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class BuildState(str, Enum):
    """Phases of a store build, in execution order."""

    IDLE = "idle"
    SCHEMA_READY = "schema_ready"
    WORDS_INSERTED = "words_inserted"
    PROBABILITY_RANKED = "probability_ranked"
    DEFINITIONS_APPLIED = "definitions_applied"
    LINKS_RESOLVED = "links_resolved"
    DONE = "done"
    CANCELLED = "cancelled"


class BuildStatus(str, Enum):
    """Terminal outcome of a build that did not fail."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BuildRequest(BaseModel):
    """Everything needed to build one lexicon store."""

    lexicon: str = Field(min_length=1)
    db_path: Path
    definitions_path: Path | None = None
    lexicon_file: str | None = None
    lexicon_date: date | None = None
    max_word_length: int = Field(default=15, ge=1)
    max_definition_links: int = Field(default=3, ge=0)
    progress_step: int = Field(default=1000, ge=1)


class BuildResult(BaseModel):
    """Summary of a finished or cancelled build."""

    status: BuildStatus
    state: BuildState
    last_committed: BuildState = BuildState.IDLE
    lexicon: str
    db_path: Path
    word_count: int = 0
    definition_count: int = 0
    links_resolved: int = 0
    elapsed_seconds: float = 0.0

    @property
    def cancelled(self) -> bool:
        return self.status == BuildStatus.CANCELLED
