"""Storage layer for built lexicon stores."""

from .lexicon_db import LexiconDB, open_lexicon_db, SCHEMA_VERSION
from .schemas import BuildMetadata, ReadOnlySQLRequest

__all__ = [
    "LexiconDB",
    "open_lexicon_db",
    "SCHEMA_VERSION",
    "BuildMetadata",
    "ReadOnlySQLRequest",
]
