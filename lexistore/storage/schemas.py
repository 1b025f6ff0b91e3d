"""Pydantic schemas for lexicon store payloads."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, ConfigDict


class BuildMetadata(BaseModel):
    """Provenance rows written to the ``metadata`` table."""

    schema_version: int = Field(ge=1)
    lexicon: str = Field(min_length=1)
    lexicon_date: date | None = None
    lexicon_file: str | None = None

    def to_rows(self) -> list[tuple[str, str]]:
        return [
            ("schema_version", str(self.schema_version)),
            ("lexicon", self.lexicon),
            ("lexicon_date", self.lexicon_date.isoformat() if self.lexicon_date else ""),
            ("lexicon_file", self.lexicon_file or ""),
        ]


class ReadOnlySQLRequest(BaseModel):
    """Read-only SQL request contract for the sql command."""

    model_config = ConfigDict(str_strip_whitespace=True)

    sql: str = Field(min_length=1)
    limit: int = Field(default=1000, ge=1)
