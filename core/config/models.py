"""Data models for scanner configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.automaton.guards import DELIMITER_CHARS, DIGIT_CHARS, WHITESPACE_CHARS


class ScanConfig(BaseModel):
    """Record markers and flagged phrase dictionary loaded from YAML."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    open_marker: str = Field(min_length=1)
    id_open_marker: str = Field(min_length=1)
    id_prefix: str = ""
    id_close_marker: str = Field(min_length=1)
    close_marker: str = Field(min_length=1)
    phrases: list[str] = Field(min_length=1)

    @field_validator("open_marker", "id_open_marker", "id_close_marker", "close_marker")
    @classmethod
    def _check_marker(cls, value: str) -> str:
        if value[0] in WHITESPACE_CHARS or value[0] in DELIMITER_CHARS:
            raise ValueError("marker must not start with whitespace or a delimiter")
        return value

    @field_validator("id_prefix")
    @classmethod
    def _check_id_prefix(cls, value: str) -> str:
        if any(char in DIGIT_CHARS or char in WHITESPACE_CHARS for char in value):
            raise ValueError("id_prefix must not contain digits or whitespace")
        return value

    @field_validator("phrases")
    @classmethod
    def _check_phrases(cls, value: list[str]) -> list[str]:
        seen: set[str] = set()
        for phrase in value:
            if not phrase:
                raise ValueError("phrases must not be empty strings")
            if phrase[0] in DELIMITER_CHARS or phrase[-1] in DELIMITER_CHARS:
                raise ValueError(f"phrase {phrase!r} must not begin or end with a delimiter")
            if any(ord(char) > 255 for char in phrase):
                raise ValueError(f"phrase {phrase!r} must use single-byte characters only")
            if phrase in seen:
                raise ValueError(f"duplicate phrase {phrase!r}")
            seen.add(phrase)
        return value

    @model_validator(mode="after")
    def _check_close_marker_vs_phrases(self) -> ScanConfig:
        marker_start = self.close_marker[0]
        for phrase in self.phrases:
            if marker_start in phrase:
                raise ValueError(
                    f"phrase {phrase!r} contains close marker character {marker_start!r}"
                )
        return self
