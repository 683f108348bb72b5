# Pydantic data models for diagnostics: TextSpan, Location, Severity, Diagnostic.

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class TextSpan(BaseModel):
    """Half-open character range [start, end) into a document's text."""

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)

    model_config = {"frozen": True}

    def __init__(self, start: int, end: int, **data) -> None:
        super().__init__(start=start, end=end, **data)

    @model_validator(mode="after")
    def _check_order(self) -> "TextSpan":
        if self.end < self.start:
            raise ValueError(f"span end {self.end} is before start {self.start}")
        return self

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, other: "TextSpan") -> bool:
        """True if other lies entirely within this span."""
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: "TextSpan") -> bool:
        return self.start < other.end and other.start < self.end

    def __str__(self) -> str:
        return f"[{self.start}..{self.end})"


class Location(BaseModel):
    """Where in the document a diagnostic was reported."""

    path: Path
    span: TextSpan
    line: int = Field(..., ge=1, description="1-based line number")
    column: int = Field(..., ge=1, description="1-based column number")
    end_line: Optional[int] = Field(None, ge=1)
    end_column: Optional[int] = Field(None, ge=1)
    snippet: Optional[str] = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}"


class Diagnostic(BaseModel):
    """A single finding reported by a rule or by the front end."""

    id: str
    message: str
    location: Location
    severity: Severity = Field(default=Severity.WARNING)

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    def __str__(self) -> str:
        return f"{self.location}: {self.severity.value.upper()} [{self.id}] {self.message}"
