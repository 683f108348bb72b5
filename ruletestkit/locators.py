# Locators: pure predicates deciding whether a diagnostic's location is where a test expects it.

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Tuple, Union, runtime_checkable

from ruletestkit.diagnostics.models import Location, TextSpan
from ruletestkit.document import Document, line_span_in_code


@runtime_checkable
class Locator(Protocol):
    """Anything with matches(location) -> bool; describe() is used in failure reports."""

    def matches(self, location: Location) -> bool: ...

    def describe(self) -> str: ...


@dataclass(frozen=True)
class LineLocator:
    """
    Matches a location that starts on line_number.

    span is the line's character range, terminator excluded; a location
    starting right at the end of the line (on its terminator) still counts.
    """

    line_number: int
    span: TextSpan

    @classmethod
    def from_code(cls, code: str, line_number: int) -> "LineLocator":
        return cls(line_number, line_span_in_code(code, line_number))

    @classmethod
    def from_document(cls, document: Document, line_number: int) -> "LineLocator":
        return cls(line_number, document.line_span(line_number))

    def matches(self, location: Location) -> bool:
        return self.span.start <= location.span.start <= self.span.end

    def describe(self) -> str:
        return f"line {self.line_number} {self.span}"


@dataclass(frozen=True)
class TextSpanLocator:
    """Matches a location lying entirely within span."""

    span: TextSpan

    def matches(self, location: Location) -> bool:
        return self.span.contains(location.span)

    def describe(self) -> str:
        return f"span {self.span}"


@dataclass(frozen=True)
class MarkerLocator:
    """Matches a location lying within any span recorded for a marker group."""

    name: str | None
    spans: Tuple[TextSpan, ...]

    def matches(self, location: Location) -> bool:
        return any(span.contains(location.span) for span in self.spans)

    def describe(self) -> str:
        label = f"marker '{self.name}'" if self.name is not None else "marker"
        return f"{label} at {', '.join(str(s) for s in self.spans)}"


def at_line(code: Union[str, Document], line_number: int) -> LineLocator:
    """LineLocator for raw code or an already built Document."""
    if isinstance(code, Document):
        return LineLocator.from_document(code, line_number)
    return LineLocator.from_code(code, line_number)


def at_span(start: int, end: int) -> TextSpanLocator:
    return TextSpanLocator(TextSpan(start, end))
