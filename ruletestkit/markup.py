"""
Test markup: C snippets annotated with inline markers.

    [|text|]          anonymous marker
    {|name:text|}     named marker

Markers may nest and several markers may share a name (any of them will do).
parse_markup() strips the delimiters and records every marker's span against
the stripped code, which is what the analyzer sees.

Typical usage:
    markup = parse_markup("int main(void) { [|gets(buf)|]; }")
    markup.code       # "int main(void) { gets(buf); }"
    markup.locator    # MarkerLocator for the single marker group
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ruletestkit.diagnostics.models import TextSpan
from ruletestkit.errors import MarkupError
from ruletestkit.locators import MarkerLocator, TextSpanLocator

logger = logging.getLogger(__name__)

OPEN_ANONYMOUS = "[|"
CLOSE_ANONYMOUS = "|]"
OPEN_NAMED = "{|"
CLOSE_NAMED = "|}"

_MARKER_NAME = re.compile(r"([A-Za-z0-9_.\-]+):")


@dataclass(frozen=True)
class Marker:
    """One marker occurrence; name is None for anonymous markers."""

    name: Optional[str]
    span: TextSpan


@dataclass(frozen=True)
class _OpenMarker:
    name: Optional[str]
    start: int
    markup_offset: int
    index: int


@dataclass(frozen=True)
class CodeMarkup:
    """
    Parsed markup: the stripped code and the markers found in it.

    Spans always refer to code, never to the original markup text.
    """

    code: str
    markers: Tuple[Marker, ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, markup: str) -> "CodeMarkup":
        return parse_markup(markup)

    @property
    def spans(self) -> Dict[Optional[str], Tuple[TextSpan, ...]]:
        """Marker name (None for anonymous) to the spans recorded under it."""
        grouped: Dict[Optional[str], List[TextSpan]] = {}
        for marker in self.markers:
            grouped.setdefault(marker.name, []).append(marker.span)
        return {name: tuple(spans) for name, spans in grouped.items()}

    @property
    def locator(self) -> MarkerLocator:
        """
        Locator for "the" marker: only valid when the markup has exactly one
        marker group (all anonymous markers, or one name).
        """
        groups = self.spans
        if not groups:
            raise MarkupError("Markup contains no markers")
        if len(groups) > 1:
            names = ", ".join(
                repr(name) if name is not None else "anonymous" for name in groups
            )
            raise MarkupError(
                f"Markup contains {len(groups)} marker groups ({names}); "
                "use all_locators or locator_for(name)"
            )
        ((name, spans),) = groups.items()
        return MarkerLocator(name, spans)

    @property
    def all_locators(self) -> List[TextSpanLocator]:
        """One locator per marker occurrence, in document order."""
        return [TextSpanLocator(marker.span) for marker in self.markers]

    def locator_for(self, name: str) -> MarkerLocator:
        spans = self.spans.get(name)
        if spans is None:
            raise MarkupError(f"Markup has no marker named '{name}'")
        return MarkerLocator(name, spans)


def parse_markup(markup: str) -> CodeMarkup:
    """Strip marker delimiters from markup; MarkupError on unbalanced markers."""
    out: List[str] = []
    length = 0
    stack: List[_OpenMarker] = []
    closed: Dict[int, Marker] = {}
    opened = 0
    i = 0
    n = len(markup)

    while i < n:
        two = markup[i : i + 2]
        if two == OPEN_ANONYMOUS:
            stack.append(_OpenMarker(None, length, i, opened))
            opened += 1
            i += 2
            continue
        if two == OPEN_NAMED:
            match = _MARKER_NAME.match(markup, i + 2)
            if match is None:
                raise MarkupError(f"Expected 'name:' after '{OPEN_NAMED}'", offset=i)
            stack.append(_OpenMarker(match.group(1), length, i, opened))
            opened += 1
            i = match.end()
            continue
        if two in (CLOSE_ANONYMOUS, CLOSE_NAMED):
            if not stack:
                raise MarkupError(f"'{two}' has no matching opening marker", offset=i)
            top = stack.pop()
            if (two == CLOSE_NAMED) != (top.name is not None):
                expected = CLOSE_NAMED if top.name is not None else CLOSE_ANONYMOUS
                raise MarkupError(
                    f"'{two}' closes a marker opened at offset {top.markup_offset}; "
                    f"expected '{expected}'",
                    offset=i,
                )
            closed[top.index] = Marker(top.name, TextSpan(top.start, length))
            i += 2
            continue
        out.append(markup[i])
        length += 1
        i += 1

    if stack:
        top = stack[-1]
        what = f"Marker '{top.name}'" if top.name is not None else f"'{OPEN_ANONYMOUS}'"
        raise MarkupError(f"{what} is never closed", offset=top.markup_offset)

    markers = tuple(closed[index] for index in range(opened))
    logger.debug("Parsed markup: %d marker(s), %d char(s) of code", len(markers), length)
    return CodeMarkup(code="".join(out), markers=markers)
