# Rich rendering of failure reports: diagnostics tables exported as plain text.

from __future__ import annotations

import io
from typing import Any, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ruletestkit.diagnostics.models import Diagnostic

# Severity → Rich style
SEVERITY_STYLE = {
    "error": "bold red",
    "warning": "bold yellow",
    "info": "bold blue",
}

DEFAULT_SEVERITY_STYLE = "bold white"

REPORT_WIDTH = 120


def _severity_style(severity: str) -> str:
    return SEVERITY_STYLE.get(severity.lower(), DEFAULT_SEVERITY_STYLE)


def _render(*renderables: Any) -> str:
    """Render to a plain-text string; failure messages must not carry ANSI codes."""
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=REPORT_WIDTH,
        color_system=None,
        force_terminal=False,
        highlight=False,
    )
    for renderable in renderables:
        console.print(renderable)
    return buffer.getvalue().rstrip()


def _describe_locator(locator: Any) -> str:
    describe = getattr(locator, "describe", None)
    if callable(describe):
        return describe()
    return str(locator)


def diagnostics_table(diagnostics: Sequence[Diagnostic]) -> Table:
    """Build a table of diagnostics sorted by position."""
    table = Table(
        show_header=True,
        header_style="bold magenta",
        box=box.SIMPLE,
        padding=(0, 1),
        expand=False,
    )
    table.add_column("Line", justify="right", style="dim", width=5)
    table.add_column("Col", justify="right", style="dim", width=4)
    table.add_column("Span", style="dim", width=12)
    table.add_column("Severity", width=8)
    table.add_column("Id", width=22)
    table.add_column("Message", style="white")

    ordered = sorted(
        diagnostics,
        key=lambda d: (d.location.line, d.location.column, d.id),
    )
    for d in ordered:
        loc = d.location
        table.add_row(
            str(loc.line),
            str(loc.column),
            Text(str(loc.span)),
            Text(d.severity.value.upper(), style=_severity_style(d.severity.value)),
            Text(f"[{d.id}]", style="dim"),
            Text(d.message),
        )
    return table


def render_diagnostics(title: str, diagnostics: Sequence[Diagnostic]) -> str:
    """Render a titled list of diagnostics, with snippets where available."""
    parts: list[Any] = [Text(f"{title}:", style="bold")]
    if diagnostics:
        parts.append(diagnostics_table(diagnostics))
        for d in diagnostics:
            if d.location.snippet:
                parts.append(Text(f"  |-- [{d.id}] {d.location.snippet.strip()}"))
    else:
        parts.append(Text("  (none)"))
    return _render(*parts)


def render_analyzer_crash(diagnostic: Diagnostic) -> str:
    """Render the report for a rule that raised during analysis."""
    return _render(
        Panel(
            Text(diagnostic.message),
            title=Text(f"Analyzer crashed [{diagnostic.id}]"),
            border_style="red",
            box=box.ROUNDED,
        )
    )


def render_diagnostic_not_found(
    diagnostic_id: str,
    misses: Sequence[Tuple[Any, Sequence[Diagnostic]]],
) -> str:
    """
    Render the report for an expected diagnostic missing at one or more
    locations, listing what was reported at each location instead.
    """
    parts: list[Any] = [
        Text(
            f"Expected diagnostic [{diagnostic_id}] was not found at "
            f"{len(misses)} location(s):",
            style="bold",
        )
    ]
    for locator, found in misses:
        parts.append(Text(f"- {_describe_locator(locator)}"))
        if found:
            parts.append(Text("  Reported there instead:"))
            parts.append(diagnostics_table(found))
        else:
            parts.append(Text("  No diagnostics were reported there."))
    return _render(*parts)
