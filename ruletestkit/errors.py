# Error taxonomy: assertion failures raised out of fixture calls and test-input errors.

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple

from ruletestkit.diagnostics.models import Diagnostic
from ruletestkit.reporting.console import (
    render_analyzer_crash,
    render_diagnostic_not_found,
    render_diagnostics,
)


class RuleTestKitError(Exception):
    """Base class for every error raised by ruletestkit."""


class DiagnosticAssertionError(RuleTestKitError, AssertionError):
    """
    Base class for assertion failures.

    Subclasses AssertionError so test runners report these as failures
    rather than errors.
    """


class AnalyzerCrashed(DiagnosticAssertionError):
    """The rule under test raised during analysis."""

    def __init__(self, diagnostic: Diagnostic) -> None:
        self.diagnostic = diagnostic
        super().__init__(render_analyzer_crash(diagnostic))


class UnexpectedCompileError(DiagnosticAssertionError):
    """The input snippet does not parse and the fixture treats that as fatal."""

    def __init__(self, errors: Sequence[Diagnostic]) -> None:
        self.errors = tuple(errors)
        super().__init__(
            render_diagnostics(
                f"Input document contains {len(self.errors)} syntax error(s)",
                self.errors,
            )
        )


class UnexpectedDiagnostic(DiagnosticAssertionError):
    """A forbidden diagnostic id was reported."""

    def __init__(self, diagnostics: Sequence[Diagnostic]) -> None:
        self.diagnostics = tuple(diagnostics)
        super().__init__(
            render_diagnostics(
                f"Found {len(self.diagnostics)} unexpected diagnostic(s)",
                self.diagnostics,
            )
        )


class DiagnosticNotFound(DiagnosticAssertionError):
    """
    An expected diagnostic id was absent at one or more locations.

    misses holds one (locator, diagnostics reported at that locator) pair per
    location that lacked the expected id.
    """

    def __init__(
        self,
        diagnostic_id: str,
        misses: Sequence[Tuple[Any, Sequence[Diagnostic]]],
    ) -> None:
        self.diagnostic_id = diagnostic_id
        self.misses = tuple((locator, tuple(found)) for locator, found in misses)
        super().__init__(render_diagnostic_not_found(diagnostic_id, self.misses))

    @property
    def locator(self) -> Optional[Any]:
        return self.misses[0][0] if self.misses else None

    @property
    def reported(self) -> Tuple[Diagnostic, ...]:
        return self.misses[0][1] if self.misses else ()


class MarkupError(RuleTestKitError, ValueError):
    """Malformed marker syntax in test markup."""

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class LocatorError(RuleTestKitError, ValueError):
    """A locator could not be built, e.g. a line number out of range."""
