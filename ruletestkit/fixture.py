"""
Assertion engine: a base class for pytest test classes that check what a rule reports.

Typical usage:
    class TestUnsafeFunctions(AnalyzerTestFixture):
        def create_rule(self):
            return UnsafeFunctionsRule()

        def test_gets(self):
            self.expect_diagnostic_at_marker(
                "void f(char *b) { [|gets(b)|]; }", "unsafe-functions"
            )

Every expect_* call is one run-filter-assert transaction: it builds a fresh
document and a fresh rule, runs the analysis and either returns or raises.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ruletestkit.analysis import AdditionalFile
from ruletestkit.config import FixtureConfig, normalize_additional_files
from ruletestkit.diagnostics.models import Diagnostic, TextSpan
from ruletestkit.document import DEFAULT_DOCUMENT_PATH, Document
from ruletestkit.errors import (
    AnalyzerCrashed,
    DiagnosticNotFound,
    LocatorError,
    MarkupError,
    UnexpectedDiagnostic,
)
from ruletestkit.locators import Locator, LineLocator, TextSpanLocator, at_line
from ruletestkit.markup import CodeMarkup, parse_markup
from ruletestkit.rules.base import Rule
from ruletestkit.runner import DiagnosticRunner, RunResult

logger = logging.getLogger(__name__)

CodeInput = Union[str, Document]
LocatorInput = Union[Locator, Iterable[Locator], None]


def _as_ids(diagnostic_ids: Union[str, Sequence[str]]) -> Tuple[str, ...]:
    if isinstance(diagnostic_ids, str):
        return (diagnostic_ids,)
    return tuple(diagnostic_ids)


def _parse_with_markers(markup: str) -> CodeMarkup:
    code_markup = parse_markup(markup)
    if not code_markup.markers:
        raise MarkupError("Markup contains no markers")
    return code_markup


def _as_locators(locator: LocatorInput) -> Optional[List[Locator]]:
    if locator is None:
        return None
    if isinstance(locator, Locator):
        return [locator]
    return list(locator)


class AnalyzerTestFixture(ABC):
    """
    Base class for rule tests.

    Subclasses implement create_rule() and may override:
    - additional_files: AdditionalFile objects or (path, text) pairs the rule
      can read through options.get_additional_file()
    - throws_when_input_document_contains_error: fail on snippets that do
      not parse (default True)
    - document_path: path given to the analyzed document (default test.c)
    """

    additional_files: Sequence[Union[AdditionalFile, Tuple[Union[str, Path], str]]] = ()
    throws_when_input_document_contains_error: bool = True
    document_path: Union[str, Path] = DEFAULT_DOCUMENT_PATH

    @abstractmethod
    def create_rule(self) -> Rule:
        """Return a new instance of the rule under test."""

    def get_config(self) -> FixtureConfig:
        return FixtureConfig(
            additional_files=normalize_additional_files(self.additional_files),
            throws_when_input_document_contains_error=self.throws_when_input_document_contains_error,
            document_path=Path(self.document_path),
        )

    def create_runner(self) -> DiagnosticRunner:
        return DiagnosticRunner(self.get_config())

    def create_document(self, code: str) -> Document:
        """Build a document with this fixture's configuration, e.g. to reuse across calls."""
        return self.create_runner().create_document(code)

    def run_analysis(self, code: CodeInput) -> RunResult:
        """Run a fresh rule over code; exposed for tests that inspect results directly."""
        return self.create_runner().run(code, self.create_rule())

    def _get_diagnostics(self, code: CodeInput) -> Tuple[Diagnostic, ...]:
        result = self.run_analysis(code)
        if result.crash_diagnostic is not None:
            raise AnalyzerCrashed(result.crash_diagnostic)
        return result.rule_diagnostics

    # -- exceptions -------------------------------------------------------

    def expect_no_exception(self, code: CodeInput) -> None:
        """Fail with AnalyzerCrashed if the rule raises while analyzing code."""
        self._get_diagnostics(code)

    # -- forbidden diagnostics --------------------------------------------

    def expect_no_diagnostic(
        self,
        code: CodeInput,
        diagnostic_ids: Union[str, Sequence[str]],
        locator: LocatorInput = None,
    ) -> None:
        """
        Fail with UnexpectedDiagnostic if any diagnostic with one of the ids is
        reported, at any severity.

        With a locator (or a list of locators) only diagnostics matching at
        least one of them are considered.
        """
        ids = _as_ids(diagnostic_ids)
        locators = _as_locators(locator)
        if locators is not None and not locators:
            raise LocatorError("expect_no_diagnostic got an empty locator list")
        diagnostics = self._get_diagnostics(code)
        if locators is not None:
            diagnostics = tuple(
                d for d in diagnostics if any(loc.matches(d.location) for loc in locators)
            )
        unexpected = [d for d in diagnostics if d.id in ids]
        if unexpected:
            raise UnexpectedDiagnostic(unexpected)

    def expect_no_diagnostic_at_line(
        self,
        code: CodeInput,
        diagnostic_id: Union[str, Sequence[str]],
        line_number: int,
    ) -> None:
        self.expect_no_diagnostic(code, diagnostic_id, at_line(code, line_number))

    def expect_no_diagnostic_at_marker(self, markup: str, diagnostic_id: Union[str, Sequence[str]]) -> None:
        code_markup = parse_markup(markup)
        self.expect_no_diagnostic(code_markup.code, diagnostic_id, code_markup.locator)

    def expect_no_diagnostic_at_all_markers(self, markup: str, diagnostic_id: Union[str, Sequence[str]]) -> None:
        """The id must be absent at every marker of the markup."""
        code_markup = _parse_with_markers(markup)
        self.expect_no_diagnostic(code_markup.code, diagnostic_id, code_markup.all_locators)

    # -- expected diagnostics ---------------------------------------------

    def expect_diagnostic(
        self,
        code: CodeInput,
        diagnostic_id: str,
        locator: Union[Locator, Iterable[Locator]],
    ) -> None:
        """
        Fail with DiagnosticNotFound unless diagnostic_id is reported at the
        locator. Given a list of locators, the id must be reported at every
        one of them; all locations lacking it are listed in the failure.
        """
        locators = _as_locators(locator)
        if not locators:
            raise LocatorError("expect_diagnostic needs at least one locator")
        diagnostics = self._get_diagnostics(code)
        misses = []
        for loc in locators:
            reported = [d for d in diagnostics if loc.matches(d.location)]
            if not any(d.id == diagnostic_id for d in reported):
                logger.debug(
                    "No %s at %s; %d other diagnostic(s) there",
                    diagnostic_id,
                    loc.describe(),
                    len(reported),
                )
                misses.append((loc, reported))
        if misses:
            raise DiagnosticNotFound(diagnostic_id, misses)

    def expect_diagnostic_at_line(self, code: CodeInput, diagnostic_id: str, line_number: int) -> None:
        locator: LineLocator = at_line(code, line_number)
        self.expect_diagnostic(code, diagnostic_id, locator)

    def expect_diagnostic_at_span(
        self,
        code: CodeInput,
        diagnostic_id: str,
        span: Union[TextSpan, Tuple[int, int]],
    ) -> None:
        if not isinstance(span, TextSpan):
            span = TextSpan(*span)
        self.expect_diagnostic(code, diagnostic_id, TextSpanLocator(span))

    def expect_diagnostic_at_marker(self, markup: str, diagnostic_id: str) -> None:
        code_markup = parse_markup(markup)
        self.expect_diagnostic(code_markup.code, diagnostic_id, code_markup.locator)

    def expect_diagnostic_at_all_markers(self, markup: str, diagnostic_id: str) -> None:
        code_markup = _parse_with_markers(markup)
        self.expect_diagnostic(code_markup.code, diagnostic_id, code_markup.all_locators)
