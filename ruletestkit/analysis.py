"""
Analysis front end: compilation of a document and the driver that runs rules over it.

This is the boundary the assertion engine talks to:

- get_compilation(document) -> Compilation | None
- Compilation.get_diagnostics() -> syntax errors of the snippet
- Compilation.with_analyzers(rules, options) -> AnalyzerDriver
- AnalyzerDriver.get_analyzer_diagnostics() -> rule diagnostics, where a rule
  that raises is reported as one diagnostic with ANALYZER_EXCEPTION_ID
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

from ruletestkit.diagnostics.models import Diagnostic, Severity, TextSpan
from ruletestkit.document import Document, get_source_span
from ruletestkit.parser import collect_syntax_errors
from ruletestkit.rules.base import Rule

logger = logging.getLogger(__name__)

ANALYZER_EXCEPTION_ID = "analyzer-exception"
SYNTAX_ERROR_ID = "syntax-error"

COMPILABLE_SUFFIXES = frozenset({".c", ".h"})


class AdditionalFile(BaseModel):
    """A non-source file made available to rules, e.g. a rule config file."""

    path: Path
    text: str

    model_config = {"frozen": True}

    @property
    def name(self) -> str:
        return self.path.name


class AnalyzerOptions(BaseModel):
    """Options passed to every rule run."""

    additional_files: Tuple[AdditionalFile, ...] = ()

    model_config = {"frozen": True}

    def get_additional_file(self, name: Union[str, Path]) -> Optional[AdditionalFile]:
        """Look up an additional file by full path, or by file name."""
        wanted = Path(name)
        for f in self.additional_files:
            if f.path == wanted:
                return f
        for f in self.additional_files:
            if f.name == wanted.name:
                return f
        return None


def _syntax_error_diagnostic(document: Document, node) -> Diagnostic:
    if node.is_missing:
        message = f"Syntax error: missing '{node.type}'"
    else:
        text = get_source_span(document, node).strip()
        first_line = text.splitlines()[0] if text else ""
        message = f"Syntax error near '{first_line}'" if first_line else "Syntax error"
    return Diagnostic(
        id=SYNTAX_ERROR_ID,
        message=message,
        location=document.location(node),
        severity=Severity.ERROR,
    )


class AnalyzerDriver:
    """Runs a set of rules over one compiled document."""

    def __init__(
        self,
        compilation: "Compilation",
        rules: Sequence[Rule],
        options: Optional[AnalyzerOptions] = None,
    ) -> None:
        self.compilation = compilation
        self.rules = tuple(rules)
        self.options = options if options is not None else AnalyzerOptions()

    def _crash_diagnostic(self, message: str) -> Diagnostic:
        document = self.compilation.document
        return Diagnostic(
            id=ANALYZER_EXCEPTION_ID,
            message=message,
            location=document.location_for_span(TextSpan(0, 0)),
            severity=Severity.WARNING,
        )

    def get_analyzer_diagnostics(self) -> List[Diagnostic]:
        """
        Run every rule once and return the diagnostics they report.

        A rule that raises, or returns anything but Diagnostic objects,
        contributes a single ANALYZER_EXCEPTION_ID diagnostic instead.
        """
        document = self.compilation.document
        diagnostics: List[Diagnostic] = []
        for rule in self.rules:
            rule_id = getattr(rule, "id", type(rule).__name__)
            try:
                reported = list(rule.run(document, self.options))
            except Exception as exc:
                logger.exception("Rule %s failed on %s", rule_id, document.path)
                diagnostics.append(
                    self._crash_diagnostic(
                        f"Rule '{rule_id}' ({type(rule).__name__}) threw an exception: "
                        f"{type(exc).__name__}: {exc}",
                    )
                )
                continue

            invalid = [d for d in reported if not isinstance(d, Diagnostic)]
            if invalid:
                logger.error(
                    "Rule %s returned %d non-Diagnostic value(s)", rule_id, len(invalid)
                )
                diagnostics.append(
                    self._crash_diagnostic(
                        f"Rule '{rule_id}' ({type(rule).__name__}) returned "
                        f"{type(invalid[0]).__name__} instead of Diagnostic",
                    )
                )
                continue

            logger.debug(
                "Rule %s reported %d diagnostic(s) on %s",
                rule_id,
                len(reported),
                document.path,
            )
            diagnostics.extend(reported)
        return diagnostics


class Compilation:
    """A document that the front end was able to compile."""

    def __init__(self, document: Document) -> None:
        self.document = document

    def get_diagnostics(self) -> List[Diagnostic]:
        """Front-end diagnostics of the snippet itself (syntax errors)."""
        return [
            _syntax_error_diagnostic(self.document, node)
            for node in collect_syntax_errors(self.document.tree)
        ]

    def with_analyzers(
        self,
        rules: Iterable[Rule],
        options: Optional[AnalyzerOptions] = None,
    ) -> AnalyzerDriver:
        return AnalyzerDriver(self, list(rules), options)


def get_compilation(document: Document) -> Optional[Compilation]:
    """
    Return the compilation for a document, or None if the document is not a
    C source or header file and cannot be compiled.
    """
    if document.path.suffix.lower() not in COMPILABLE_SUFFIXES:
        logger.debug("No compilation for %s: not a C source file", document.path)
        return None
    return Compilation(document)
