# Diagnostic runner: analyze one snippet with one rule and sort the results into buckets.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from ruletestkit.analysis import ANALYZER_EXCEPTION_ID, get_compilation
from ruletestkit.config import FixtureConfig, get_default_config
from ruletestkit.diagnostics.models import Diagnostic, Severity
from ruletestkit.document import Document, create_document
from ruletestkit.errors import UnexpectedCompileError
from ruletestkit.rules.base import Rule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    """
    Outcome of one analysis pass.

    The crash sentinel never appears in rule_diagnostics, so id filters on
    rule_diagnostics cannot match it by accident.
    """

    rule_diagnostics: Tuple[Diagnostic, ...] = field(default_factory=tuple)
    compile_errors: Tuple[Diagnostic, ...] = field(default_factory=tuple)
    crash_diagnostic: Optional[Diagnostic] = None

    @property
    def crashed(self) -> bool:
        return self.crash_diagnostic is not None


class DiagnosticRunner:
    """Runs rules against snippets; holds configuration only, no results."""

    def __init__(self, config: Optional[FixtureConfig] = None) -> None:
        self.config = config if config is not None else get_default_config()

    def create_document(self, code: str) -> Document:
        return create_document(code, path=self.config.document_path)

    def run(self, code: Union[str, Document], rule: Rule) -> RunResult:
        """
        Analyze code with rule.

        Raises UnexpectedCompileError when the snippet has syntax errors and
        the configuration treats them as fatal; the rule is not run then.
        """
        document = code if isinstance(code, Document) else self.create_document(code)
        compilation = get_compilation(document)
        if compilation is None:
            return RunResult()

        compile_errors = tuple(
            d for d in compilation.get_diagnostics() if d.severity == Severity.ERROR
        )
        if compile_errors:
            if self.config.throws_when_input_document_contains_error:
                raise UnexpectedCompileError(compile_errors)
            logger.warning(
                "Input document %s has %d syntax error(s); running %r anyway",
                document.path,
                len(compile_errors),
                rule,
            )

        logger.debug("Running %r on %s", rule, document.path)
        driver = compilation.with_analyzers([rule], self.config.analyzer_options())

        rule_diagnostics = []
        crash_diagnostic: Optional[Diagnostic] = None
        for diagnostic in driver.get_analyzer_diagnostics():
            if diagnostic.id == ANALYZER_EXCEPTION_ID:
                if crash_diagnostic is None:
                    crash_diagnostic = diagnostic
                continue
            rule_diagnostics.append(diagnostic)

        return RunResult(
            rule_diagnostics=tuple(rule_diagnostics),
            compile_errors=compile_errors,
            crash_diagnostic=crash_diagnostic,
        )
