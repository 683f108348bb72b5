"""Tests for the compilation and analyzer driver boundary."""

import logging
from pathlib import Path

from sample_rules import CrashingRule, UnsafeFunctionsRule, WrongReturnRule

from ruletestkit.analysis import (
    ANALYZER_EXCEPTION_ID,
    SYNTAX_ERROR_ID,
    AdditionalFile,
    AnalyzerOptions,
    get_compilation,
)
from ruletestkit.diagnostics.models import Severity
from ruletestkit.document import create_document


def test_get_compilation_for_c_sources():
    assert get_compilation(create_document("int x;", path="a.c")) is not None
    assert get_compilation(create_document("int x;", path="include/a.H")) is not None


def test_get_compilation_absent_for_non_c_documents():
    assert get_compilation(create_document("int x;", path="notes.txt")) is None


def test_compilation_diagnostics_empty_for_valid_code():
    compilation = get_compilation(create_document("int main(void) { return 0; }"))
    assert compilation.get_diagnostics() == []


def test_compilation_diagnostics_report_syntax_errors():
    compilation = get_compilation(create_document("int main(void) { return 0; }\nint x = ;\n"))
    diagnostics = compilation.get_diagnostics()
    assert diagnostics
    assert all(d.id == SYNTAX_ERROR_ID for d in diagnostics)
    assert all(d.severity is Severity.ERROR for d in diagnostics)
    assert all(d.message.startswith("Syntax error") for d in diagnostics)


def test_driver_runs_rule():
    doc = create_document("void f(char *b) { gets(b); }")
    driver = get_compilation(doc).with_analyzers([UnsafeFunctionsRule()])
    diagnostics = driver.get_analyzer_diagnostics()
    assert [d.id for d in diagnostics] == ["unsafe-functions"]
    assert diagnostics[0].location.snippet == "gets(b)"


def test_driver_turns_crash_into_sentinel(caplog):
    doc = create_document("void f(void) { abort(); }")
    driver = get_compilation(doc).with_analyzers([CrashingRule()])
    with caplog.at_level(logging.ERROR, logger="ruletestkit.analysis"):
        diagnostics = driver.get_analyzer_diagnostics()
    assert len(diagnostics) == 1
    sentinel = diagnostics[0]
    assert sentinel.id == ANALYZER_EXCEPTION_ID
    assert "crashing" in sentinel.message
    assert "RuntimeError: cannot handle abort()" in sentinel.message
    assert "Rule crashing failed" in caplog.text


def test_driver_keeps_other_rules_after_crash():
    doc = create_document("void f(char *b) { gets(b); abort(); }")
    driver = get_compilation(doc).with_analyzers([CrashingRule(), UnsafeFunctionsRule()])
    ids = [d.id for d in driver.get_analyzer_diagnostics()]
    assert ids == [ANALYZER_EXCEPTION_ID, "unsafe-functions"]


def test_driver_rejects_non_diagnostic_results():
    doc = create_document("int x;")
    diagnostics = get_compilation(doc).with_analyzers([WrongReturnRule()]).get_analyzer_diagnostics()
    assert [d.id for d in diagnostics] == [ANALYZER_EXCEPTION_ID]
    assert "returned str instead of Diagnostic" in diagnostics[0].message


def test_get_additional_file_by_path_or_name():
    options = AnalyzerOptions(
        additional_files=(
            AdditionalFile(path=Path("config/banned.txt"), text="gets\n"),
            AdditionalFile(path=Path("other.ini"), text=""),
        )
    )
    assert options.get_additional_file("config/banned.txt").text == "gets\n"
    assert options.get_additional_file("banned.txt").path == Path("config/banned.txt")
    assert options.get_additional_file("missing.txt") is None
    assert AnalyzerOptions().get_additional_file("banned.txt") is None
