"""
Fixture configuration: what the runner needs besides the rule itself.

Every option has a default so a fixture only sets what its rule needs.
Nothing here reads files or the environment; fixtures build their config
from class attributes (see AnalyzerTestFixture.get_config).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Sequence, Tuple

from ruletestkit.analysis import AdditionalFile, AnalyzerOptions
from ruletestkit.document import DEFAULT_DOCUMENT_PATH


@dataclass(frozen=True)
class FixtureConfig:
    """
    Runner configuration.

    throws_when_input_document_contains_error guards against tests that pass
    only because the snippet does not parse.
    """

    additional_files: Tuple[AdditionalFile, ...] = field(default_factory=tuple)
    throws_when_input_document_contains_error: bool = True
    document_path: Path = DEFAULT_DOCUMENT_PATH

    def analyzer_options(self) -> AnalyzerOptions:
        return AnalyzerOptions(additional_files=self.additional_files)

    def with_overrides(self, **changes: Any) -> "FixtureConfig":
        """Return a copy with some options replaced."""
        if "additional_files" in changes:
            changes["additional_files"] = normalize_additional_files(
                changes["additional_files"]
            )
        if "document_path" in changes:
            changes["document_path"] = Path(changes["document_path"])
        return replace(self, **changes)


def normalize_additional_files(
    files: Sequence[AdditionalFile | Tuple[str | Path, str]] | None,
) -> Tuple[AdditionalFile, ...]:
    """Accept AdditionalFile objects or (path, text) pairs."""
    if not files:
        return ()
    normalized = []
    for f in files:
        if isinstance(f, AdditionalFile):
            normalized.append(f)
        else:
            path, text = f
            normalized.append(AdditionalFile(path=Path(path), text=text))
    return tuple(normalized)


def get_default_config() -> FixtureConfig:
    """Default configuration: no additional files, syntax errors are fatal, test.c."""
    return FixtureConfig()
