# Rule interface (abstract base class): the plugin contract every analyzer under test implements.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Rule(ABC):
    """
    Abstract base class for static analysis rules exercised by the test kit.

    Subclasses must define:
    - id: str: rule identifier, also the id of the diagnostics it reports
    - name: str: human-readable rule name
    - run(document, options) -> list[Diagnostic]: analyze one document

    Rules are created fresh for every assertion and must not keep state
    between runs.
    """

    id: str
    name: str

    @abstractmethod
    def run(self, document: Any, options: Any) -> list[Any]:
        """
        Analyze one document and return any diagnostics.

        Args:
            document: The snippet under analysis (path, text, syntax tree).
                      Use document.location(node) for diagnostic locations.
                      Type: Document (from ruletestkit.document).
            options: Analyzer options, mainly the additional files available
                     to the rule. Type: AnalyzerOptions (from
                     ruletestkit.analysis).

        Returns:
            List of Diagnostic objects, empty if nothing was found.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={getattr(self, 'id', '?')!r})"
