# In-memory document: source text, parse tree, and the offset/line model that locations use.
# Tree-sitter reports byte offsets; every span exposed here is in characters of Document.text.

import bisect
import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple, Union

from tree_sitter import Node as TSNode
from tree_sitter import Parser, Tree

from ruletestkit.diagnostics.models import Location, TextSpan
from ruletestkit.errors import LocatorError
from ruletestkit.parser import create_parser, parse_bytes

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT_PATH = Path("test.c")

_LINE_BREAK = re.compile(r"\r\n|\n|\r")


def compute_line_spans(text: str) -> List[TextSpan]:
    """
    Return the span of every line of text, terminators excluded.

    "\\r\\n", "\\n" and "\\r" each end a line. Text ending with a terminator
    has a final empty line, so "a\\n" has two lines.
    """
    spans: List[TextSpan] = []
    start = 0
    for match in _LINE_BREAK.finditer(text):
        spans.append(TextSpan(start, match.start()))
        start = match.end()
    spans.append(TextSpan(start, len(text)))
    return spans


def line_span_in_code(code: str, line_number: int) -> TextSpan:
    """Span of the 1-based line_number in code; LocatorError if out of range."""
    return _pick_line(compute_line_spans(code), line_number)


def _pick_line(spans: List[TextSpan], line_number: int) -> TextSpan:
    if line_number < 1 or line_number > len(spans):
        raise LocatorError(
            f"Line number {line_number} is out of range; code has {len(spans)} line(s)"
        )
    return spans[line_number - 1]


class Document:
    """
    A single C source snippet ready for analysis: path, text, UTF-8 source
    bytes and syntax tree.

    Rules receive a Document and use document.location(node) to build the
    Location of a diagnostic.
    """

    def __init__(
        self,
        path: Path,
        text: str,
        tree: Tree,
        *,
        has_parse_errors: bool = False,
    ) -> None:
        self.path = path
        self.text = text
        self.source = text.encode("utf-8")
        self.tree = tree
        self.has_parse_errors = has_parse_errors
        self._line_spans = compute_line_spans(text)
        self._line_starts = [span.start for span in self._line_spans]

    @property
    def root_node(self) -> TSNode:
        """Convenience access to the syntax tree root."""
        return self.tree.root_node

    @property
    def line_count(self) -> int:
        return len(self._line_spans)

    def line_span(self, line_number: int) -> TextSpan:
        """Span of the 1-based line, terminator excluded."""
        return _pick_line(self._line_spans, line_number)

    def line_col(self, offset: int) -> Tuple[int, int]:
        """1-based (line, column) of a character offset."""
        index = bisect.bisect_right(self._line_starts, offset) - 1
        index = max(index, 0)
        return index + 1, offset - self._line_starts[index] + 1

    def char_offset(self, byte_offset: int) -> int:
        """Convert a tree-sitter byte offset into a character offset of text."""
        return len(self.source[:byte_offset].decode("utf-8", errors="replace"))

    def node_span(self, node: TSNode) -> TextSpan:
        return TextSpan(self.char_offset(node.start_byte), self.char_offset(node.end_byte))

    def location_for_span(self, span: TextSpan, snippet: Optional[str] = None) -> Location:
        line, column = self.line_col(span.start)
        end_line, end_column = self.line_col(span.end)
        if snippet is None:
            snippet = self.text[span.start : span.end]
        return Location(
            path=self.path,
            span=span,
            line=line,
            column=column,
            end_line=end_line,
            end_column=end_column,
            snippet=snippet,
        )

    def location(self, node: TSNode) -> Location:
        """Location covering a syntax node."""
        return self.location_for_span(self.node_span(node))

    def __repr__(self) -> str:
        return f"Document(path={str(self.path)!r}, lines={self.line_count})"


def get_source_span(document: Document, node: TSNode) -> str:
    """
    Return the source text of a node.

    Decodes with errors="replace" so bad UTF-8 does not crash.
    """
    return document.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def create_document(
    code: str,
    path: Union[str, Path] = DEFAULT_DOCUMENT_PATH,
    parser: Optional[Parser] = None,
) -> Document:
    """
    Parse code into a Document.

    Malformed C still yields a Document; has_parse_errors is set and the
    syntax errors are reported by the compilation, see ruletestkit.analysis.
    """
    if parser is None:
        parser = create_parser()
    path = Path(path)
    tree = parse_bytes(code.encode("utf-8"), parser=parser)
    has_errors = tree.root_node.has_error
    document = Document(path=path, text=code, tree=tree, has_parse_errors=has_errors)
    logger.debug(
        "Created document %s: %d line(s)%s",
        path,
        document.line_count,
        " (with parse errors)" if has_errors else "",
    )
    return document
