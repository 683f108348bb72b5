# Tree-sitter front end: parse C snippets into syntax trees and locate syntax errors.

import logging
from typing import Iterator, List, Optional

import tree_sitter
from tree_sitter import Language
from tree_sitter import Node as TSNode
from tree_sitter_c import language as _c_language_capsule

logger = logging.getLogger(__name__)

_C_LANGUAGE = Language(_c_language_capsule())


def get_c_language() -> Language:
    """Return the Tree-sitter Language object for C."""
    return _C_LANGUAGE


def create_parser() -> tree_sitter.Parser:
    """Create and return a Tree-sitter Parser configured for C."""
    return tree_sitter.Parser(_C_LANGUAGE)


def parse_bytes(
    source: bytes,
    parser: Optional[tree_sitter.Parser] = None,
) -> tree_sitter.Tree:
    """
    Parse C source bytes into a syntax tree.

    Tree-sitter always produces a tree; malformed input shows up as ERROR
    and MISSING nodes, see collect_syntax_errors().
    """
    if parser is None:
        parser = create_parser()
    tree = parser.parse(source)
    if tree.root_node.has_error:
        logger.warning(
            "Parse completed with errors: root=%s, %d bytes",
            tree.root_node.type,
            len(source),
        )
    else:
        logger.debug(
            "Parse succeeded: root=%s, %d bytes",
            tree.root_node.type,
            len(source),
        )
    return tree


def _walk_errors(node: TSNode) -> Iterator[TSNode]:
    if node.is_error or node.type == "ERROR":
        yield node
        return
    if node.is_missing:
        yield node
    if not node.has_error:
        return
    for child in node.children:
        yield from _walk_errors(child)


def collect_syntax_errors(tree: tree_sitter.Tree) -> List[TSNode]:
    """
    Return every ERROR node (without descending into it) and every MISSING
    node of the tree, in document order.
    """
    return list(_walk_errors(tree.root_node))
