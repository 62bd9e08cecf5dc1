"""Tree-sitter parsing for JavaScript, JSX, TypeScript and TSX sources.

Besides producing syntax trees, this module owns the *full serialization* of a
subtree that the classifier and enricher match against. Serialization is a
compact JSON document::

    {"type":"call_expression","children":[{"type":"identifier","name":"useState"}, ...]}

Identifier-like leaves carry ``name``, other leaves carry ``value`` (their
source text), binary expressions carry their ``operator``.
"""

import json
import re
import threading
from pathlib import Path
from typing import Any, Iterator, List, Optional, Union

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Parser

from ..types import ParseResult, SourceFile
from ..utils.logger import get_logger


LANGUAGES = {
    "javascript": Language(tree_sitter_javascript.language()),
    "typescript": Language(tree_sitter_typescript.language_typescript()),
    "tsx": Language(tree_sitter_typescript.language_tsx()),
}

EXTENSION_LANGUAGES = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
}

# Tests, stories, build output and bundles are never worth a parse
SKIP_PATTERNS = [
    re.compile(pattern)
    for pattern in (
        r"node_modules",
        r"\.min\.",
        r"\.test\.",
        r"\.spec\.",
        r"build/",
        r"dist/",
        r"public/",
        r"\.stories\.",
    )
]


def node_text(node) -> str:
    """Source text of a node."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def walk(node) -> Iterator[Any]:
    """Pre-order traversal over the named nodes of a subtree."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.named_children))


def _json_string(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def serialize_node(node) -> str:
    """Full textual serialization of a subtree.

    Built with an explicit stack so arbitrarily deep trees (long operator
    chains, deeply nested JSX) serialize without recursion.
    """
    if node is None:
        return ""

    parts: List[str] = []
    # Pending items are either nodes or literal JSON text
    stack: List[Any] = [node]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue

        parts.append('{"type":' + _json_string(item.type))
        children = item.named_children
        if not children:
            key = "name" if item.type.endswith("identifier") else "value"
            parts.append(f',"{key}":{_json_string(node_text(item))}}}')
            continue

        if item.type == "binary_expression":
            operator = node_text(item.child_by_field_name("operator"))
            parts.append(',"operator":' + _json_string(operator))
        parts.append(',"children":[')

        stack.append("]}")
        for index in range(len(children) - 1, -1, -1):
            stack.append(children[index])
            if index:
                stack.append(",")

    return "".join(parts)


def language_for_path(path: Union[str, Path]) -> Optional[str]:
    return EXTENSION_LANGUAGES.get(Path(path).suffix.lower())


class TreeParser:
    """Error-tolerant parser for JS/TS source files.

    tree-sitter ``Parser`` objects are not shared between threads, so each
    worker thread lazily builds its own set.
    """

    def __init__(self):
        self.logger = get_logger("tree_parser")
        self._local = threading.local()

    def _parser(self, language: str) -> Parser:
        parsers = getattr(self._local, "parsers", None)
        if parsers is None:
            parsers = self._local.parsers = {}
        if language not in parsers:
            parsers[language] = Parser(LANGUAGES[language])
        return parsers[language]

    def should_skip(self, path: str) -> bool:
        """Check the fast-path exclusion patterns against a relative path."""
        normalized = path.replace("\\", "/")
        return any(pattern.search(normalized) for pattern in SKIP_PATTERNS)

    def parse_file(self, source_file: SourceFile) -> ParseResult:
        """Parse a scanned file. Never raises."""
        if self.should_skip(source_file.path):
            self.logger.debug(f"Skipped by pattern: {source_file.path}")
            return ParseResult(skipped=True)

        language = language_for_path(source_file.path)
        if language is None:
            return ParseResult(skipped=True)

        try:
            source = Path(source_file.absolute_path).read_bytes()
        except OSError as e:
            self.logger.warning(f"Could not read {source_file.path}: {e}")
            return ParseResult(language=language, error=str(e))

        result = self.parse_source(source, language)
        if result.error:
            self.logger.warning(f"Parsing error in {source_file.path}: {result.error}")
        elif result.tree.root_node.has_error:
            self.logger.debug(f"Recovered from syntax errors in {source_file.path}")
        return result

    def parse_source(self, source: Union[str, bytes], language: str = "javascript") -> ParseResult:
        """Parse source text with the grammar for ``language``."""
        if language not in LANGUAGES:
            return ParseResult(language=language, error=f"Unsupported language: {language}")

        if isinstance(source, str):
            source = source.encode("utf-8")

        try:
            tree = self._parser(language).parse(source)
        except Exception as e:
            return ParseResult(language=language, error=str(e))

        if tree is None:
            return ParseResult(language=language, error="Parser returned no tree")
        return ParseResult(tree=tree, language=language)
