import re
from typing import List, Optional

from ..parser.tree_parser import node_text, walk
from ..types import ComponentUsage, HookUsage, ImportRecord, SourceFile
from ..utils.logger import get_logger
from .import_resolver import ImportResolver


HOOK_CALL_PATTERN = re.compile(r"^use[A-Z]")
CAPITALIZED_TAG = re.compile(r"^[A-Z]")

DEFAULT_IMPORT = "default"


def _string_value(node) -> str:
    """Contents of a string literal node without its quotes."""
    fragments = [node_text(child) for child in node.named_children if child.type == "string_fragment"]
    if fragments:
        return "".join(fragments)
    return node_text(node).strip("'\"`")


def jsx_tag_name(node) -> Optional[str]:
    """Plain identifier tag of a JSX element; member and namespaced tags are ignored."""
    if node.type == "jsx_element":
        opening = node.child_by_field_name("open_tag")
        if opening is None:
            return None
        name_node = opening.child_by_field_name("name")
    elif node.type == "jsx_self_closing_element":
        name_node = node.child_by_field_name("name")
    else:
        return None

    if name_node is None or name_node.type != "identifier":
        return None
    return node_text(name_node)


class RelationshipExtractor:
    """Extracts import, component usage and hook call facts from one tree."""

    def __init__(self, resolver: Optional[ImportResolver] = None):
        self.resolver = resolver or ImportResolver()
        self.logger = get_logger("extractor")

    def extract_imports(self, root, source_file: SourceFile) -> List[ImportRecord]:
        imports: List[ImportRecord] = []
        for node in walk(root):
            if node.type != "import_statement":
                continue
            try:
                imports.extend(self._import_records(node, source_file))
            except Exception as e:
                self.logger.warning(f"Import parsing error in {source_file.path}: {e}")
        return imports

    def _import_records(self, statement, source_file: SourceFile) -> List[ImportRecord]:
        source_node = statement.child_by_field_name("source")
        if source_node is None:
            return []

        source = _string_value(source_node)
        resolved = self.resolver.resolve(source, source_file.absolute_path)

        def record(local: str, imported: str) -> ImportRecord:
            return ImportRecord(name=local, imported=imported, source=source, resolved_path=resolved)

        records = []
        for clause in statement.named_children:
            if clause.type != "import_clause":
                continue
            for binding in clause.named_children:
                if binding.type == "identifier":
                    records.append(record(node_text(binding), DEFAULT_IMPORT))
                elif binding.type == "namespace_import":
                    alias = next((c for c in binding.named_children if c.type == "identifier"), None)
                    if alias is not None:
                        records.append(record(node_text(alias), DEFAULT_IMPORT))
                elif binding.type == "named_imports":
                    for spec in binding.named_children:
                        if spec.type != "import_specifier":
                            continue
                        imported = node_text(spec.child_by_field_name("name"))
                        alias = spec.child_by_field_name("alias")
                        local = node_text(alias) if alias is not None else imported
                        records.append(record(local, imported))
        return records

    def extract_usages(self, root, source_file: SourceFile) -> List[ComponentUsage]:
        usages = []
        for node in walk(root):
            tag = jsx_tag_name(node)
            if tag and CAPITALIZED_TAG.match(tag):
                usages.append(ComponentUsage(component=tag, file=source_file.path))
        return usages

    def extract_hook_calls(self, root, source_file: SourceFile) -> List[HookUsage]:
        hook_usages = []
        for node in walk(root):
            if node.type != "call_expression":
                continue
            callee = node.child_by_field_name("function")
            if callee is None or callee.type != "identifier":
                continue
            name = node_text(callee)
            if HOOK_CALL_PATTERN.match(name):
                hook_usages.append(HookUsage(hook=name, file=source_file.path))
        return hook_usages
