import re
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from ..parser.tree_parser import node_text, serialize_node, walk
from ..types import ClassifyResult, DeclarationKind
from ..utils.logger import get_logger


BASE_COMPONENT = "Component"
BASE_NAMESPACE = "React"

PATH_KEYWORDS = ("Component", "Screen", "Page", "View", "Modal", "Dialog")

# Matched as plain substrings of the serialized subtree
TEMPLATE_MARKERS = ("jsx_element", "jsx_self_closing_element", "createElement")

HOOK_NAME_PATTERN = re.compile(r'"name":"(use[A-Z]\w*)"')
CAPITALIZED = re.compile(r"[A-Z]")

FUNCTION_VALUE_TYPES = {"arrow_function", "function_expression", "function"}
FUNCTION_DECLARATION_TYPES = {"function_declaration", "generator_function_declaration"}


@dataclass
class Declaration:
    """A candidate declaration found in a syntax tree.

    ``node`` is what gets classified (the function itself for arrow-bound
    variables); ``span_node`` is the whole declaration used for size and
    complexity.
    """
    name: Optional[str]
    kind: DeclarationKind
    node: Any
    span_node: Any


def _identifier_name(node) -> Optional[str]:
    if node is not None and node.type in ("identifier", "type_identifier"):
        return node_text(node)
    return None


def superclass_node(class_node):
    """Expression following ``extends`` in a class declaration, if any."""
    for child in class_node.named_children:
        if child.type != "class_heritage":
            continue
        for part in child.named_children:
            if part.type == "extends_clause":
                value = part.child_by_field_name("value")
                if value is None and part.named_children:
                    value = part.named_children[0]
                return value
            if part.type != "implements_clause":
                return part
    return None


def extends_base_component(class_node) -> bool:
    """True for ``extends Component`` and ``extends React.Component``."""
    superclass = superclass_node(class_node)
    if superclass is None:
        return False

    if superclass.type == "identifier":
        return node_text(superclass) == BASE_COMPONENT

    if superclass.type == "member_expression":
        obj = superclass.child_by_field_name("object")
        prop = superclass.child_by_field_name("property")
        return (
            obj is not None
            and obj.type == "identifier"
            and node_text(obj) == BASE_NAMESPACE
            and node_text(prop) == BASE_COMPONENT
        )

    return False


def iter_declarations(root) -> Iterator[Declaration]:
    """Yield function, arrow-bound and class declarations anywhere in the tree."""
    for node in walk(root):
        if node.type in FUNCTION_DECLARATION_TYPES:
            yield Declaration(
                name=_identifier_name(node.child_by_field_name("name")),
                kind=DeclarationKind.FUNCTION,
                node=node,
                span_node=node,
            )
        elif node.type == "variable_declarator":
            value = node.child_by_field_name("value")
            if value is not None and value.type in FUNCTION_VALUE_TYPES:
                yield Declaration(
                    name=_identifier_name(node.child_by_field_name("name")),
                    kind=DeclarationKind.ARROW,
                    node=value,
                    span_node=node,
                )
        elif node.type == "class_declaration":
            yield Declaration(
                name=_identifier_name(node.child_by_field_name("name")),
                kind=DeclarationKind.CLASS,
                node=node,
                span_node=node,
            )


def has_template(serialized: str) -> bool:
    return any(marker in serialized for marker in TEMPLATE_MARKERS)


def has_hook_reference(serialized: str) -> bool:
    return HOOK_NAME_PATTERN.search(serialized) is not None


class ComponentClassifier:
    """Heuristic decision of whether a declaration is a UI component."""

    def __init__(self):
        self.logger = get_logger("classifier")

    def is_component(self, name: Optional[str], node, file_path: str,
                     serialized: Optional[str] = None) -> ClassifyResult:
        if not name or not CAPITALIZED.match(name):
            return ClassifyResult(False, "name is not capitalized")

        if serialized is None:
            serialized = serialize_node(node)

        if has_template(serialized):
            return ClassifyResult(True, "renders a template")
        if has_hook_reference(serialized):
            return ClassifyResult(True, "references a hook")
        for keyword in PATH_KEYWORDS:
            if keyword in file_path:
                return ClassifyResult(True, f"path contains {keyword}")

        return ClassifyResult(False, "no component signal")

    def classify(self, declaration: Declaration, file_path: str,
                 serialized: Optional[str] = None) -> ClassifyResult:
        """Classify a declaration, applying the superclass rule to classes."""
        if declaration.kind is DeclarationKind.CLASS and not extends_base_component(declaration.node):
            return ClassifyResult(False, "class does not extend a base component")

        result = self.is_component(declaration.name, declaration.node, file_path, serialized)
        if result:
            self.logger.debug(f"{declaration.name} in {file_path}: {result.reason}")
        return result
