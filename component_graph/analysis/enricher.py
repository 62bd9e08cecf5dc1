import os
import re
from typing import List, Optional

from ..parser.tree_parser import node_text, serialize_node
from ..scanner.source_walker import isoformat_mtime
from ..types import Component, ComponentType, SourceFile
from .classifier import HOOK_NAME_PATTERN, Declaration


ID_SEPARATOR = ":"

# Counted once per regex match over the serialized declaration
BRANCH_PATTERNS = [
    re.compile(r"if_statement"),
    re.compile(r"ternary_expression"),
    re.compile(r'"operator":"(?:&&|\|\||\?\?)"'),
    re.compile(r"for_statement"),
    re.compile(r"for_in_statement"),
    re.compile(r"while_statement"),
    re.compile(r"do_statement"),
]

# First match wins
PATH_TYPE_RULES = [
    ("/pages/", ComponentType.PAGE),
    ("/Apps/", ComponentType.APP),
    ("/apps/", ComponentType.APP),
    ("/hooks/", ComponentType.HOOK),
    ("/contexts/", ComponentType.CONTEXT),
    ("/common/", ComponentType.COMMON),
]
NAME_TYPE_RULES = [
    ("Page", ComponentType.PAGE),
    ("App", ComponentType.APP),
]

PROP_KEY_FIELDS = {
    "pair_pattern": "key",
    "object_assignment_pattern": "left",
}


def component_id(name: str, file_path: str) -> str:
    return f"{name}{ID_SEPARATOR}{file_path}"


def calculate_complexity(serialized: str) -> int:
    complexity = 1
    for pattern in BRANCH_PATTERNS:
        complexity += len(pattern.findall(serialized))
    return complexity


def infer_component_type(name: str, file_path: str) -> ComponentType:
    path = "/" + file_path.replace("\\", "/").lstrip("/")
    for marker, component_type in PATH_TYPE_RULES:
        if marker in path:
            return component_type
    for marker, component_type in NAME_TYPE_RULES:
        if marker in name:
            return component_type
    return ComponentType.COMPONENT


def line_span(node) -> int:
    if node is None:
        return 0
    return node.end_point[0] - node.start_point[0]


def first_parameter(function_node):
    """First formal parameter of a function-like node, unwrapped from TS wrappers."""
    single = function_node.child_by_field_name("parameter")
    if single is not None:
        return single

    params = function_node.child_by_field_name("parameters")
    if params is None or not params.named_children:
        return None

    param = params.named_children[0]
    if param.type in ("required_parameter", "optional_parameter"):
        pattern = param.child_by_field_name("pattern")
        if pattern is not None:
            return pattern
    if param.type == "assignment_pattern":
        return param.child_by_field_name("left")
    return param


def extract_props(function_node) -> List[str]:
    """Keys of a destructured first parameter, in source order."""
    param = first_parameter(function_node)
    if param is None or param.type != "object_pattern":
        return []

    props = []
    for prop in param.named_children:
        if prop.type == "shorthand_property_identifier_pattern":
            props.append(node_text(prop))
        elif prop.type in PROP_KEY_FIELDS:
            key = prop.child_by_field_name(PROP_KEY_FIELDS[prop.type])
            if key is not None and "identifier" in key.type:
                props.append(node_text(key))
        elif prop.type == "rest_pattern":
            props.append("unknown")
    return props


def extract_hooks(serialized: str) -> List[str]:
    """Hook names referenced anywhere in the serialization, deduplicated."""
    hooks: List[str] = []
    for name in HOOK_NAME_PATTERN.findall(serialized):
        if name not in hooks:
            hooks.append(name)
    return hooks


class MetadataEnricher:
    """Derives the stored attributes of an accepted component."""

    def enrich(self, declaration: Declaration, source_file: SourceFile,
               serialized: Optional[str] = None) -> Component:
        if serialized is None:
            serialized = serialize_node(declaration.node)

        span_serialized = serialized
        if declaration.span_node is not declaration.node:
            span_serialized = serialize_node(declaration.span_node)

        props = [] if declaration.node.type == "class_declaration" else extract_props(declaration.node)

        return Component(
            id=component_id(declaration.name, source_file.path),
            name=declaration.name,
            file=source_file.path,
            component_type=infer_component_type(declaration.name, source_file.path),
            kind=declaration.kind,
            props=props,
            hooks=extract_hooks(serialized),
            loc=line_span(declaration.span_node),
            complexity=calculate_complexity(span_serialized),
            last_modified=isoformat_mtime(os.stat(source_file.absolute_path).st_mtime),
        )
