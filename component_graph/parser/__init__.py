"""
Tree-sitter parsing of JavaScript and TypeScript sources.
"""

from .tree_parser import TreeParser, serialize_node, walk

__all__ = ['TreeParser', 'serialize_node', 'walk']
