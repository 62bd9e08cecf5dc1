"""
Graph module for persisting the component graph to Neo4j or JSON storage.
"""

from .graph_writer import GraphWriter, WriterState
from .json_graph_client import JsonGraphClient
from .neo4j_client import Neo4jClient

__all__ = [
    'GraphWriter',
    'WriterState',
    'JsonGraphClient',
    'Neo4jClient'
]
