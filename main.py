#!/usr/bin/env python3
"""
Component Graph - Entry Point

Builds a knowledge graph of the UI components, hooks and file imports of a
JavaScript/TypeScript source tree and stores it in Neo4j.
"""

from component_graph.cli import main


if __name__ == "__main__":
    main()
