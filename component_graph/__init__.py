"""
Static analysis pipeline that turns a JS/TS source tree into a component knowledge graph.
"""

__version__ = "0.1.0"
