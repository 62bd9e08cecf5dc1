"""
Source tree discovery.
"""

from .source_walker import SourceWalker

__all__ = ['SourceWalker']
