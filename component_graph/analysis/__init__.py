"""
Component classification, metadata enrichment and relationship extraction.
"""

from .classifier import ComponentClassifier, Declaration, iter_declarations
from .enricher import MetadataEnricher
from .extractor import RelationshipExtractor
from .import_resolver import ImportResolver

__all__ = [
    'ComponentClassifier',
    'Declaration',
    'iter_declarations',
    'MetadataEnricher',
    'RelationshipExtractor',
    'ImportResolver'
]
