"""
SelfIndex - in-memory positional inverted index and query processing.
"""

from .doc_index import DocumentIndex
from .inverted_index import MemoryIndex, DocumentTable
from .boolean_ops import BooleanOperations, PhraseQueryProcessor
from .query_processor import QueryResult, QueryProcessor

__all__ = [
    'DocumentIndex',
    'MemoryIndex',
    'DocumentTable',

    'BooleanOperations',
    'PhraseQueryProcessor',
    'QueryResult',
    'QueryProcessor',
]
