"""
docsearch - in-memory full-text search over a directory tree.
"""

from .engine import SearchEngine, build
from .exceptions import CrawlError, EmptyPhraseError

__all__ = ['SearchEngine', 'build', 'CrawlError', 'EmptyPhraseError']
