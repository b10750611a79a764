"""
SearchEngine: crawl a document tree once, then answer queries against it.

This is the class the CLI talks to. It ties together the crawler, the
in-memory index and the query processor, and decides where stop-word
filtering applies.
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional

from .data.crawler import Crawler, FileSystemCrawler
from .preprocessing.stop_words import StopWords
from .selfindex import DocumentTable, MemoryIndex, QueryProcessor, QueryResult
from .utils.query_parser import QueryTokenizer

logger = logging.getLogger(__name__)

STOP_WORD_STAGES = ('query', 'index')


class SearchEngine:
    """
    In-memory full-text search engine.

    The index is never modified after construction, so one engine can be
    read by many callers. To pick up changes on disk, build a new engine
    and replace the reference.
    """

    def __init__(self, doc_table: DocumentTable, mem_index: MemoryIndex,
                 query_stop_words: Optional[StopWords] = None):
        """
        Initialize engine from a finished crawl.

        Args:
            doc_table: Document table produced by the crawl
            mem_index: Index produced by the crawl
            query_stop_words: Stop words removed from queries, if any
        """
        self.doc_table = doc_table
        self.mem_index = mem_index
        self.query_stop_words = query_stop_words
        self.processor = QueryProcessor(
            mem_index,
            doc_table,
            tokenizer=QueryTokenizer(query_stop_words),
        )

    @classmethod
    def from_crawler(cls, crawler: Crawler,
                     query_stop_words: Optional[StopWords] = None) -> 'SearchEngine':
        """Run a crawl and wrap its output."""
        doc_table, mem_index = crawler.crawl()
        return cls(doc_table, mem_index, query_stop_words=query_stop_words)

    @classmethod
    def build(cls, root: str, stop_words_enabled: bool = False,
              stop_words: Optional[StopWords] = None,
              stop_word_stage: str = 'query',
              show_progress: bool = False) -> 'SearchEngine':
        """
        Crawl a directory tree and build an engine over it.

        Args:
            root: Root directory of the documents
            stop_words_enabled: Whether to filter stop words
            stop_words: Stop words to use (default: NLTK English list)
            stop_word_stage: 'query' to filter queries only, 'index' to also
                drop stop words from documents while indexing
            show_progress: Show a progress bar during the crawl

        Returns:
            Ready SearchEngine

        Raises:
            CrawlError: If any directory or file cannot be read
            ValueError: If stop_word_stage is unknown
        """
        if stop_word_stage not in STOP_WORD_STAGES:
            raise ValueError(f"Invalid stop word stage: {stop_word_stage}")

        if stop_words_enabled and stop_words is None:
            stop_words = StopWords.from_nltk()
        if not stop_words_enabled:
            stop_words = None

        index_stop_words = stop_words if stop_word_stage == 'index' else None
        # Queries are filtered at both stages
        query_stop_words = stop_words

        crawler = FileSystemCrawler(
            root,
            index_stop_words=index_stop_words,
            show_progress=show_progress,
        )

        logger.info(f"Building engine for {root} (stop_words={stop_words_enabled}, "
                    f"stage={stop_word_stage})")
        return cls.from_crawler(crawler, query_stop_words=query_stop_words)

    @classmethod
    def from_config(cls, config) -> 'SearchEngine':
        """
        Build an engine from a Hydra configuration object.

        Args:
            config: Config with paths, crawler and stop_words sections
        """
        enabled = bool(config.stop_words.get('enabled', False))
        stop_words = StopWords.from_config(config) if enabled else None

        return cls.build(
            config.paths.root,
            stop_words_enabled=enabled,
            stop_words=stop_words,
            stop_word_stage=config.stop_words.get('stage', 'query'),
            show_progress=bool(config.crawler.get('show_progress', False)),
        )

    def search(self, query: str) -> List[QueryResult]:
        """
        Search the index.

        A document must match every term and phrase of the query. Its rank
        is the sum of the term frequencies of the matched words.

        Args:
            query: Raw query string

        Returns:
            Results sorted by rank (highest first), ties by doc_id
        """
        return self.processor.process_query(query)

    def query(self, query: str, k: Optional[int] = None) -> str:
        """
        Search and serialize the results as JSON.

        Args:
            query: Raw query string
            k: Maximum number of results to include (default: all)

        Returns:
            JSON string with results, query_time and total_results
        """
        start_time = time.time()
        results = self.search(query)
        query_time = time.time() - start_time

        if k is not None:
            results = results[:k]

        output_results = [
            {
                'doc_id': result.doc_id,
                'doc_name': result.doc_name,
                'rank': result.rank,
            }
            for result in results
        ]

        logger.info(f"Query '{query}' returned {len(output_results)} results in {query_time:.6f}s")

        return json.dumps({
            'results': output_results,
            'query_time': query_time,
            'total_results': len(output_results)
        })

    def document_count(self) -> int:
        return self.doc_table.count()

    def term_count(self) -> int:
        return self.mem_index.term_count()

    def get_statistics(self) -> Dict[str, Any]:
        """Get engine statistics."""
        stats = {
            'document_count': self.document_count(),
            'query_stop_words': self.query_stop_words is not None,
        }
        stats.update(self.mem_index.get_statistics())
        return stats


def build(root: str, stop_words_enabled: bool = False, **kwargs) -> SearchEngine:
    """Crawl root and return a SearchEngine. See SearchEngine.build."""
    return SearchEngine.build(root, stop_words_enabled=stop_words_enabled, **kwargs)
