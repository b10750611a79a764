"""
Query processing: per-token evaluation, intersection and ranking.
"""

from typing import List, Optional
from dataclasses import dataclass, replace
import logging

from .inverted_index import MemoryIndex, DocumentTable
from .boolean_ops import BooleanOperations, PhraseQueryProcessor
from ..utils.query_parser import QueryToken, QueryTokenizer

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """
    A document matching a query.

    Attributes:
        doc_id: Document identifier
        doc_name: Document name (path)
        rank: Accumulated term frequency score
    """
    doc_id: int
    doc_name: str
    rank: int

    def sort_key(self):
        """Rank descending, then doc_id ascending."""
        return (-self.rank, self.doc_id)

    def with_rank(self, rank: int) -> 'QueryResult':
        return replace(self, rank=rank)

    def __lt__(self, other):
        return self.sort_key() < other.sort_key()

    def __str__(self):
        return f"[{self.doc_id}] {self.doc_name} {self.rank}"


class QueryProcessor:
    """
    Evaluates tokenized queries against a MemoryIndex.

    Every token must match for a document to be returned (AND semantics);
    a document's rank is the sum of its ranks across tokens.
    """

    def __init__(self, index: MemoryIndex, doc_table: DocumentTable,
                 tokenizer: Optional[QueryTokenizer] = None):
        """
        Initialize query processor.

        Args:
            index: MemoryIndex to query
            doc_table: Table used to resolve document names
            tokenizer: Query tokenizer (default: no stop-word filtering)
        """
        self.index = index
        self.doc_table = doc_table
        self.tokenizer = tokenizer or QueryTokenizer()

    def process_query(self, query: str) -> List[QueryResult]:
        """
        Tokenize and evaluate a raw query.

        Args:
            query: Raw query string

        Returns:
            Results sorted by rank (highest first), ties by doc_id
        """
        return self.process_tokens(self.tokenizer.tokenize(query))

    def process_tokens(self, tokens: List[QueryToken]) -> List[QueryResult]:
        """
        Evaluate already tokenized query.

        Args:
            tokens: Query tokens in query order

        Returns:
            Sorted list of QueryResult objects
        """
        if not tokens:
            return []

        result_lists = []
        for token in tokens:
            results = self.search_token(token)
            if not results:
                logger.debug(f"No matches for {token}, query has no results")
                return []
            result_lists.append(results)

        results = BooleanOperations.intersect_many(result_lists)
        results.sort()
        return results

    def search_token(self, token: QueryToken) -> List[QueryResult]:
        """Evaluate a single token."""
        if token.is_phrase:
            return self.search_phrase(token.words())
        return self.search_term(token.text)

    def search_term(self, term: str) -> List[QueryResult]:
        """
        Find every document containing a term.

        Args:
            term: Normalized term

        Returns:
            One result per document, ranked by term frequency
        """
        postings = self.index.search(term)
        if not postings:
            return []

        return [
            self._make_result(doc_id, len(positions))
            for doc_id, positions in postings.items()
        ]

    def search_phrase(self, words: List[str]) -> List[QueryResult]:
        """
        Find every document containing the words consecutively.

        Args:
            words: Phrase words in order

        Returns:
            One result per matching document
        """
        matches = PhraseQueryProcessor.phrase_query(words, self.index)
        return [self._make_result(doc_id, rank) for doc_id, rank in matches.items()]

    def _make_result(self, doc_id: int, rank: int) -> QueryResult:
        name = self.doc_table.get_name(doc_id)
        if name is None:
            raise KeyError(f"Document {doc_id} is indexed but missing from the document table")
        return QueryResult(doc_id=doc_id, doc_name=name, rank=rank)
