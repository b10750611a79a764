"""
Boolean operations on ranked result lists and positional phrase matching.
"""

from typing import Dict, List, Optional
import logging

from ..exceptions import EmptyPhraseError
from .inverted_index import MemoryIndex

logger = logging.getLogger(__name__)


class BooleanOperations:
    """Implements AND over per-token result lists."""

    @staticmethod
    def intersect(list1: List['QueryResult'], list2: List['QueryResult']) -> List['QueryResult']:
        """
        Intersect two result lists by document (AND operation).

        Documents present in both lists survive with their ranks summed.
        The order of list1 is preserved.

        Args:
            list1: Accumulated results
            list2: Results for the next token

        Returns:
            New list of results present in both lists
        """
        if not list1 or not list2:
            return []

        ranks = {result.doc_id: result.rank for result in list2}

        return [
            result.with_rank(result.rank + ranks[result.doc_id])
            for result in list1
            if result.doc_id in ranks
        ]

    @staticmethod
    def intersect_many(result_lists: List[List['QueryResult']]) -> List['QueryResult']:
        """
        Intersect multiple result lists.

        Args:
            result_lists: One result list per query token

        Returns:
            Results present in every list, ranks accumulated
        """
        if not result_lists:
            return []

        result = list(result_lists[0])

        for results in result_lists[1:]:
            # Early termination if result is empty
            if not result:
                break
            result = BooleanOperations.intersect(result, results)

        return result


class PhraseQueryProcessor:
    """Process phrase queries using byte-offset positional information."""

    @staticmethod
    def match_document(words: List[str], doc_id: int, index: MemoryIndex) -> bool:
        """
        Check whether the words appear consecutively in a document.

        Each following word must start exactly one separator byte after the
        end of the previous one. Word lengths are UTF-8 byte lengths of the
        decoded words, so a word decoded from invalid bytes (holding U+FFFD)
        does not line up with the word that follows it.

        Args:
            words: Phrase words in order
            doc_id: Document to check
            index: Index holding the positions

        Returns:
            True on the first full match
        """
        following = [set(index.get_positions(word, doc_id)) for word in words[1:]]

        for start in index.get_positions(words[0], doc_id):
            current = start
            previous = words[0]
            matched = True

            for word, positions in zip(words[1:], following):
                expected = current + len(previous.encode('utf-8')) + 1
                if expected not in positions:
                    matched = False
                    break
                current = expected
                previous = word

            if matched:
                return True

        return False

    @staticmethod
    def phrase_query(words: List[str], index: MemoryIndex) -> Dict[int, int]:
        """
        Find documents containing a phrase.

        The rank of a matching document is the sum, over every phrase word,
        of that word's total number of postings in the document.

        Args:
            words: Phrase words in order
            index: Index to search

        Returns:
            Mapping of doc_id -> rank for documents containing the phrase

        Raises:
            EmptyPhraseError: If the phrase has no words
        """
        if not words:
            raise EmptyPhraseError("phrase query has no words")

        first_postings: Optional[Dict[int, List[int]]] = index.search(words[0])
        if not first_postings:
            return {}

        matches: Dict[int, int] = {}

        for doc_id in first_postings:
            if not PhraseQueryProcessor.match_document(words, doc_id, index):
                continue

            matches[doc_id] = sum(
                len(index.get_positions(word, doc_id)) for word in words
            )

        logger.debug(f"Phrase {' '.join(words)!r} matched {len(matches)} documents")
        return matches
