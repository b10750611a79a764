"""
Global in-memory inverted index and document table.
"""

from typing import Dict, List, Optional

from .doc_index import DocumentIndex


class MemoryIndex:
    """
    In-memory inverted index over many documents.
    Maps terms to a mapping of document ID -> positions in that document.
    """

    def __init__(self):
        """Initialize empty index."""
        self.index: Dict[str, Dict[int, List[int]]] = {}

    def add(self, doc_index: DocumentIndex, doc_id: int):
        """
        Merge a document index into the global index.

        The document index is drained and must not be reused afterwards.
        An existing entry for the same (term, doc_id) pair is overwritten.

        Args:
            doc_index: Per-document index to merge
            doc_id: Identifier assigned to the document by the DocumentTable
        """
        for term, positions in doc_index.drain():
            self.index.setdefault(term, {})[doc_id] = positions

    def search(self, term: str) -> Optional[Dict[int, List[int]]]:
        """
        Look up a term.

        Args:
            term: The term to look up (already normalized)

        Returns:
            Mapping of doc_id -> positions, or None if the term was never indexed
        """
        return self.index.get(term)

    def get_positions(self, term: str, doc_id: int) -> List[int]:
        """Get positions of a term in a specific document."""
        postings = self.index.get(term)
        if postings is None:
            return []
        return postings.get(doc_id, [])

    def contains_term(self, term: str) -> bool:
        """Check if term exists in vocabulary."""
        return term in self.index

    def term_count(self) -> int:
        """Get size of vocabulary (number of unique terms)."""
        return len(self.index)

    def get_statistics(self) -> Dict:
        """Get index statistics."""
        total_postings = sum(len(postings) for postings in self.index.values())
        total_positions = sum(
            len(positions)
            for postings in self.index.values()
            for positions in postings.values()
        )

        return {
            'vocabulary_size': len(self.index),
            'total_postings': total_postings,
            'total_positions': total_positions,
            'avg_postings_length': total_postings / len(self.index) if self.index else 0,
        }

    def __len__(self) -> int:
        return len(self.index)

    def __repr__(self):
        return f"MemoryIndex(terms={len(self.index)})"


class DocumentTable:
    """
    Bidirectional mapping between document names and document IDs.
    IDs are dense integers assigned in insertion order, starting at 0.
    """

    def __init__(self):
        """Initialize empty table."""
        self.name_to_id: Dict[str, int] = {}
        self.id_to_name: Dict[int, str] = {}

    def add(self, name: str) -> int:
        """
        Register a document under a new ID.

        Adding the same name twice assigns a second ID; the name then maps
        to the newest one.

        Args:
            name: Document name (full path as produced by the crawl)

        Returns:
            The newly assigned document ID
        """
        doc_id = len(self.id_to_name)
        self.name_to_id[name] = doc_id
        self.id_to_name[doc_id] = name
        return doc_id

    def get_id(self, name: str) -> Optional[int]:
        """Get the document ID for a name, None if unknown."""
        return self.name_to_id.get(name)

    def get_name(self, doc_id: int) -> Optional[str]:
        """Get the document name for an ID, None if unknown."""
        return self.id_to_name.get(doc_id)

    def count(self) -> int:
        """Get total number of documents."""
        return len(self.id_to_name)

    def names(self) -> List[str]:
        """All document names in ID order."""
        return [self.id_to_name[doc_id] for doc_id in range(len(self.id_to_name))]

    def __len__(self) -> int:
        return len(self.id_to_name)

    def __repr__(self):
        return f"DocumentTable(documents={len(self.id_to_name)})"
