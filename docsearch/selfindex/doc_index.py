"""
Per-document inverted index extraction.
"""

from typing import Dict, Iterator, List, Tuple
from pathlib import Path
import re
import string

# Runs of non-whitespace bytes. Only ASCII whitespace separates words.
WORD_PATTERN = re.compile(rb"[^ \t\n\r\x0b\x0c]+")

PUNCTUATION = string.punctuation


class DocumentIndex:
    """
    Inverted index of term positions for a single document.

    Maps each term to the ascending list of byte offsets where it starts.
    For the document "My oh my!" the index is::

        {"my": [0, 6], "oh": [3]}

    A term is a run of non-whitespace bytes, ASCII lower-cased, with leading
    and trailing ASCII punctuation removed. Offsets are byte offsets into the
    raw content, not character offsets.
    """

    def __init__(self, name: str):
        """
        Initialize an empty document index.

        Args:
            name: Document name (the path it was read from)
        """
        self.name = name
        self.index: Dict[str, List[int]] = {}

    @classmethod
    def from_bytes(cls, name: str, content: bytes) -> 'DocumentIndex':
        """
        Build the index for raw document content.

        Args:
            name: Document name
            content: Raw bytes of the document

        Returns:
            Populated DocumentIndex
        """
        doc_index = cls(name)

        for match in WORD_PATTERN.finditer(content.lower()):
            raw_key = match.group().decode('utf-8', errors='replace')
            key = raw_key.strip(PUNCTUATION)
            if not key:
                continue

            # Stripped punctuation is ASCII, so characters equal bytes here
            leading = len(raw_key) - len(raw_key.lstrip(PUNCTUATION))
            doc_index.add_position(key, match.start() + leading)

        return doc_index

    @classmethod
    def from_file(cls, path) -> 'DocumentIndex':
        """
        Read a file and build its index.

        Args:
            path: Path of the file to parse

        Returns:
            Populated DocumentIndex named after the path

        Raises:
            OSError: If the file cannot be opened or read
        """
        content = Path(path).read_bytes()
        return cls.from_bytes(str(path), content)

    def add_position(self, term: str, position: int):
        """Append a position for a term (positions must arrive in order)."""
        self.index.setdefault(term, []).append(position)

    def positions(self, term: str) -> List[int]:
        """Get positions of a term, empty if the term is absent."""
        return self.index.get(term, [])

    def terms(self) -> List[str]:
        return list(self.index.keys())

    def term_count(self) -> int:
        """Number of distinct terms in the document."""
        return len(self.index)

    def remove_terms(self, stop_words) -> int:
        """
        Remove every term the stop-word oracle contains.

        Args:
            stop_words: Object with a contains(word) -> bool method

        Returns:
            Number of terms removed
        """
        removed = [term for term in self.index if stop_words.contains(term)]
        for term in removed:
            del self.index[term]
        return len(removed)

    def drain(self) -> Iterator[Tuple[str, List[int]]]:
        """
        Move the contents out of this index.

        The index is empty once this returns; the returned iterator owns the
        (term, positions) pairs.
        """
        drained, self.index = self.index, {}
        return iter(drained.items())

    def __contains__(self, term: str) -> bool:
        return term in self.index

    def __len__(self) -> int:
        return len(self.index)

    def __repr__(self):
        return f"DocumentIndex(name={self.name!r}, terms={len(self.index)})"
