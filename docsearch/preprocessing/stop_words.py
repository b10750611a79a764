import logging
from pathlib import Path
from typing import FrozenSet, Iterable

import nltk
from nltk.corpus import stopwords

from ..utils.query_parser import ascii_lower

logger = logging.getLogger(__name__)


class StopWords:
    """Immutable stop-word set used by the query and indexing stages."""

    def __init__(self, words: Iterable[str] = ()):
        """
        Args:
            words: Stop words; stored ASCII lower-cased like index terms
        """
        self._words: FrozenSet[str] = frozenset(ascii_lower(word.strip()) for word in words if word.strip())

    def contains(self, word: str) -> bool:
        """Check whether a word is a stop word."""
        return word in self._words

    def __contains__(self, word: str) -> bool:
        return self.contains(word)

    def __len__(self) -> int:
        return len(self._words)

    def __repr__(self):
        return f"StopWords(size={len(self._words)})"

    @staticmethod
    def _download_nltk_data():
        """Download the NLTK stop-word corpus if it is missing."""
        try:
            nltk.data.find('corpora/stopwords')
        except LookupError:
            nltk.download('stopwords', quiet=True)

    @classmethod
    def from_nltk(cls, language: str = 'english') -> 'StopWords':
        """
        Load the NLTK stop-word list for a language.

        Args:
            language: Corpus file id, e.g. 'english'

        Returns:
            StopWords instance
        """
        cls._download_nltk_data()
        words = stopwords.words(language)
        logger.info(f"Loaded {len(words)} NLTK stop words for '{language}'")
        return cls(words)

    @classmethod
    def from_file(cls, path) -> 'StopWords':
        """
        Load stop words from a text file, one word per line.
        Blank lines and lines starting with '#' are ignored.
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            words = [line for line in f if not line.lstrip().startswith('#')]
        stop_words = cls(words)
        logger.info(f"Loaded {len(stop_words)} stop words from {path}")
        return stop_words

    @classmethod
    def from_config(cls, config) -> 'StopWords':
        """
        Build from the ``stop_words`` section of the Hydra config.

        A configured ``stopwords_file`` wins over the NLTK corpus.
        """
        section = config.stop_words
        stopwords_file = section.get('stopwords_file')
        if stopwords_file:
            return cls.from_file(stopwords_file)
        return cls.from_nltk(section.get('language', 'english'))
