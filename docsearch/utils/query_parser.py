import logging
import re
import string
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)

ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

WHITESPACE_PATTERN = re.compile(r'(\s+)')


def ascii_lower(text: str) -> str:
    """Lower-case ASCII letters only, the way documents are indexed."""
    return text.translate(ASCII_LOWER)


class TokenType(Enum):
    TERM = 'Term'
    PHRASE = 'Phrase'


@dataclass(frozen=True)
class QueryToken:
    """
    A single unit of a parsed query.

    Attributes:
        type: TERM for a bare word, PHRASE for a quoted sequence of words
        text: The term, or the phrase words with their original spacing
    """
    type: TokenType
    text: str

    @classmethod
    def term(cls, text: str) -> 'QueryToken':
        return cls(TokenType.TERM, text)

    @classmethod
    def phrase(cls, text: str) -> 'QueryToken':
        return cls(TokenType.PHRASE, text)

    @property
    def is_phrase(self) -> bool:
        return self.type is TokenType.PHRASE

    def words(self) -> List[str]:
        """Words of the token (a term is a single word)."""
        return self.text.split()

    def __str__(self):
        return f"{self.type.value}({self.text})"


class QueryTokenizer:
    """
    Split free-text queries into terms and quoted phrases.

    For the query ``steve "the hair" hairington`` the tokens are
    ``Term(steve)``, ``Phrase(the hair)`` and ``Term(hairington)``.
    """

    def __init__(self, stop_words=None):
        """
        Args:
            stop_words: Optional stop-word oracle (contains(word) -> bool).
                When given, stand-alone stop words outside quotes are dropped.
        """
        self.stop_words = stop_words

    def tokenize(self, query: str) -> List[QueryToken]:
        """
        Parse a raw query string.

        Args:
            query: Query as typed by the user

        Returns:
            Tokens in query order
        """
        query = ascii_lower(query.strip())
        if self.stop_words is not None:
            query = self.remove_stop_words(query)

        tokens: List[QueryToken] = []
        current: List[str] = []
        in_phrase = False

        for char in query:
            if char == '"':
                if in_phrase:
                    self._flush(tokens, current, phrase=True)
                else:
                    self._flush(tokens, current, phrase=False)
                current = []
                in_phrase = not in_phrase
            elif char.isspace() and not in_phrase:
                self._flush(tokens, current, phrase=False)
                current = []
            else:
                current.append(char)

        # Unterminated phrase is still a phrase
        self._flush(tokens, current, phrase=in_phrase)

        logger.debug(f"Tokenized {query!r} into {[str(t) for t in tokens]}")
        return tokens

    def remove_stop_words(self, query: str) -> str:
        """
        Drop stop words from the unquoted parts of a query.

        Quoted text is kept verbatim so phrases keep their word positions.
        Only whitespace-delimited words are removed: a word touching a quote,
        as ``the`` in ``the"cat"``, is kept.

        Args:
            query: Lower-cased query string

        Returns:
            Query with unquoted stop words removed
        """
        segments = query.split('"')
        last = len(segments) - 1

        # Even segments are outside quotes, odd segments inside
        for i in range(0, len(segments), 2):
            # Words at even indices, whitespace runs at odd ones
            parts = WHITESPACE_PATTERN.split(segments[i])
            for j in range(0, len(parts), 2):
                after_quote = j == 0 and i > 0
                before_quote = j == len(parts) - 1 and i < last
                if after_quote or before_quote:
                    continue
                if parts[j] and self.stop_words.contains(parts[j]):
                    parts[j] = ''
            segments[i] = ''.join(parts)

        return '"'.join(segments)

    @staticmethod
    def _flush(tokens: List[QueryToken], chars: List[str], phrase: bool):
        text = ''.join(chars)
        if not text.strip():
            return
        tokens.append(QueryToken.phrase(text) if phrase else QueryToken.term(text))


def tokenize_query(query: str, stop_words: Optional[object] = None) -> List[QueryToken]:
    """Shortcut for QueryTokenizer(stop_words).tokenize(query)."""
    return QueryTokenizer(stop_words).tokenize(query)
