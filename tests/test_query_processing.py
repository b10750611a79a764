"""
Unit tests for query tokenization, phrase matching and query processing
Run with: pytest tests/test_query_processing.py -v
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from docsearch.exceptions import EmptyPhraseError
from docsearch.preprocessing.stop_words import StopWords
from docsearch.selfindex import (
    DocumentIndex, MemoryIndex, DocumentTable,
    BooleanOperations, PhraseQueryProcessor,
    QueryResult, QueryProcessor
)
from docsearch.utils.query_parser import QueryToken, QueryTokenizer, TokenType, tokenize_query


def build_index(documents):
    """Build (MemoryIndex, DocumentTable) from (name, text) pairs."""
    index = MemoryIndex()
    table = DocumentTable()
    for name, text in documents:
        doc_id = table.add(name)
        index.add(DocumentIndex.from_bytes(name, text.encode('utf-8')), doc_id)
    return index, table


class TestQueryTokenizer:
    """Test query tokenization."""

    def setup_method(self):
        self.tokenizer = QueryTokenizer()

    def test_terms_and_phrase(self):
        tokens = self.tokenizer.tokenize('steve "the hair" hairington')
        assert [str(t) for t in tokens] == [
            "Term(steve)", "Phrase(the hair)", "Term(hairington)"
        ]

    def test_lowercase_and_trim(self):
        tokens = self.tokenizer.tokenize("   Foo   BAR \n")
        assert tokens == [QueryToken.term("foo"), QueryToken.term("bar")]

    def test_only_ascii_lowercased(self):
        """Test that queries follow the index case rule for non-ASCII letters."""
        tokens = self.tokenizer.tokenize("Éclair CAFÉ")
        assert tokens == [QueryToken.term("Éclair"), QueryToken.term("cafÉ")]

    def test_phrase_keeps_spacing(self):
        tokens = self.tokenizer.tokenize('"the  hair"')
        assert tokens == [QueryToken.phrase("the  hair")]
        assert tokens[0].words() == ["the", "hair"]

    def test_unterminated_phrase(self):
        tokens = self.tokenizer.tokenize('foo "bar baz')
        assert tokens == [QueryToken.term("foo"), QueryToken.phrase("bar baz")]

    def test_empty_phrase_dropped(self):
        assert self.tokenizer.tokenize('""') == []
        assert self.tokenizer.tokenize('" "  cat') == [QueryToken.term("cat")]

    def test_quote_flushes_term(self):
        tokens = self.tokenizer.tokenize('foo"bar"baz')
        assert tokens == [
            QueryToken.term("foo"), QueryToken.phrase("bar"), QueryToken.term("baz")
        ]

    def test_empty_query(self):
        assert self.tokenizer.tokenize("") == []
        assert self.tokenizer.tokenize("   ") == []

    def test_token_types(self):
        tokens = tokenize_query('a "b c"')
        assert tokens[0].type is TokenType.TERM
        assert not tokens[0].is_phrase
        assert tokens[1].type is TokenType.PHRASE
        assert tokens[1].is_phrase


class TestStopWordQueryFilter:
    """Test query-time stop-word removal."""

    def setup_method(self):
        self.tokenizer = QueryTokenizer(StopWords(["the", "is", "a"]))

    def test_removes_stand_alone_stop_words(self):
        assert self.tokenizer.tokenize("the cat") == [QueryToken.term("cat")]

    def test_case_insensitive(self):
        assert self.tokenizer.tokenize("The Cat") == [QueryToken.term("cat")]

    def test_phrase_contents_kept(self):
        tokens = self.tokenizer.tokenize('the cat "the hair is red" a dog')
        assert tokens == [
            QueryToken.term("cat"),
            QueryToken.phrase("the hair is red"),
            QueryToken.term("dog"),
        ]

    def test_only_stop_words(self):
        assert self.tokenizer.tokenize("the a is") == []

    def test_partial_matches_kept(self):
        assert self.tokenizer.tokenize("theme isle") == [
            QueryToken.term("theme"), QueryToken.term("isle")
        ]

    def test_word_touching_quote_kept(self):
        """Test that only whitespace-delimited stop words are dropped."""
        assert self.tokenizer.tokenize('the"cat"') == [
            QueryToken.term("the"), QueryToken.phrase("cat")
        ]
        assert self.tokenizer.tokenize('"cat"the') == [
            QueryToken.phrase("cat"), QueryToken.term("the")
        ]
        assert self.tokenizer.tokenize('the "cat" a') == [QueryToken.phrase("cat")]


class TestQueryResult:
    """Test result ordering."""

    def test_sort_rank_then_doc_id(self):
        results = [
            QueryResult(2, "b", 1),
            QueryResult(0, "a", 1),
            QueryResult(1, "c", 5),
        ]
        assert [r.doc_id for r in sorted(results)] == [1, 0, 2]

    def test_str(self):
        assert str(QueryResult(3, "docs/a.txt", 7)) == "[3] docs/a.txt 7"

    def test_with_rank(self):
        result = QueryResult(1, "a", 2)
        updated = result.with_rank(5)
        assert updated.rank == 5
        assert result.rank == 2


class TestBooleanOperations:
    """Test intersection of result lists."""

    def setup_method(self):
        self.list1 = [QueryResult(0, "a", 1), QueryResult(1, "b", 2), QueryResult(3, "d", 1)]
        self.list2 = [QueryResult(1, "b", 3), QueryResult(2, "c", 1), QueryResult(3, "d", 4)]
        self.list3 = [QueryResult(3, "d", 2), QueryResult(0, "a", 9)]

    def test_intersect_empty(self):
        assert BooleanOperations.intersect([], self.list1) == []
        assert BooleanOperations.intersect(self.list1, []) == []

    def test_intersect_sums_ranks(self):
        result = BooleanOperations.intersect(self.list1, self.list2)
        assert {r.doc_id: r.rank for r in result} == {1: 5, 3: 5}

    def test_intersect_does_not_mutate(self):
        BooleanOperations.intersect(self.list1, self.list2)
        assert self.list1[1].rank == 2

    def test_intersect_many(self):
        result = BooleanOperations.intersect_many([self.list1, self.list2, self.list3])
        assert [(r.doc_id, r.rank) for r in result] == [(3, 7)]

    def test_intersect_many_empty(self):
        assert BooleanOperations.intersect_many([]) == []
        assert BooleanOperations.intersect_many([self.list1, []]) == []

    def test_intersection_order_independent(self):
        """Test that token order does not change matched documents or totals."""
        lists = [self.list1, self.list2, self.list3]
        expected = {r.doc_id: r.rank for r in BooleanOperations.intersect_many(lists)}

        for order in ([2, 0, 1], [1, 2, 0], [2, 1, 0]):
            result = BooleanOperations.intersect_many([lists[i] for i in order])
            assert {r.doc_id: r.rank for r in result} == expected


class TestPhraseQueryProcessor:
    """Test positional phrase matching."""

    def setup_method(self):
        self.index, self.table = build_index([
            ("a", "the hair is red"),
            ("b", "red hair and the dog; the hair was red"),
            ("c", "the hair, is red"),
            ("d", "x x"),
        ])

    def test_two_word_phrase(self):
        matches = PhraseQueryProcessor.phrase_query(["the", "hair"], self.index)
        assert set(matches) == {0, 1, 2}
        assert matches[0] == 2

    def test_rank_sums_term_frequencies(self):
        """Test that rank counts every posting of every phrase word."""
        matches = PhraseQueryProcessor.phrase_query(["the", "hair"], self.index)
        # "the" twice and "hair" twice in document b
        assert matches[1] == 4

    def test_phrase_not_in_order(self):
        matches = PhraseQueryProcessor.phrase_query(["hair", "the"], self.index)
        assert matches == {}

    def test_phrase_across_punctuation(self):
        """Test that a trimmed comma breaks adjacency."""
        matches = PhraseQueryProcessor.phrase_query(["hair", "is"], self.index)
        assert set(matches) == {0}

    def test_later_occurrence_matches(self):
        """Test that a failing first occurrence does not hide a later match."""
        matches = PhraseQueryProcessor.phrase_query(["the", "hair", "was"], self.index)
        assert set(matches) == {1}
        assert matches[1] == 5

    def test_repeated_word(self):
        matches = PhraseQueryProcessor.phrase_query(["x", "x"], self.index)
        assert matches == {3: 4}

    def test_single_word(self):
        matches = PhraseQueryProcessor.phrase_query(["red"], self.index)
        assert matches == {0: 1, 1: 2, 2: 1}

    def test_missing_word(self):
        assert PhraseQueryProcessor.phrase_query(["blue"], self.index) == {}
        assert PhraseQueryProcessor.phrase_query(["the", "blue"], self.index) == {}

    def test_empty_phrase(self):
        with pytest.raises(EmptyPhraseError):
            PhraseQueryProcessor.phrase_query([], self.index)

    def test_phrase_after_multibyte_word(self):
        """Test that adjacency counts the UTF-8 length of the previous word."""
        index, _ = build_index([("e", "café au lait")])
        assert PhraseQueryProcessor.phrase_query(["café", "au", "lait"], index) == {0: 3}


class TestQueryProcessor:
    """Test query evaluation end to end over an in-memory index."""

    def setup_method(self):
        index, table = build_index([
            ("A", "the cat sat"),
            ("B", "the dog sat"),
            ("C", "the cat sat on the mat with the cat"),
        ])
        self.processor = QueryProcessor(index, table)

    def test_single_term(self):
        results = self.processor.process_query("dog")
        assert results == [QueryResult(1, "B", 1)]

    def test_term_rank_is_frequency(self):
        results = self.processor.process_query("cat")
        assert [(r.doc_name, r.rank) for r in results] == [("C", 2), ("A", 1)]

    def test_ties_by_doc_id(self):
        results = self.processor.process_query("sat")
        assert [r.doc_id for r in results] == [0, 1, 2]

    def test_and_semantics(self):
        results = self.processor.process_query("the cat")
        assert [(r.doc_name, r.rank) for r in results] == [("C", 5), ("A", 2)]

    def test_missing_term_empties_results(self):
        assert self.processor.process_query("cat unicorn") == []
        assert self.processor.process_query("unicorn cat") == []

    def test_empty_query(self):
        assert self.processor.process_query("") == []

    def test_phrase_and_term(self):
        results = self.processor.process_query('"the cat" mat')
        # the(3) + cat(2) + mat(1)
        assert results == [QueryResult(2, "C", 6)]

    def test_phrase_only(self):
        results = self.processor.process_query('"cat sat"')
        assert [(r.doc_name, r.rank) for r in results] == [("C", 3), ("A", 2)]

    def test_empty_phrase_token_rejected(self):
        with pytest.raises(EmptyPhraseError):
            self.processor.process_tokens([QueryToken.phrase("   ")])

    def test_stop_words(self):
        index, table = build_index([("A", "the cat sat"), ("B", "the dog sat")])
        processor = QueryProcessor(index, table, QueryTokenizer(StopWords(["the"])))

        assert processor.process_query("the cat") == [QueryResult(0, "A", 1)]
