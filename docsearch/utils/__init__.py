"""Utility functions."""

from .query_parser import QueryToken, QueryTokenizer, TokenType, tokenize_query

__all__ = ['QueryToken', 'QueryTokenizer', 'TokenType', 'tokenize_query']
