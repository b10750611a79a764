"""Text preprocessing."""

from .stop_words import StopWords

__all__ = ['StopWords']
