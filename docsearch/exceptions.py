"""Exceptions raised by the indexing pipeline and query engine."""


class CrawlError(OSError):
    """A directory listing or file read failed during a crawl."""

    def __init__(self, path, message: str):
        super().__init__(f"{message}: {path}")
        self.path = str(path)


class EmptyPhraseError(ValueError):
    """A phrase token contains no words."""
