"""
Crawlers that discover documents and build the in-memory index.
"""

import logging
import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from tqdm import tqdm

from ..exceptions import CrawlError
from ..selfindex.doc_index import DocumentIndex
from ..selfindex.inverted_index import DocumentTable, MemoryIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirEntry:
    """A single entry of a directory listing."""
    path: str
    is_directory: bool


class Resource(ABC):
    """A tree of documents that can be listed and read."""

    @abstractmethod
    def list_directory(self, path: str) -> List[DirEntry]:
        """
        List the entries of a directory.

        Raises:
            OSError: If the directory cannot be listed
        """
        pass

    @abstractmethod
    def read_file(self, path: str) -> bytes:
        """
        Read the raw content of a document.

        Raises:
            OSError: If the file cannot be read
        """
        pass


class FileSystemResource(Resource):
    """Documents stored on the local filesystem."""

    def list_directory(self, path: str) -> List[DirEntry]:
        with os.scandir(path) as entries:
            return [DirEntry(entry.path, entry.is_dir()) for entry in entries]

    def read_file(self, path: str) -> bytes:
        return Path(path).read_bytes()


class Crawler(ABC):
    """Crawl over some resource and build an index of every document in it."""

    @abstractmethod
    def crawl(self) -> Tuple[DocumentTable, MemoryIndex]:
        """
        Crawl all documents and parse them into an inverted index.

        Returns:
            The document table and the merged index
        """
        pass


class ResourceCrawler(Crawler):
    """Crawls a Resource depth-first from a root directory."""

    def __init__(self, resource: Resource, root: str, index_stop_words=None,
                 show_progress: bool = False):
        """
        Initialize crawler.

        Args:
            resource: Where documents are listed and read from
            root: Root directory to crawl
            index_stop_words: Optional stop-word oracle; matching terms are
                dropped from every document before it is merged
            show_progress: Show a tqdm progress bar while indexing
        """
        self.resource = resource
        self.root = str(root)
        self.index_stop_words = index_stop_words
        self.show_progress = show_progress

    def files(self) -> List[str]:
        """
        Enumerate every file below the root.

        Uses an explicit stack rather than recursion. The order is whatever
        the resource lists and must not be relied upon.

        Raises:
            CrawlError: If a directory cannot be listed
        """
        files: List[str] = []
        stack: List[str] = [self.root]

        while stack:
            directory = stack.pop()
            try:
                entries = self.resource.list_directory(directory)
            except OSError as e:
                logger.error(f"Failed to list directory {directory}: {e}")
                raise CrawlError(directory, "failed to list directory") from e

            for entry in entries:
                if entry.is_directory:
                    stack.append(entry.path)
                else:
                    files.append(entry.path)

        return files

    def crawl(self) -> Tuple[DocumentTable, MemoryIndex]:
        """
        Build the document table and index for every file.

        The crawl is all-or-nothing: the first I/O error aborts it.

        Returns:
            (DocumentTable, MemoryIndex)

        Raises:
            CrawlError: If a directory cannot be listed or a file cannot be read
        """
        start_time = time.time()
        logger.info(f"Crawling {self.root}")

        files = self.files()
        logger.info(f"Found {len(files)} documents")

        doc_table = DocumentTable()
        mem_index = MemoryIndex()

        for path in tqdm(files, desc="Indexing documents", disable=not self.show_progress):
            try:
                content = self.resource.read_file(path)
            except OSError as e:
                logger.error(f"Failed to read {path}: {e}")
                raise CrawlError(path, "failed to read document") from e

            doc_index = DocumentIndex.from_bytes(path, content)
            if self.index_stop_words is not None:
                doc_index.remove_terms(self.index_stop_words)

            doc_id = doc_table.add(path)
            logger.debug(f"Indexed {path} as document {doc_id} ({len(doc_index)} terms)")
            mem_index.add(doc_index, doc_id)

        duration = time.time() - start_time
        logger.info(f"Crawl complete. Indexed {doc_table.count()} documents "
                    f"({mem_index.term_count()} terms) in {duration:.2f}s")

        return doc_table, mem_index


class FileSystemCrawler(ResourceCrawler):
    """Crawls a directory tree on the local filesystem."""

    def __init__(self, root: str, index_stop_words=None, show_progress: bool = False,
                 resource: Optional[Resource] = None):
        super().__init__(
            resource or FileSystemResource(),
            root,
            index_stop_words=index_stop_words,
            show_progress=show_progress,
        )
