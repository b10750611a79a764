"""Document discovery."""

from .crawler import Crawler, DirEntry, FileSystemCrawler, FileSystemResource, Resource, ResourceCrawler

__all__ = ['Crawler', 'DirEntry', 'FileSystemCrawler', 'FileSystemResource', 'Resource', 'ResourceCrawler']
