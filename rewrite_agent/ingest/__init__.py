"""Collaborator clients: content store, web search and page scraping."""

from .content_store import ContentStoreClient, ContentStoreError
from .scraper import ContentScraper, PageFetcher, extract_main_text
from .search import ReferenceCollector, SearchError, SerperSearchClient

__all__ = [
    'ContentStoreClient',
    'ContentStoreError',
    'ContentScraper',
    'PageFetcher',
    'extract_main_text',
    'ReferenceCollector',
    'SearchError',
    'SerperSearchClient',
]
