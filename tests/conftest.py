"""Pytest configuration and fixtures."""

import os
from typing import Any, Dict, List, Optional

import pytest

# Set test environment
os.environ["LARAVEL_API"] = "http://store.test/api"
os.environ["SERPER_API_KEY"] = "test-serper-key"
os.environ["HF_API_KEY"] = "test-hf-key"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["JSON_LOGGING"] = "false"


class FakeSearchClient:
    """Search client returning canned organic results."""

    def __init__(self, results: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.results = results or []
        self.error = error
        self.queries: List[str] = []

    async def search(self, query: str) -> List[Dict[str, Any]]:
        self.queries.append(query)
        if self.error:
            raise self.error
        return self.results


class FakePageFetcher:
    """Page fetcher serving HTML from a dict; exception values are raised."""

    def __init__(self, pages: Dict[str, Any]):
        self.pages = pages
        self.fetched: List[str] = []

    async def fetch(self, url: str) -> str:
        self.fetched.append(url)
        page = self.pages[url]
        if isinstance(page, Exception):
            raise page
        return page


class FakeContentStore:
    """In-memory content store."""

    def __init__(self, article=None, fetch_error=None, publish_error=None):
        self.article = article
        self.fetch_error = fetch_error
        self.publish_error = publish_error
        self.published: List[tuple] = []

    async def fetch_latest_article(self):
        if self.fetch_error:
            raise self.fetch_error
        return self.article

    async def publish_article(self, article_id, metadata):
        if self.publish_error:
            raise self.publish_error
        self.published.append((article_id, metadata))


@pytest.fixture
def settings():
    """Settings built from explicit values, ignoring any local .env."""
    from rewrite_agent.config import Settings

    return Settings(
        _env_file=None,
        laravel_api="http://store.test/api",
        serper_api_key="test-serper-key",
        hf_api_key="test-hf-key",
    )


@pytest.fixture
def source_article():
    """Sample source article."""
    from rewrite_agent.models.article import SourceArticle

    return SourceArticle(
        id=42,
        title="Chatbots for customer service",
        content="Customer service platforms are adopting chatbots to cut response times. " * 20,
    )


@pytest.fixture
def well_formed_response():
    """Model output in the expected three-field format."""
    return (
        "TITLE: Smarter Support With Chatbots\n"
        "DESCRIPTION: How chatbots shorten response times.\n"
        "CONTENT: <h2>Smarter Support</h2>\n<p>Chatbots answer instantly.</p>"
    )
