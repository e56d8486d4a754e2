"""Reference page fetching and main-text extraction."""

import asyncio
from typing import List, Optional, Sequence

import aiohttp
from selectolax.parser import HTMLParser

from ..config import Settings
from ..logging import PerformanceLogger, get_logger, log_processing_stage
from ..utils import clean_text, extract_domain, truncate_text

logger = get_logger(__name__)

# Tried in order; the first selector yielding non-empty text wins.
CONTENT_SELECTORS = ("article", "main", "body")
NON_CONTENT_TAGS = ["script", "style", "noscript"]


class PageFetcher:
    """Fetches raw HTML over a shared aiohttp session."""

    def __init__(self, timeout_seconds: float = 10.0, user_agent: Optional[str] = None):
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        headers = {'User-Agent': self.user_agent} if self.user_agent else None
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            headers=headers,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session:
            await self.session.close()
            self.session = None

    async def fetch(self, url: str) -> str:
        """Fetch a page, raising on transport errors and non-2xx status.

        Raises:
            aiohttp.ClientError: If the request fails
            asyncio.TimeoutError: If the timeout elapses
        """
        if not self.session:
            raise RuntimeError("Session not initialized. Use async context manager.")

        async with self.session.get(url) as response:
            response.raise_for_status()
            content = await response.text(errors="replace")

        logger.debug(
            "URL fetched successfully",
            url=url,
            status=response.status,
            content_length=len(content)
        )
        return content


def extract_main_text(html: str, max_chars: int = 4000) -> str:
    """Extract whitespace-normalized body text from a page.

    Args:
        html: Raw page HTML
        max_chars: Maximum length of the returned text

    Returns:
        Text of the first non-empty of ``<article>``, ``<main>``, ``<body>``
    """
    parser = HTMLParser(html)
    parser.strip_tags(NON_CONTENT_TAGS)

    text = ""
    for selector in CONTENT_SELECTORS:
        text = clean_text(" ".join(node.text(separator=" ") for node in parser.css(selector)))
        if text:
            break

    return truncate_text(text, max_chars).rstrip()


class ContentScraper:
    """Turns reference URLs into bounded reference texts."""

    def __init__(self, fetcher: PageFetcher, max_chars: int = 4000):
        self.fetcher = fetcher
        self.max_chars = max_chars

    @classmethod
    def from_settings(cls, fetcher: PageFetcher, settings: Settings) -> "ContentScraper":
        return cls(fetcher, max_chars=settings.scrape_max_chars)

    async def scrape(self, url: str) -> str:
        """Scrape one URL; any failure yields an empty string."""
        try:
            html = await self.fetcher.fetch(url)
            return extract_main_text(html, self.max_chars)
        except Exception as e:
            logger.warning(
                "Scrape failed",
                url=url,
                domain=extract_domain(url),
                error_type=e.__class__.__name__,
                error=str(e),
            )
            return ""

    async def scrape_all(self, urls: Sequence[str]) -> List[str]:
        """Scrape URLs concurrently; results are positionally paired with ``urls``."""
        with PerformanceLogger("scrape_references", logger):
            texts = await asyncio.gather(*(self.scrape(url) for url in urls))

        logger.info(
            **log_processing_stage(
                stage="scrape_references",
                input_count=len(urls),
                output_count=sum(1 for t in texts if t),
            )
        )
        return list(texts)
