"""Web search client and reference link collection."""

import time
from collections.abc import Callable
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..logging import get_logger, log_api_request, log_processing_stage
from ..processing.link_filter import LinkFilter
from ..utils import is_valid_url

logger = get_logger(__name__)


class SearchError(Exception):
    """Search provider error."""
    pass


class SerperSearchClient:
    """Serper.dev Google search client."""

    def __init__(
        self,
        api_key: Optional[str],
        http_client: httpx.AsyncClient,
        endpoint: str = "https://google.serper.dev/search",
    ):
        self.api_key = api_key
        self.http_client = http_client
        self.endpoint = endpoint

    async def search(self, query: str) -> List[Dict[str, Any]]:
        """Run a query and return the organic results in ranking order.

        Raises:
            SearchError: On missing credentials, transport or HTTP errors,
                or a response without an organic result list
        """
        if not self.api_key:
            raise SearchError("Serper API key is not set.")

        start_time = time.time()
        try:
            response = await self.http_client.post(
                self.endpoint,
                json={"q": query},
                headers={
                    "X-API-KEY": self.api_key,
                    "Content-Type": "application/json",
                },
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SearchError(f"Search request failed: {e}") from e

        logger.debug(**log_api_request(
            "POST",
            self.endpoint,
            status_code=response.status_code,
            response_time=time.time() - start_time,
        ))

        organic = data.get("organic") if isinstance(data, dict) else None
        if not isinstance(organic, list):
            raise SearchError("Search response has no organic results")
        return organic


class ReferenceCollector:
    """Selects the top acceptable reference links for a topic."""

    def __init__(
        self,
        search_client: SerperSearchClient,
        link_filter: Optional[Callable[[str], bool]] = None,
    ):
        self.search_client = search_client
        self.link_filter = link_filter or LinkFilter()

    async def collect(self, topic: str, limit: int = 2) -> Tuple[str, ...]:
        """Collect up to ``limit`` acceptable links in the provider's order.

        Search failures are logged and yield an empty tuple.

        Args:
            topic: Search query, usually the article title
            limit: Maximum number of links to return

        Returns:
            Immutable sequence of candidate links
        """
        try:
            results = await self.search_client.search(topic)
        except SearchError as e:
            logger.error("Search failed", topic=topic, error=str(e))
            return ()

        links = [
            r.get("link") for r in results
            if isinstance(r, dict) and isinstance(r.get("link"), str) and is_valid_url(r["link"])
        ]
        accepted = tuple(link for link in links if self.link_filter(link))[:limit]

        logger.info(
            **log_processing_stage(
                stage="collect_links",
                input_count=len(links),
                output_count=len(accepted),
                topic=topic,
            )
        )
        return accepted
