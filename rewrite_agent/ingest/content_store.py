"""Client for the content store that owns source and rewritten articles."""

import time

import httpx
from pydantic import ValidationError

from ..logging import get_logger, log_api_request
from ..models.article import PublishedMetadata, SourceArticle

logger = get_logger(__name__)


class ContentStoreError(Exception):
    """Content store request error."""
    pass


class ContentStoreClient:
    """Reads the newest article and writes its AI version back."""

    def __init__(self, http_client: httpx.AsyncClient):
        """Initialize the client.

        Args:
            http_client: Client whose ``base_url`` is the content store API root
        """
        self.http_client = http_client

    async def fetch_latest_article(self) -> SourceArticle:
        """Fetch the newest article.

        Raises:
            ContentStoreError: On transport/HTTP errors or a malformed body
        """
        start_time = time.time()
        try:
            response = await self.http_client.get("/articles-latest")
            response.raise_for_status()
            article = SourceArticle.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            raise ContentStoreError(f"Failed to fetch latest article: {e}") from e

        logger.info(**log_api_request(
            "GET",
            str(response.url),
            status_code=response.status_code,
            response_time=time.time() - start_time,
            article_id=article.id,
        ))
        return article

    async def publish_article(self, article_id: int | str, metadata: PublishedMetadata) -> None:
        """Store the rewritten article against its source article.

        ``references`` is sent as a JSON array, not a string-encoded list.

        Raises:
            ContentStoreError: On transport or HTTP errors
        """
        start_time = time.time()
        try:
            response = await self.http_client.post(
                f"/articles/{article_id}/ai-version",
                json=metadata.model_dump(),
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ContentStoreError(f"Failed to publish article {article_id}: {e}") from e

        logger.info(**log_api_request(
            "POST",
            str(response.url),
            status_code=response.status_code,
            response_time=time.time() - start_time,
            article_id=article_id,
            references=len(metadata.references),
        ))
