import asyncio
import sys
from contextlib import asynccontextmanager
from enum import IntEnum
from typing import AsyncIterator, Tuple

import click
import httpx
from pydantic import ValidationError

from .config import Settings, get_model_config, get_settings, validate_config
from .ingest.content_store import ContentStoreClient, ContentStoreError
from .ingest.scraper import ContentScraper, PageFetcher
from .ingest.search import ReferenceCollector, SerperSearchClient
from .logging import PerformanceLogger, get_logger, log_error, setup_logging
from .models.article import PublishedMetadata, RewriteResult
from .models.llm_client import LLMError, create_llm_client
from .processing.link_filter import LinkFilter
from .processing.text_utils import extract_metadata
from .rewrite import ArticleRewriter

logger = get_logger(__name__)


class RunOutcome(IntEnum):
    """Result of a pipeline run, doubling as the process exit code."""
    PUBLISHED = 0
    FETCH_FAILED = 1
    NOT_ENOUGH_LINKS = 2
    REWRITE_FAILED = 3
    PUBLISH_FAILED = 4
    CONFIG_INVALID = 5


def build_published_metadata(
    result: RewriteResult,
    references: Tuple[str, ...],
) -> PublishedMetadata:
    """Merge the rewrite with metadata derived from its HTML.

    Parsed rewrite fields win, then the first heading/paragraph of the
    content, then the rewrite's defaults.
    """
    extracted = extract_metadata(result)

    if result.title_parsed:
        title = result.title
    else:
        title = extracted.title or result.title

    if result.description_parsed:
        description = result.description
    else:
        description = extracted.description or result.description

    return PublishedMetadata(
        title=title,
        description=description,
        content=result.content,
        references=list(references),
    )


class PipelineRunner:
    """Runs one fetch, collect, scrape, rewrite, publish cycle."""

    def __init__(
        self,
        settings: Settings,
        content_store: ContentStoreClient,
        collector: ReferenceCollector,
        scraper: ContentScraper,
        rewriter: ArticleRewriter,
    ):
        self.settings = settings
        self.content_store = content_store
        self.collector = collector
        self.scraper = scraper
        self.rewriter = rewriter

    async def run(self) -> RunOutcome:
        """Run the pipeline for the newest article.

        Returns:
            The run outcome; every value other than PUBLISHED is an abort
            with nothing written to the content store.
        """
        with PerformanceLogger("full_pipeline", logger) as perf:
            outcome = await self._run_stages()
            perf.set_outcome(outcome.name, succeeded=outcome is RunOutcome.PUBLISHED)
        return outcome

    async def _run_stages(self) -> RunOutcome:
        # Stage 1: source article
        logger.info("Fetching latest article")
        try:
            article = await self.content_store.fetch_latest_article()
        except ContentStoreError as e:
            logger.error(**log_error(e, context="fetch_article"))
            return RunOutcome.FETCH_FAILED

        # Stage 2: reference links
        logger.info("Searching for reference links", topic=article.title)
        links = await self.collector.collect(
            article.title, limit=self.settings.reference_limit
        )
        if len(links) < self.settings.min_reference_links:
            logger.error(
                "Not enough reference links",
                found=len(links),
                required=self.settings.min_reference_links,
                article_id=article.id,
            )
            return RunOutcome.NOT_ENOUGH_LINKS

        # Stage 3: reference texts
        logger.info("Scraping reference articles", count=len(links))
        reference_texts = await self.scraper.scrape_all(links)

        # Stage 4: rewrite
        logger.info("Generating AI article", article_id=article.id)
        result = await self.rewriter.rewrite(article.content, reference_texts, links)
        if result is None or not result.content.strip():
            logger.error("AI content generation failed", article_id=article.id)
            return RunOutcome.REWRITE_FAILED

        # Stage 5: metadata backfill
        metadata = build_published_metadata(result, links)

        # Stage 6: publish
        logger.info("Publishing", article_id=article.id, title=metadata.title)
        try:
            await self.content_store.publish_article(article.id, metadata)
        except ContentStoreError as e:
            logger.error(**log_error(e, context="publish_article", article_id=article.id))
            return RunOutcome.PUBLISH_FAILED

        logger.info("AI article published successfully", article_id=article.id)
        return RunOutcome.PUBLISHED


@asynccontextmanager
async def build_pipeline(settings: Settings) -> AsyncIterator[PipelineRunner]:
    """Construct the runner and its collaborators, closing them on exit."""
    llm_client = create_llm_client(settings)
    excluded_domains = get_model_config().get_excluded_domains()
    timeout = httpx.Timeout(settings.http_timeout_seconds)
    headers = {"User-Agent": settings.user_agent}

    async with httpx.AsyncClient(
        base_url=settings.laravel_api or "", timeout=timeout, headers=headers
    ) as store_http, httpx.AsyncClient(
        timeout=timeout, headers=headers
    ) as search_http, PageFetcher(
        timeout_seconds=settings.scrape_timeout_seconds,
        user_agent=settings.user_agent,
    ) as fetcher:
        yield PipelineRunner(
            settings=settings,
            content_store=ContentStoreClient(store_http),
            collector=ReferenceCollector(
                SerperSearchClient(settings.serper_api_key, search_http, settings.search_url),
                LinkFilter(excluded_domains),
            ),
            scraper=ContentScraper.from_settings(fetcher, settings),
            rewriter=ArticleRewriter(settings, llm_client),
        )


async def run_pipeline(settings: Settings) -> RunOutcome:
    """Run the complete rewrite pipeline once."""
    try:
        async with build_pipeline(settings) as runner:
            return await runner.run()
    except LLMError as e:
        logger.error(**log_error(e, context="llm_client"))
        return RunOutcome.CONFIG_INVALID


@click.command()
@click.option("--mock", is_flag=True, help="Use a mock LLM client instead of the inference API")
@click.option("--log-level", default=None, help="Log level")
@click.option("--json-logs/--no-json-logs", default=None, help="Force JSON or console logs")
@click.option(
    "--validate-config",
    "validate_config_flag",
    is_flag=True,
    help="Validate configuration and exit",
)
@click.option("--model", help="LLM model to use (e.g. 'meta-llama/Llama-3.2-3B-Instruct').")
@click.option(
    "--include-reference-texts",
    is_flag=True,
    help="Send scraped reference texts to the model, not only their URLs",
)
def cli(
    mock,
    log_level,
    json_logs,
    validate_config_flag,
    model,
    include_reference_texts,
):
    """Article Rewrite Agent - rewrite the newest article using web references."""
    try:
        settings = get_settings()
    except (ValidationError, FileNotFoundError) as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(int(RunOutcome.CONFIG_INVALID))

    setup_logging(
        log_level=log_level or settings.log_level,
        json_logging=settings.json_logging if json_logs is None else json_logs,
    )

    if mock:
        settings.mock = True
    if model:
        settings.llm_model_override = model
    if include_reference_texts:
        settings.include_reference_texts = True

    if validate_config_flag:
        if validate_config(settings):
            click.echo("Configuration is valid")
            sys.exit(0)
        click.echo("Configuration validation failed", err=True)
        sys.exit(int(RunOutcome.CONFIG_INVALID))

    if not validate_config(settings):
        click.echo("Configuration validation failed. Use --validate-config for details.", err=True)
        sys.exit(int(RunOutcome.CONFIG_INVALID))

    outcome = asyncio.run(run_pipeline(settings))
    if outcome is not RunOutcome.PUBLISHED:
        click.echo(f"Run aborted: {outcome.name}", err=True)
    sys.exit(int(outcome))


if __name__ == "__main__":
    cli()
