"""End-to-end tests for the pipeline runner with fake collaborators."""

import pytest
from structlog.testing import capture_logs

from rewrite_agent.ingest.content_store import ContentStoreError
from rewrite_agent.ingest.scraper import ContentScraper
from rewrite_agent.ingest.search import ReferenceCollector, SearchError
from rewrite_agent.models.article import DEFAULT_DESCRIPTION, DEFAULT_TITLE, RewriteResult
from rewrite_agent.models.llm_client import LLMError, MockLLMClient
from rewrite_agent.orchestrator import PipelineRunner, RunOutcome, build_published_metadata
from rewrite_agent.rewrite import ArticleRewriter
from tests.conftest import FakeContentStore, FakePageFetcher, FakeSearchClient

LINKS = ["https://blog.one.com/post", "https://en.wikipedia.org/wiki/X", "https://news.two.com/story"]
PAGES = {
    "https://blog.one.com/post": "<article>First reference</article>",
    "https://news.two.com/story": "<main>Second reference</main>",
}


class FailingLLMClient(MockLLMClient):
    async def chat(self, messages, max_tokens=None):
        self.calls.append(messages)
        raise LLMError("service unavailable")


def _runner(settings, store, links=LINKS, llm=None, search_error=None, pages=PAGES):
    search = FakeSearchClient([{"link": link} for link in links], error=search_error)
    fetcher = FakePageFetcher(pages)
    llm = llm or MockLLMClient()
    runner = PipelineRunner(
        settings=settings,
        content_store=store,
        collector=ReferenceCollector(search),
        scraper=ContentScraper(fetcher),
        rewriter=ArticleRewriter(settings, llm),
    )
    return runner, search, fetcher, llm


@pytest.mark.asyncio
async def test_publishes_rewrite_with_collected_references(settings, source_article, well_formed_response):
    store = FakeContentStore(article=source_article)
    runner, search, fetcher, llm = _runner(settings, store, llm=MockLLMClient(well_formed_response))

    outcome = await runner.run()

    assert outcome is RunOutcome.PUBLISHED
    assert search.queries == [source_article.title]
    assert sorted(fetcher.fetched) == ["https://blog.one.com/post", "https://news.two.com/story"]

    article_id, metadata = store.published[0]
    assert article_id == 42
    assert metadata.title == "Smarter Support With Chatbots"
    assert metadata.description == "How chatbots shorten response times."
    assert metadata.content.startswith("<h2>Smarter Support</h2>")
    # The links shown to the model are exactly the ones disclosed on publish.
    assert metadata.references == ["https://blog.one.com/post", "https://news.two.com/story"]
    assert "Refs: https://blog.one.com/post, https://news.two.com/story" in llm.calls[0][1].content


@pytest.mark.asyncio
async def test_fetch_failure_aborts(settings):
    store = FakeContentStore(fetch_error=ContentStoreError("503"))
    runner, search, fetcher, llm = _runner(settings, store)

    assert await runner.run() is RunOutcome.FETCH_FAILED
    assert search.queries == []
    assert store.published == []


@pytest.mark.asyncio
async def test_single_acceptable_link_aborts_before_scrape(settings, source_article):
    store = FakeContentStore(article=source_article)
    links = ["https://blog.one.com/post", "https://www.youtube.com/watch?v=1"]
    runner, search, fetcher, llm = _runner(settings, store, links=links)

    assert await runner.run() is RunOutcome.NOT_ENOUGH_LINKS
    assert fetcher.fetched == []
    assert llm.calls == []
    assert store.published == []


@pytest.mark.asyncio
async def test_search_outage_aborts_for_lack_of_links(settings, source_article):
    store = FakeContentStore(article=source_article)
    runner, search, fetcher, llm = _runner(settings, store, search_error=SearchError("down"))

    assert await runner.run() is RunOutcome.NOT_ENOUGH_LINKS
    assert fetcher.fetched == []


@pytest.mark.asyncio
async def test_scrape_failures_do_not_abort(settings, source_article, well_formed_response):
    store = FakeContentStore(article=source_article)
    pages = {
        "https://blog.one.com/post": ConnectionError("reset"),
        "https://news.two.com/story": ConnectionError("reset"),
    }
    runner, *_ = _runner(settings, store, llm=MockLLMClient(well_formed_response), pages=pages)

    assert await runner.run() is RunOutcome.PUBLISHED
    assert len(store.published) == 1


@pytest.mark.asyncio
async def test_rewrite_failure_never_publishes(settings, source_article):
    store = FakeContentStore(article=source_article)
    llm = FailingLLMClient()
    runner, *_ = _runner(settings, store, llm=llm)

    assert await runner.run() is RunOutcome.REWRITE_FAILED
    assert len(llm.calls) == 1
    assert store.published == []


@pytest.mark.asyncio
async def test_blank_rewrite_content_aborts(settings, source_article):
    store = FakeContentStore(article=source_article)
    runner, *_ = _runner(settings, store, llm=MockLLMClient("   "))

    assert await runner.run() is RunOutcome.REWRITE_FAILED
    assert store.published == []


@pytest.mark.asyncio
async def test_publish_failure(settings, source_article):
    store = FakeContentStore(article=source_article, publish_error=ContentStoreError("422"))
    runner, *_ = _runner(settings, store)

    assert await runner.run() is RunOutcome.PUBLISH_FAILED


@pytest.mark.asyncio
async def test_unformatted_response_backfilled_from_html(settings, source_article):
    store = FakeContentStore(article=source_article)
    raw = "<h1>Derived Title</h1><p>Derived description.</p><p>More.</p>"
    runner, *_ = _runner(settings, store, llm=MockLLMClient(raw))

    assert await runner.run() is RunOutcome.PUBLISHED

    _, metadata = store.published[0]
    assert metadata.title == "Derived Title"
    assert metadata.description == "Derived description."
    assert metadata.content == raw


class TestBuildPublishedMetadata:
    """Precedence of rewrite fields, HTML-derived fields and defaults."""

    def test_parsed_fields_win(self):
        result = RewriteResult(
            title="Model title",
            description="Model description",
            content="<h1>Heading</h1><p>Para</p>",
            title_parsed=True,
            description_parsed=True,
        )
        metadata = build_published_metadata(result, ("https://a.com/1",))

        assert metadata.title == "Model title"
        assert metadata.description == "Model description"
        assert metadata.references == ["https://a.com/1"]

    def test_defaults_when_nothing_matches(self):
        result = RewriteResult(content="plain text only")
        metadata = build_published_metadata(result, ())

        assert metadata.title == DEFAULT_TITLE
        assert metadata.description == DEFAULT_DESCRIPTION
        assert metadata.references == []

    def test_mixed(self):
        result = RewriteResult(
            title="Model title",
            content="<h2>Heading</h2><p>Para</p>",
            title_parsed=True,
        )
        metadata = build_published_metadata(result, ())

        assert metadata.title == "Model title"
        assert metadata.description == "Para"


@pytest.mark.asyncio
async def test_abort_logged_with_outcome(settings):
    store = FakeContentStore(fetch_error=ContentStoreError("503"))
    runner, *_ = _runner(settings, store)

    with capture_logs() as logs:
        await runner.run()

    timing = [entry for entry in logs if entry.get("operation") == "full_pipeline"]
    assert [entry["event"] for entry in timing] == ["operation_started", "operation_aborted"]
    assert timing[-1]["outcome"] == "FETCH_FAILED"


@pytest.mark.asyncio
async def test_success_logged_with_outcome(settings, source_article, well_formed_response):
    store = FakeContentStore(article=source_article)
    runner, *_ = _runner(settings, store, llm=MockLLMClient(well_formed_response))

    with capture_logs() as logs:
        await runner.run()

    completed = [entry for entry in logs if entry["event"] == "operation_completed"
                 and entry.get("operation") == "full_pipeline"]
    assert completed[0]["outcome"] == "PUBLISHED"
