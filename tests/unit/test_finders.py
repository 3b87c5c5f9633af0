import pytest

from aerocms.content.finders import (
    ContentFinderContext,
    ContentFinderPipeline,
    DefaultContentFinder,
    NotFoundContentFinder,
)
from aerocms.data.content import ContentRepository
from aerocms.models.content import ContentDocument, PublishingStatus
from aerocms.models.site import SiteDocument


async def _store(repository, **fields):
    document = ContentDocument(content_type_alias="page", **fields)
    await repository.save(document)
    return document


@pytest.mark.asyncio
async def test_published_page_is_found(database, clock, past):
    repository = ContentRepository(database)
    page = await _store(repository, name="About", slug="/about", status=PublishingStatus.PUBLISHED, published_at=past)

    found = await DefaultContentFinder(repository, clock).find(ContentFinderContext(slug="/about"))

    assert found is not None
    assert found.id == page.id


@pytest.mark.asyncio
async def test_future_and_expired_pages_are_hidden(database, clock, past, future):
    repository = ContentRepository(database)
    await _store(repository, name="Soon", slug="/soon", status=PublishingStatus.PUBLISHED, published_at=future)
    await _store(
        repository,
        name="Gone",
        slug="/gone",
        status=PublishingStatus.PUBLISHED,
        published_at=past,
        expires_at=clock.now(),
    )
    await _store(repository, name="Draft", slug="/draft", status=PublishingStatus.DRAFT, published_at=past)

    finder = DefaultContentFinder(repository, clock)

    for slug in ("/soon", "/gone", "/draft", "/missing"):
        assert await finder.find(ContentFinderContext(slug=slug)) is None



@pytest.mark.asyncio
async def test_page_published_exactly_now_is_visible(database, clock):
    repository = ContentRepository(database)
    await _store(repository, name="Now", slug="/now", status=PublishingStatus.PUBLISHED, published_at=clock.now())

    found = await DefaultContentFinder(repository, clock).find(ContentFinderContext(slug="/now"))

    assert found is not None


@pytest.mark.asyncio
async def test_published_page_without_publish_date_is_hidden(database, clock):
    repository = ContentRepository(database)
    await _store(repository, name="Undated", slug="/undated", status=PublishingStatus.PUBLISHED, published_at=None)

    finder = DefaultContentFinder(repository, clock)

    assert await finder.find(ContentFinderContext(slug="/undated")) is None
    assert await finder.find(ContentFinderContext(slug="/undated", is_preview=True)) is not None

@pytest.mark.asyncio
async def test_preview_ignores_publishing_rules(database, clock):
    repository = ContentRepository(database)
    await _store(repository, name="Draft", slug="/draft")

    found = await DefaultContentFinder(repository, clock).find(ContentFinderContext(slug="/draft", is_preview=True))

    assert found is not None
    assert found.status == PublishingStatus.DRAFT


@pytest.mark.asyncio
async def test_not_found_page_sets_404(database, clock, past):
    repository = ContentRepository(database)
    missing = await _store(
        repository, name="Not found", slug="/404", status=PublishingStatus.PUBLISHED, published_at=past
    )
    site = SiteDocument(name="Main", not_found_page_id=missing.id)
    pipeline = ContentFinderPipeline([NotFoundContentFinder(repository, clock), DefaultContentFinder(repository, clock)])
    context = ContentFinderContext(slug="/nope", site=site)

    found = await pipeline.execute(context)

    assert found.id == missing.id
    assert context.status_code == 404


class StubFinder:
    def __init__(self, priority, result, calls):
        self.priority = priority
        self.result = result
        self.calls = calls

    async def find(self, context):
        self.calls.append(self.priority)
        return self.result


@pytest.mark.asyncio
async def test_pipeline_runs_in_ascending_priority_and_stops_at_first_hit():
    calls = []
    hit = ContentDocument(name="Hit", slug="/hit")
    pipeline = ContentFinderPipeline(
        [StubFinder(300, None, calls), StubFinder(10, None, calls), StubFinder(50, hit, calls)]
    )

    found = await pipeline.execute(ContentFinderContext(slug="/hit"))

    assert found is hit
    assert calls == [10, 50]


@pytest.mark.asyncio
async def test_pipeline_returns_none_when_nothing_matches():
    pipeline = ContentFinderPipeline([StubFinder(1, None, [])])
    assert await pipeline.execute(ContentFinderContext(slug="/x")) is None
