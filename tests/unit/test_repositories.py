import pytest
from pymongo.errors import PyMongoError

from aerocms.content.hooks import DeliveryCacheInvalidationHook, MediaReferenceHook, SearchTextHook
from aerocms.content.markdown import MarkdownRenderer
from aerocms.core.database import database_manager
from aerocms.core.exceptions import ServiceUnavailableError
from aerocms.data.content import ContentRepository
from aerocms.data.hooks import SaveHookPipeline
from aerocms.data.media import MediaRepository
from aerocms.data.sites import SiteRepository
from aerocms.media.service import MediaReferenceValidator
from aerocms.models.blocks import HeroBlock, MarkdownBlock, RichTextBlock
from aerocms.models.content import ContentDocument, PublishingStatus
from aerocms.models.site import SiteDocument


@pytest.mark.asyncio
async def test_save_stamps_audit_fields(database):
    repository = ContentRepository(database)
    document = ContentDocument(name="Doc", slug="/doc", status=PublishingStatus.PUBLISHED)

    await repository.save(document, "alice")
    await repository.save(document, "bob")

    stored = database["content"].documents[0]
    assert stored["_id"] == document.id
    assert stored["status"] == "published"
    assert stored["created_by"] == "alice"
    assert stored["updated_by"] == "bob"
    assert (await repository.get_by_id(document.id)).status == PublishingStatus.PUBLISHED


@pytest.mark.asyncio
async def test_delete_missing_document(database):
    result = await ContentRepository(database).delete("nope")
    assert result.error_code == "not_found"


@pytest.mark.asyncio
async def test_repository_without_database_is_unavailable(monkeypatch):
    monkeypatch.setattr(database_manager, "mongodb", None)
    with pytest.raises(ServiceUnavailableError):
        await ContentRepository().get_by_id("x")


@pytest.mark.asyncio
async def test_database_errors_become_failed_results(database, monkeypatch):
    async def broken(*args, **kwargs):
        raise PyMongoError("disk full")

    monkeypatch.setattr(database["content"], "replace_one", broken)

    result = await ContentRepository(database).save(ContentDocument(name="x"))

    assert not result.success
    assert "disk full" in result.message


@pytest.mark.asyncio
async def test_site_lookup_by_hostname_and_default(database):
    repository = SiteRepository(database)
    main = SiteDocument(name="Main", hostnames=["Example.com"], is_default=True)
    blog = SiteDocument(name="Blog", hostnames=["blog.example.com"])
    await repository.save(main)
    await repository.save(blog)

    assert (await repository.get_by_hostname("BLOG.example.com")).id == blog.id
    assert (await repository.get_by_hostname("example.com")).id == main.id
    assert (await repository.get_default()).id == main.id
    assert await repository.get_by_hostname("other.org") is None


class RecordingCache:
    def __init__(self):
        self.deleted = []

    async def delete(self, key):
        self.deleted.append(key)


class FailingHook:
    async def before_save(self, document):
        raise RuntimeError("nope")


@pytest.mark.asyncio
async def test_save_hooks_build_search_text_and_invalidate_cache(database):
    cache = RecordingCache()
    hooks = SaveHookPipeline()
    hooks.register(SearchTextHook(MarkdownRenderer()))
    hooks.register(DeliveryCacheInvalidationHook(cache))
    repository = ContentRepository(database, hooks=hooks)
    hero = HeroBlock()
    hero.heading = "Big news"
    text = RichTextBlock(sort_order=1)
    text.html = "<p>Rich <b>body</b></p>"
    notes = MarkdownBlock(sort_order=2)
    notes.markdown = "*markdown* words"
    document = ContentDocument(name="Doc", slug="/doc", blocks=[hero, text, notes])

    await repository.save(document)

    assert "Big news" in document.search_text
    assert "Rich body" in document.search_text
    assert "markdown words" in document.search_text
    assert cache.deleted == ["delivery:/doc"]


@pytest.mark.asyncio
async def test_renaming_slug_invalidates_old_and_new_delivery_keys(database):
    cache = RecordingCache()
    hooks = SaveHookPipeline()
    hooks.register(DeliveryCacheInvalidationHook(cache))
    repository = ContentRepository(database, hooks=hooks)
    document = ContentDocument(name="Doc", slug="/doc")
    await repository.save(document)

    document.slug = "/documents"
    await repository.save(document)

    assert cache.deleted == ["delivery:/doc", "delivery:/documents", "delivery:/doc"]


@pytest.mark.asyncio
async def test_delete_invalidates_delivery_key(database):
    cache = RecordingCache()
    hooks = SaveHookPipeline()
    hooks.register(DeliveryCacheInvalidationHook(cache))
    repository = ContentRepository(database, hooks=hooks)
    document = ContentDocument(name="Doc", slug="/doc")
    await repository.save(document)

    result = await repository.delete(document.id)
    missing = await repository.delete("unknown")

    assert result.success
    assert not missing.success
    assert cache.deleted == ["delivery:/doc", "delivery:/doc"]


@pytest.mark.asyncio
async def test_failing_before_hook_aborts_save(database):
    hooks = SaveHookPipeline()
    hooks.register(FailingHook())

    result = await ContentRepository(database, hooks=hooks).save(ContentDocument(name="x"))

    assert result.message == "Save hook failed: nope"
    assert database["content"].documents == []


@pytest.mark.asyncio
async def test_media_reference_hook_cleans_rich_text(database):
    hooks = SaveHookPipeline()
    hooks.register(MediaReferenceHook(MediaReferenceValidator(MediaRepository(database))))
    block = RichTextBlock()
    block.html = '<p>keep</p><img data-mediaid="deleted" src="/media/x.png">'
    document = ContentDocument(name="Doc", slug="/doc", blocks=[block])

    await ContentRepository(database, hooks=hooks).save(document)

    assert document.blocks[0].html == "<p>keep</p>"
