import pytest

from aerocms.content.rendering import BlockRenderer
from aerocms.models.blocks import HeroBlock, ImageBlock
from aerocms.models.content import ContentDocument
from aerocms.models.seo import SeoCheckResult, SeoCheckStatus
from aerocms.seo.analyzer import SeoAnalyzer
from aerocms.seo.checks import HeadingOneCheck, MetaDescriptionCheck, PageTitleCheck, WordCountCheck


def _statuses(result):
    return {item.check_alias: item.status for item in result.checks}


def test_score_formula():
    result = SeoCheckResult()
    assert result.score == 100

    result.add("a", SeoCheckStatus.PASS, "")
    result.add("b", SeoCheckStatus.WARNING, "")
    result.add("c", SeoCheckStatus.FAIL, "")
    result.add("d", SeoCheckStatus.INFO, "")

    # 125 penalty over 4 checks
    assert result.score == 68


def test_score_is_never_negative():
    result = SeoCheckResult()
    result.add("a", SeoCheckStatus.FAIL, "")
    assert result.score == 0


@pytest.mark.parametrize(
    "name, expected",
    [
        ("", SeoCheckStatus.FAIL),
        ("Short", SeoCheckStatus.WARNING),
        ("A perfectly sized page title", SeoCheckStatus.PASS),
        ("x" * 61, SeoCheckStatus.WARNING),
    ],
)
def test_page_title_lengths(name, expected):
    result = SeoCheckResult()
    PageTitleCheck().run(ContentDocument(name=name), None, result)
    assert result.checks[0].status == expected


def test_meta_description_messages():
    result = SeoCheckResult()
    MetaDescriptionCheck().run(ContentDocument(properties={"metaDescription": "Too short"}), None, result)
    assert result.checks[0].message.startswith("Meta description is too short")


def test_word_count():
    empty, short, enough = SeoCheckResult(), SeoCheckResult(), SeoCheckResult()
    WordCountCheck().run(ContentDocument(), None, empty)
    WordCountCheck().run(ContentDocument(search_text="just a few words"), None, short)
    WordCountCheck().run(ContentDocument(search_text="word " * 300), None, enough)

    assert empty.checks[0].message == "Page content is empty."
    assert short.checks[0].message == "Word count (4) is below recommended minimum of 300."
    assert enough.checks[0].status == SeoCheckStatus.PASS


def test_heading_one_check():
    check = HeadingOneCheck()
    cases = {
        None: SeoCheckStatus.INFO,
        "<h1>One</h1>": SeoCheckStatus.PASS,
        "<h1>One</h1><h1>Two</h1>": SeoCheckStatus.WARNING,
        "<h2>None</h2>": SeoCheckStatus.FAIL,
    }
    for html, expected in cases.items():
        result = SeoCheckResult()
        check.run(ContentDocument(), html, result)
        assert result.checks[0].status == expected


def test_analyzer_renders_blocks_when_html_missing():
    hero = HeroBlock()
    hero.heading = "Welcome"
    image = ImageBlock(sort_order=1)
    image.url = "/media/a.png"
    document = ContentDocument(name="Welcome to the site", blocks=[hero, image])

    result = SeoAnalyzer(renderer=BlockRenderer()).analyze(document)

    statuses = _statuses(result)
    assert statuses["headingOne"] == SeoCheckStatus.PASS
    assert statuses["imageAltText"] == SeoCheckStatus.WARNING
    assert result.content_id == document.id
    assert 0 <= result.score < 100
