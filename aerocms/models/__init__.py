from .blocks import (
    Block,
    ColumnBlock,
    DivBlock,
    GridBlock,
    HeroBlock,
    HtmlBlock,
    ImageBlock,
    MarkdownBlock,
    QuoteBlock,
    RichTextBlock,
    SectionBlock,
    SectionLayout,
)
from .content import ContentDocument, ContentTypeDocument, ContentTypeProperty, PropertyType, PublishingStatus
from .languages import DictionaryItem, Language
from .media import MediaDocument, MediaType
from .seo import SeoCheckItem, SeoCheckResult, SeoCheckStatus, SeoRedirectDocument
from .site import SiteDocument
from .tags import Tag, TagItem
from .user import CmsRoles, User, UserDocument

__all__ = [
    "Block",
    "CmsRoles",
    "ColumnBlock",
    "ContentDocument",
    "ContentTypeDocument",
    "ContentTypeProperty",
    "DictionaryItem",
    "DivBlock",
    "GridBlock",
    "HeroBlock",
    "HtmlBlock",
    "ImageBlock",
    "Language",
    "MarkdownBlock",
    "MediaDocument",
    "MediaType",
    "PropertyType",
    "PublishingStatus",
    "QuoteBlock",
    "RichTextBlock",
    "SectionBlock",
    "SectionLayout",
    "SeoCheckItem",
    "SeoCheckResult",
    "SeoCheckStatus",
    "SeoRedirectDocument",
    "SiteDocument",
    "Tag",
    "TagItem",
    "User",
    "UserDocument",
]
