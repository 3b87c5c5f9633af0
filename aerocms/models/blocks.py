"""Content blocks: schema-defined fragments assembled into pages.

Every block keeps its data in the ``properties`` bag so documents written by
newer block types survive a round trip through older code. Typed accessors on
the subclasses read and write that bag.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Optional, Type

from pydantic import BaseModel, Field, field_validator

from aerocms.core.exceptions import ValidationError


def block_property(alias: str, default: Any = None, convert: Optional[Callable[[Any], Any]] = None) -> property:
    def getter(self: "Block") -> Any:
        value = self.properties.get(alias, default)
        if convert is not None:
            return convert(value)
        return value

    def setter(self: "Block", value: Any) -> None:
        self.properties[alias] = value

    return property(getter, setter)


class Block(BaseModel):
    """Generic block. Unknown block types load as this class."""

    block_type: ClassVar[str] = ""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: str = ""
    sort_order: int = 0
    properties: Dict[str, Any] = Field(default_factory=dict)
    children: List["Block"] = Field(default_factory=list)

    def model_post_init(self, __context: Any) -> None:
        if not self.type and self.block_type:
            self.type = self.block_type

    @field_validator("children", mode="after")
    @classmethod
    def _type_children(cls, value: List["Block"]) -> List["Block"]:
        return [as_typed_block(child) for child in value]

    @property
    def is_composite(self) -> bool:
        return False

    def ordered_children(self) -> List["Block"]:
        return sorted(self.children, key=lambda child: child.sort_order)

    def walk(self):
        """Yield this block and every descendant, depth first."""

        yield self
        for child in self.ordered_children():
            yield from child.walk()


class CompositeBlock(Block):
    max_children: ClassVar[Optional[int]] = None
    allowed_child_types: ClassVar[Optional[List[str]]] = None
    allow_nested_composites: ClassVar[bool] = True

    @property
    def is_composite(self) -> bool:
        return True

    def add_child(self, block: Block) -> Block:
        if self.max_children is not None and len(self.children) >= self.max_children:
            raise ValidationError(f"{self.type} accepts at most {self.max_children} children")
        if self.allowed_child_types and block.type not in self.allowed_child_types:
            raise ValidationError(f"{block.type} is not allowed inside {self.type}")
        if not self.allow_nested_composites and block.is_composite:
            raise ValidationError(f"{self.type} does not allow nested composite blocks")
        block.sort_order = len(self.children)
        self.children.append(block)
        return block


BLOCK_REGISTRY: Dict[str, Type[Block]] = {}


def register_block(cls: Type[Block]) -> Type[Block]:
    BLOCK_REGISTRY[cls.block_type] = cls
    return cls


def block_from_dict(data: Dict[str, Any]) -> Block:
    block_cls = BLOCK_REGISTRY.get(data.get("type", ""), Block)
    return block_cls.model_validate(data)


def as_typed_block(block: Block) -> Block:
    block_cls = BLOCK_REGISTRY.get(block.type, Block)
    if type(block) is block_cls:
        return block
    return block_cls.model_validate(block.model_dump())


def _to_int(default: int) -> Callable[[Any], int]:
    def convert(value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    return convert


@register_block
class RichTextBlock(Block):
    block_type: ClassVar[str] = "richTextBlock"

    html = block_property("html", "")


@register_block
class HtmlBlock(Block):
    block_type: ClassVar[str] = "htmlBlock"

    html = block_property("html", "")


@register_block
class MarkdownBlock(Block):
    block_type: ClassVar[str] = "markdownBlock"

    markdown = block_property("markdown", "")


@register_block
class ImageBlock(Block):
    block_type: ClassVar[str] = "imageBlock"

    media_id = block_property("mediaId")
    alt = block_property("alt", "")
    url = block_property("url", "")


@register_block
class HeroBlock(Block):
    block_type: ClassVar[str] = "heroBlock"

    heading = block_property("heading", "")
    subtext = block_property("subtext", "")
    call_to_action_text = block_property("callToActionText", "")
    call_to_action_url = block_property("callToActionUrl", "")


@register_block
class QuoteBlock(Block):
    block_type: ClassVar[str] = "quoteBlock"

    quote = block_property("quote", "")
    attribution = block_property("attribution", "")


@register_block
class DivBlock(CompositeBlock):
    block_type: ClassVar[str] = "divBlock"

    css_class = block_property("cssClass", "")


@register_block
class GridBlock(CompositeBlock):
    block_type: ClassVar[str] = "gridBlock"
    max_children: ClassVar[Optional[int]] = 12
    allowed_child_types: ClassVar[Optional[List[str]]] = []
    allow_nested_composites: ClassVar[bool] = False

    columns = block_property("columns", 1, _to_int(1))


class SectionLayout(str, Enum):
    FULL = "full"
    TWO_COLUMN = "twoColumn"
    THREE_COLUMN = "threeColumn"
    SIDEBAR = "sidebar"

    @property
    def column_count(self) -> int:
        return {"full": 1, "twoColumn": 2, "threeColumn": 3, "sidebar": 2}[self.value]


@register_block
class ColumnBlock(CompositeBlock):
    block_type: ClassVar[str] = "columnBlock"
    allow_nested_composites: ClassVar[bool] = False

    col_index = block_property("colIndex", 0, _to_int(0))


@register_block
class SectionBlock(CompositeBlock):
    block_type: ClassVar[str] = "sectionBlock"
    allowed_child_types: ClassVar[Optional[List[str]]] = [ColumnBlock.block_type]
    allow_nested_composites: ClassVar[bool] = False

    @property
    def layout(self) -> SectionLayout:
        try:
            return SectionLayout(self.properties.get("layout", SectionLayout.FULL.value))
        except ValueError:
            return SectionLayout.FULL

    @layout.setter
    def layout(self, value: SectionLayout | str) -> None:
        self.properties["layout"] = SectionLayout(value).value

    def initialise_columns(self) -> None:
        """Replace the children with one empty column per layout column."""

        self.children = []
        for index in range(self.layout.column_count):
            column = ColumnBlock(sort_order=index)
            column.col_index = index
            self.children.append(column)

    def column(self, col_index: int) -> Optional[ColumnBlock]:
        for child in self.children:
            if isinstance(child, ColumnBlock) and child.col_index == col_index:
                return child
        return None


Block.model_rebuild()

__all__ = [
    "BLOCK_REGISTRY",
    "Block",
    "ColumnBlock",
    "CompositeBlock",
    "DivBlock",
    "GridBlock",
    "HeroBlock",
    "HtmlBlock",
    "ImageBlock",
    "MarkdownBlock",
    "QuoteBlock",
    "RichTextBlock",
    "SectionBlock",
    "SectionLayout",
    "as_typed_block",
    "block_from_dict",
    "register_block",
]
