"""Section and block arrangement on a page.

These operations mutate the page in memory; callers persist it with
``PageService.save_page``.
"""

from __future__ import annotations

from typing import List, Optional

from aerocms.core.exceptions import NotFoundError
from aerocms.models.blocks import Block, ColumnBlock, SectionBlock, SectionLayout
from aerocms.models.content import ContentDocument


class SectionService:
    def add_section(self, page: ContentDocument, layout: SectionLayout | str = SectionLayout.FULL) -> SectionBlock:
        section = SectionBlock(sort_order=len(page.blocks))
        section.layout = layout
        section.initialise_columns()
        page.blocks.append(section)
        return section

    def remove_section(self, page: ContentDocument, section_id: str) -> bool:
        section = _find_section(page, section_id)
        if section is None:
            return False
        page.blocks.remove(section)
        _renumber(page.blocks)
        return True

    def move_section(self, page: ContentDocument, section_id: str, direction: int) -> bool:
        """Swap the section with its neighbour; ``direction`` is -1 (up) or +1 (down)."""

        ordered = page.ordered_blocks()
        index = next((i for i, block in enumerate(ordered) if block.id == section_id), None)
        if index is None:
            return False
        target = index + (1 if direction > 0 else -1)
        if target < 0 or target >= len(ordered):
            return False
        current, neighbour = ordered[index], ordered[target]
        current.sort_order, neighbour.sort_order = neighbour.sort_order, current.sort_order
        page.blocks = sorted(page.blocks, key=lambda block: block.sort_order)
        return True

    def add_block(self, page: ContentDocument, section_id: str, col_index: int, block: Block) -> Block:
        section = _find_section(page, section_id)
        if section is None:
            raise NotFoundError(f"Section {section_id} not found")
        column = section.column(col_index)
        if column is None:
            raise NotFoundError(f"Column {col_index} not found in section {section_id}")
        block.sort_order = len(column.children)
        column.children.append(block)
        return block

    def remove_block(self, page: ContentDocument, section_id: str, block_id: str) -> bool:
        section = _find_section(page, section_id)
        if section is None:
            return False
        for column in section.children:
            if not isinstance(column, ColumnBlock):
                continue
            for child in column.children:
                if child.id == block_id:
                    column.children.remove(child)
                    _renumber(column.children)
                    return True
        return False


def _find_section(page: ContentDocument, section_id: str) -> Optional[SectionBlock]:
    for block in page.blocks:
        if block.id == section_id and isinstance(block, SectionBlock):
            return block
    return None


def _renumber(blocks: List[Block]) -> None:
    for index, block in enumerate(sorted(blocks, key=lambda item: item.sort_order)):
        block.sort_order = index
