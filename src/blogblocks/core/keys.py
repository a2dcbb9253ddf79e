"""Stable `_key` assignment for blocks, spans, and mark definitions"""

import secrets
import time

from blogblocks.core.models import Block, CodeBlock, ImageBlock, TextBlock


def generate_key(prefix: str = "key") -> str:
    """`<prefix>-<random>-<ms timestamp>`; unique within a document, not across sessions."""
    return f"{prefix}-{secrets.token_hex(5)}-{time.time_ns() // 1_000_000}"


def assign_keys(blocks: list[Block]) -> list[Block]:
    """Fill in missing keys in place and return the same list.

    Existing keys are never replaced, so running this on an already keyed
    document is a no-op.
    """
    for block in blocks:
        if isinstance(block, ImageBlock):
            block.key = block.key or generate_key("image")
            continue
        block.key = block.key or generate_key("block")
        if isinstance(block, TextBlock):
            for span in block.children:
                span.key = span.key or generate_key("span")
            for mark_def in block.mark_defs:
                mark_def.key = mark_def.key or generate_key("mark")
        elif isinstance(block, CodeBlock):
            block.code.key = block.code.key or generate_key("code")
    return blocks
