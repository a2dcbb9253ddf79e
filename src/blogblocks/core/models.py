"""Structured content models: blocks, spans, marks, and their stored JSON shape"""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from loguru import logger
from pydantic import (
    BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter, ValidationError,
    field_serializer, field_validator, model_validator,
)


STYLE_MARKS = frozenset({"strong", "em", "code"})


@dataclass(frozen=True)
class StyleMark:
    """Inline decorator applied to a span (strong, em, code)."""
    name: str


@dataclass(frozen=True)
class LinkMark:
    """Reference to a MarkDef in the owning block's markDefs."""
    key: str


Mark = Union[StyleMark, LinkMark]


def to_mark(value: Any) -> Mark:
    """Normalize a stored mark (bare string or legacy object) into a Mark."""
    if isinstance(value, (StyleMark, LinkMark)):
        return value
    if isinstance(value, dict):
        return LinkMark(value.get("_key") or value.get("key") or "")
    value = str(value)
    return StyleMark(value) if value in STYLE_MARKS else LinkMark(value)


class BlockStyle(str, Enum):
    """Text block styles understood by the store and renderer"""
    normal = "normal"
    h1 = "h1"
    h2 = "h2"
    h3 = "h3"
    h4 = "h4"
    blockquote = "blockquote"


class ListItem(str, Enum):
    bullet = "bullet"
    number = "number"


class _Node(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: Optional[str] = Field(default=None, alias="_key")


class MarkDef(_Node):
    """Annotation referenced by span marks; only `link` definitions render as anchors."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str = Field(default="link", alias="_type")
    href: Optional[str] = None


class Span(_Node):
    type: Literal["span"] = Field(default="span", alias="_type")
    text: str
    marks: list[Mark] = Field(default_factory=list)

    @field_validator("marks", mode="before")
    @classmethod
    def _normalize_marks(cls, value: Any) -> list[Mark]:
        return [to_mark(m) for m in value or []]

    @field_serializer("marks")
    def _serialize_marks(self, marks: list[Mark]) -> list[str]:
        return [m.name if isinstance(m, StyleMark) else m.key for m in marks]


class TextBlock(_Node):
    type: Literal["block"] = Field(default="block", alias="_type")
    style: BlockStyle = BlockStyle.normal
    list_item: Optional[ListItem] = Field(default=None, alias="listItem")
    children: list[Span] = Field(default_factory=list)
    mark_defs: list[MarkDef] = Field(default_factory=list, alias="markDefs")

    @model_validator(mode="before")
    @classmethod
    def _promote_object_marks(cls, data: Any) -> Any:
        """Move hrefs carried by legacy object marks into markDefs."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        mark_defs = [d for d in data.get("markDefs") or data.get("mark_defs") or []]
        known = {d.get("_key") if isinstance(d, dict) else d.key for d in mark_defs}
        for child in data.get("children") or []:
            if not isinstance(child, dict):
                continue
            for mark in child.get("marks") or []:
                if not isinstance(mark, dict):
                    continue
                key = mark.get("_key") or mark.get("key")
                if key and mark.get("href") and key not in known:
                    mark_defs.append({"_key": key, "_type": "link", "href": mark["href"]})
                    known.add(key)
        data.pop("mark_defs", None)
        data["markDefs"] = mark_defs
        return data

    @property
    def plain_text(self) -> str:
        return "".join(s.text for s in self.children)


class AssetRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["reference"] = Field(default="reference", alias="_type")
    ref: str = Field(alias="_ref")
    url: Optional[str] = None


class ImageBlock(_Node):
    type: Literal["image"] = Field(default="image", alias="_type")
    asset: Optional[AssetRef] = None
    image_url: Optional[str] = Field(default=None, alias="_imageUrl")
    url: Optional[str] = None
    alt: str = ""

    @property
    def src(self) -> Optional[str]:
        """Best available URL: resolved asset, explicit url, then the temporary import URL."""
        return (self.asset.url if self.asset else None) or self.url or self.image_url


class CodeContent(_Node):
    type: Optional[str] = Field(default=None, alias="_type")
    code: str
    language: str = "text"
    filename: Optional[str] = None


class CodeBlock(_Node):
    type: Literal["codeBlock"] = Field(default="codeBlock", alias="_type")
    code: CodeContent
    filename: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _wrap_bare_code(cls, data: Any) -> Any:
        """Accept the legacy `code` shape: `_type: code` with code and language at the top level."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("_type") == "code":
            data["_type"] = "codeBlock"
        if isinstance(data.get("code"), str):
            data["code"] = {"code": data["code"], "language": data.get("language") or "text"}
            data.pop("language", None)
        return data


def _block_tag(value: Any) -> Optional[str]:
    kind = value.get("_type") if isinstance(value, dict) else getattr(value, "type", None)
    return "codeBlock" if kind == "code" else kind


Block = Annotated[
    Union[
        Annotated[TextBlock, Tag("block")],
        Annotated[ImageBlock, Tag("image")],
        Annotated[CodeBlock, Tag("codeBlock")],
    ],
    Discriminator(_block_tag),
]

_BLOCK_ADAPTER = TypeAdapter(Block)
BLOCK_TYPES = {"block", "image", "codeBlock"}


def load_blocks(raw: list[dict] | None) -> list[Block]:
    """Validate a stored content list into Blocks, skipping unknown or malformed blocks."""
    blocks = []
    for item in raw or []:
        if _block_tag(item) not in BLOCK_TYPES:
            logger.warning(f"Skipping unsupported block type: {_block_tag(item)!r}")
            continue
        try:
            blocks.append(_BLOCK_ADAPTER.validate_python(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {_block_tag(item)!r} block: {e.error_count()} validation error(s)")
    return blocks


def dump_blocks(blocks: list[Block]) -> list[dict]:
    """Serialize Blocks to the store's JSON shape (aliased field names, no nulls)."""
    return [b.model_dump(mode="json", by_alias=True, exclude_none=True) for b in blocks]


class InlineRun(BaseModel):
    """Inline parse result for one block-level element."""
    spans: list[Span] = Field(default_factory=list)
    mark_defs: list[MarkDef] = Field(default_factory=list)


class ExternalDocument(BaseModel):
    """One HTML file unpacked from an export; consumed once, never stored."""
    file_name: str
    raw_html: str


class PostMetadata(BaseModel):
    title: str
    slug: str
    published_at: str
    excerpt: str = ""
    image: str = ""


class StagedPost(BaseModel):
    """Converted post written to staging and read back by import."""
    title: str
    slug: str
    published_at: str
    excerpt: str = ""
    image: str = ""
    read_time: str = "1 min"
    source_file: str = ""
    content: list[Block] = Field(default_factory=list)

    @field_serializer("content")
    def _serialize_content(self, content: list[Block]) -> list[dict]:
        return dump_blocks(content)
