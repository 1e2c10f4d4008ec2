"""Parse result data models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_FROZEN = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class DecodedText(BaseModel):
    """Text produced by the encoding detector."""

    model_config = _FROZEN

    text: str
    encoding: str  # Python codec name, e.g. "utf-8", "gbk"
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    lossy: bool = False  # True only for the replacement-character fallbacks


class ChapterInfo(BaseModel):
    """One chapter of a parsed book.

    ``chapter_index`` is the chapter's position in the book, not a
    persisted identity.
    """

    model_config = _FROZEN

    chapter_index: int = Field(ge=0)
    title: str
    content: str  # Text between this heading and the next, trimmed
    word_count: int = Field(ge=0)


class ParseResult(BaseModel):
    """The result of parsing a raw manuscript.

    Serialize with ``model_dump(by_alias=True)`` to get camelCase keys
    (``fileHash``, ``totalWords``, ``chapterIndex`` ...).
    """

    model_config = _FROZEN

    title: str = Field(min_length=1)
    author: str | None = None
    file_hash: str
    file_size: int = Field(ge=0)
    total_words: int = Field(ge=0)
    encoding: str
    chapters: tuple[ChapterInfo, ...] = Field(min_length=1)

    @property
    def chapter_count(self) -> int:
        return len(self.chapters)


class ParsePreview(BaseModel):
    """Cheap summary computed from the head of a manuscript."""

    model_config = _FROZEN

    title: str
    author: str | None = None
    encoding: str
    confidence: float = 1.0
    estimated_chapters: int = 0
    dominant_heading: str | None = None  # Name of the most frequent heading matcher
