"""Search result data models."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_FROZEN = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class SearchMatch(BaseModel):
    """A single query hit inside one chapter."""

    model_config = _FROZEN

    position: int  # Offset in the chapter content
    line_number: int  # 1-based, within the chapter content
    context: str
    match_offset: int  # Offset of the hit inside ``context``
    match_length: int


class ChapterSearchResult(BaseModel):
    """All hits found in one chapter."""

    model_config = _FROZEN

    chapter_index: int
    chapter_title: str
    matches: tuple[SearchMatch, ...] = Field(default_factory=tuple)


class BookSearchResult(BaseModel):
    """Hits across a whole book, grouped by chapter."""

    model_config = _FROZEN

    book_title: str
    query: str
    total_matches: int = 0
    chapters: tuple[ChapterSearchResult, ...] = Field(default_factory=tuple)
    truncated: bool = False  # A result limit was reached
