"""Data models for the novel manuscript parser."""

from novelcore.models.parsed import ChapterInfo, DecodedText, ParsePreview, ParseResult
from novelcore.models.search import BookSearchResult, ChapterSearchResult, SearchMatch

__all__ = [
    "BookSearchResult",
    "ChapterInfo",
    "ChapterSearchResult",
    "DecodedText",
    "ParsePreview",
    "ParseResult",
    "SearchMatch",
]
