"""In-book search."""

from novelcore.search.searcher import ChapterSearcher, build_pattern, extract_context

__all__ = ["ChapterSearcher", "build_pattern", "extract_context"]
