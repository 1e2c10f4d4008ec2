"""Keyword and regex search across the chapters of a parsed book."""

import logging
import re

from novelcore.config import SearchConfig
from novelcore.models.parsed import ParseResult
from novelcore.models.search import BookSearchResult, ChapterSearchResult, SearchMatch

logger = logging.getLogger(__name__)

ELLIPSIS = "..."
_NEWLINES = re.compile(r"[\r\n]+")


def build_pattern(
    query: str, case_sensitive: bool = False, whole_word: bool = False, use_regex: bool = False
) -> re.Pattern[str]:
    """Compile a search query.

    Raises:
        ValueError: If ``use_regex`` is set and the query is not a valid
            regular expression.
    """
    source = query if use_regex else re.escape(query)
    if whole_word:
        source = rf"\b(?:{source})\b"
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile(source, flags)
    except re.error as exc:
        raise ValueError(f"Invalid search pattern {query!r}: {exc}") from exc


def extract_context(content: str, start: int, length: int, context_length: int) -> tuple[str, int]:
    """Cut a window of ``context_length`` characters around a hit.

    Newlines inside the window are flattened to single spaces and
    ``...`` marks a truncated side.

    Returns:
        The context string and the hit's offset inside it.
    """
    left = max(0, start - context_length)
    right = min(len(content), start + length + context_length)

    before = _NEWLINES.sub(" ", content[left:start])
    hit = content[start : start + length]
    after = _NEWLINES.sub(" ", content[start + length : right])

    prefix = ELLIPSIS if left > 0 else ""
    suffix = ELLIPSIS if right < len(content) else ""
    return f"{prefix}{before}{hit}{after}{suffix}", len(prefix) + len(before)


class ChapterSearcher:
    """Finds query hits chapter by chapter.

    Args:
        config: SearchConfig with context length and result limits.
    """

    def __init__(self, config: SearchConfig | None = None) -> None:
        self._config = config or SearchConfig()

    def search(
        self,
        book: ParseResult,
        query: str,
        case_sensitive: bool = False,
        whole_word: bool = False,
        use_regex: bool = False,
    ) -> BookSearchResult:
        """Search every chapter's content for ``query``.

        Args:
            book: The parsed book.
            query: Literal text, or a regex when ``use_regex`` is set.
            case_sensitive: Match case exactly.
            whole_word: Only match at word boundaries.
            use_regex: Treat ``query`` as a regular expression.

        Returns:
            Hits grouped by chapter, in chapter order.

        Raises:
            ValueError: If the regex query does not compile.
        """
        if not query:
            return BookSearchResult(book_title=book.title, query=query)

        pattern = build_pattern(query, case_sensitive, whole_word, use_regex)
        max_results = self._config.max_results
        per_chapter = self._config.max_results_per_chapter

        results: list[ChapterSearchResult] = []
        total = 0
        truncated = False

        for chapter in book.chapters:
            if total >= max_results:
                truncated = True
                break

            matches: list[SearchMatch] = []
            for found in pattern.finditer(chapter.content):
                if found.end() == found.start():
                    continue  # zero-width regex hit
                if len(matches) >= per_chapter or total >= max_results:
                    truncated = True
                    break

                context, offset = extract_context(
                    chapter.content,
                    found.start(),
                    found.end() - found.start(),
                    self._config.context_length,
                )
                matches.append(
                    SearchMatch(
                        position=found.start(),
                        line_number=chapter.content.count("\n", 0, found.start()) + 1,
                        context=context,
                        match_offset=offset,
                        match_length=found.end() - found.start(),
                    )
                )
                total += 1

            if matches:
                results.append(
                    ChapterSearchResult(
                        chapter_index=chapter.chapter_index,
                        chapter_title=chapter.title,
                        matches=tuple(matches),
                    )
                )

        logger.debug("Search %r in %s: %d matches", query, book.title, total)
        return BookSearchResult(
            book_title=book.title,
            query=query,
            total_matches=total,
            chapters=tuple(results),
            truncated=truncated,
        )
