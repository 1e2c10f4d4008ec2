"""Line-based chapter segmentation for novel manuscripts."""

import enum
import logging
import re
from collections import Counter
from dataclasses import dataclass, field

from novelcore.config import SegmentationConfig
from novelcore.models.parsed import ChapterInfo

logger = logging.getLogger(__name__)

NUMERALS = "0-9０-９零〇一二两三四五六七八九十百千万"
CHAPTER_UNITS = "章节卷集部篇回"

# Heading matchers in priority order; the first full match wins.
# Each is applied to a stripped line.
HEADING_PATTERNS: dict[str, re.Pattern[str]] = {
    "ordinal_chapter": re.compile(rf"第[{NUMERALS}]+[{CHAPTER_UNITS}]\s*.{{0,50}}"),
    "latin_chapter": re.compile(r"chapter\s*[0-9]+.*", re.IGNORECASE),
    "numbered": re.compile(r"[0-9]{1,4}[.、]\s*.{1,50}"),
    "bracketed_ordinal": re.compile(rf"【第?[{NUMERALS}]+[{CHAPTER_UNITS}]?】.*"),
}

_LINE_BREAK = re.compile(r"\r?\n")
_WHITESPACE = re.compile(r"\s")


def count_words(text: str) -> int:
    """Count non-whitespace characters.

    CJK text has no word delimiters, so every visible character counts as
    one word. Full-width spaces (U+3000) are whitespace.

    Args:
        text: The text to count.

    Returns:
        Number of characters left after removing all whitespace.
    """
    return len(_WHITESPACE.sub("", text))


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` or ``\\r\\n``."""
    return _LINE_BREAK.split(text)


def match_heading(
    line: str, patterns: dict[str, re.Pattern[str]], max_length: int
) -> str | None:
    """Return the name of the first heading pattern matching ``line``.

    Args:
        line: A raw line of text; it is stripped before matching.
        patterns: Ordered mapping of matcher name to compiled pattern.
        max_length: Stripped lines longer than this are never headings.

    Returns:
        The matcher name, or None if the line is not a heading.
    """
    stripped = line.strip()
    if not stripped or len(stripped) > max_length:
        return None

    for name, pattern in patterns.items():
        if pattern.fullmatch(stripped):
            return name
    return None


class ScanState(enum.Enum):
    """Where the segmenter is relative to the first heading."""

    BEFORE_FIRST_HEADING = "before_first_heading"
    IN_CHAPTER = "in_chapter"


@dataclass
class OpenChapter:
    """Accumulator for the chapter currently being read."""

    title: str
    lines: list[str] = field(default_factory=list)

    def close(self, chapter_index: int) -> ChapterInfo:
        content = "\n".join(self.lines).strip()
        return ChapterInfo(
            chapter_index=chapter_index,
            title=self.title,
            content=content,
            word_count=count_words(content),
        )


class ChapterSegmenter:
    """Splits decoded manuscript text into chapters.

    The scan is a two-state machine over lines. Before the first heading
    lines are front matter and are dropped. Every heading closes the open
    chapter (if any) and opens a new one titled with the stripped heading
    line; other lines accumulate into the open chapter.

    If no line is a heading, the whole text becomes one fallback chapter,
    so the result is never empty.

    Args:
        config: SegmentationConfig with heading length limit, fallback
                title and optional extra heading patterns.
    """

    def __init__(self, config: SegmentationConfig | None = None) -> None:
        self._config = config or SegmentationConfig()
        self._patterns = dict(HEADING_PATTERNS)
        for i, source in enumerate(self._config.extra_heading_patterns):
            self._patterns[f"custom_{i}"] = re.compile(source)

    @property
    def patterns(self) -> dict[str, re.Pattern[str]]:
        return dict(self._patterns)

    def match_heading(self, line: str) -> str | None:
        return match_heading(line, self._patterns, self._config.max_heading_length)

    def segment(self, text: str) -> list[ChapterInfo]:
        """Partition ``text`` into an ordered, non-empty list of chapters.

        Args:
            text: The decoded manuscript text.

        Returns:
            Chapters with contiguous indices starting at 0.
        """
        chapters: list[ChapterInfo] = []
        state = ScanState.BEFORE_FIRST_HEADING
        current: OpenChapter | None = None

        for line in split_lines(text):
            if self.match_heading(line) is not None:
                if state is ScanState.IN_CHAPTER and current is not None:
                    chapters.append(current.close(len(chapters)))
                current = OpenChapter(title=line.strip())
                state = ScanState.IN_CHAPTER
            elif state is ScanState.IN_CHAPTER and current is not None:
                current.lines.append(line)

        if state is ScanState.IN_CHAPTER and current is not None:
            chapters.append(current.close(len(chapters)))

        if not chapters:
            logger.debug("No chapter headings found; using a single fallback chapter")
            content = text.strip()
            chapters.append(
                ChapterInfo(
                    chapter_index=0,
                    title=self._config.fallback_chapter_title,
                    content=content,
                    word_count=count_words(content),
                )
            )

        return chapters

    def count_headings(self, text: str) -> Counter[str]:
        """Count heading lines in ``text`` per matcher name."""
        counts: Counter[str] = Counter()
        for line in split_lines(text):
            name = self.match_heading(line)
            if name is not None:
                counts[name] += 1
        return counts
