"""Title and author extraction."""

import re

from novelcore.config import MetadataConfig

_TXT_SUFFIX = re.compile(r"\.txt$", re.IGNORECASE)
_ANNOTATIONS = (
    re.compile(r"【.*?】"),
    re.compile(r"\[.*?\]"),
)
_LINE_BREAK = re.compile(r"\r?\n")

# First match in the scan window wins, even if it belongs to unrelated
# front matter (a quoted "作者：" in a preface, for example).
AUTHOR_PATTERN = re.compile(r"(?:作者|著者|\bAuthor)\s*[：:]\s*(\S+)", re.IGNORECASE)


def title_from_filename(filename: str) -> str:
    """Strip the .txt suffix and bracketed annotations from a filename.

    >>> title_from_filename("【完结】斗破苍穹[精校版].TXT")
    '斗破苍穹'
    """
    name = _TXT_SUFFIX.sub("", filename)
    for pattern in _ANNOTATIONS:
        name = pattern.sub("", name)
    return name.strip()


def extract_title(filename: str, text: str, config: MetadataConfig | None = None) -> str:
    """Derive a book title, preferring the filename over the text.

    Args:
        filename: Original upload filename.
        text: Decoded manuscript text.
        config: Scan limits and fallback title.

    Returns:
        A non-empty title.
    """
    config = config or MetadataConfig()

    name = title_from_filename(filename)
    if name:
        return name

    lines = _LINE_BREAK.split(text, maxsplit=config.title_scan_lines)
    for line in lines[: config.title_scan_lines]:
        stripped = line.strip()
        if stripped and len(stripped) <= config.max_title_length:
            return stripped

    return config.fallback_title


def extract_author(text: str, config: MetadataConfig | None = None) -> str | None:
    """Find an author marker such as ``作者：张三`` near the top of the text."""
    config = config or MetadataConfig()
    match = AUTHOR_PATTERN.search(text[: config.author_scan_chars])
    if match:
        return match.group(1).strip()
    return None
