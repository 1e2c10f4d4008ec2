"""Novel manuscript parser: decode, fingerprint, extract metadata, segment."""

import logging
from pathlib import Path

from novelcore.config import AppConfig
from novelcore.ingestion.encoding import detect_encoding
from novelcore.ingestion.fingerprint import compute_fingerprint
from novelcore.ingestion.metadata import extract_author, extract_title
from novelcore.ingestion.segmenter import ChapterSegmenter, count_words
from novelcore.models.parsed import ParsePreview, ParseResult

logger = logging.getLogger(__name__)


class NovelParser:
    """Parses raw manuscript bytes into a structured ParseResult.

    ``parse`` and ``preview`` never raise on malformed, mis-encoded or
    empty input; degraded runs are visible through the ``encoding`` field,
    a ``hash-`` prefixed fingerprint, or a single fallback chapter.
    Instances hold no per-call state and can be shared between threads.

    Args:
        config: AppConfig; defaults apply when omitted.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or AppConfig()
        self._segmenter = ChapterSegmenter(self._config.segmentation)

    def parse(self, raw: bytes, filename: str) -> ParseResult:
        """Parse a manuscript held fully in memory.

        Args:
            raw: The raw file bytes (may be empty).
            filename: Original filename, used only for the title.

        Returns:
            A ParseResult with at least one chapter.
        """
        decoded = detect_encoding(raw, self._config.encoding)
        text = decoded.text

        file_hash = compute_fingerprint(raw)

        title = extract_title(filename, text, self._config.metadata)
        author = extract_author(text, self._config.metadata)

        chapters = self._segmenter.segment(text)

        result = ParseResult(
            title=title,
            author=author,
            file_hash=file_hash,
            file_size=len(raw),
            total_words=count_words(text),
            encoding=decoded.encoding,
            chapters=tuple(chapters),
        )
        logger.info(
            "Parsed %s: %d chapters, %d words (%s)",
            result.title,
            result.chapter_count,
            result.total_words,
            result.encoding,
        )
        return result

    def parse_file(self, file_path: str | Path) -> ParseResult:
        """Validate and read a manuscript file, then parse it.

        Args:
            file_path: Path to the manuscript.

        Returns:
            The ParseResult for the file's contents.

        Raises:
            FileNotFoundError: If file_path does not exist.
            ValueError: If the extension is not allowed or the file is
                larger than the configured limit.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        limits = self._config.limits
        ext = path.suffix.lower()
        if ext not in limits.allowed_extensions:
            raise ValueError(
                f"Unsupported file format: '{ext}'. "
                f"Supported: {', '.join(limits.allowed_extensions)}"
            )

        size = path.stat().st_size
        if size > limits.max_file_size:
            raise ValueError(
                f"File too large: {size} bytes (limit {limits.max_file_size})"
            )

        with open(path, "rb") as f:
            raw = f.read()

        return self.parse(raw, path.name)

    def preview(
        self, raw: bytes, filename: str, total_size: int | None = None
    ) -> ParsePreview:
        """Summarize a manuscript from its first bytes only.

        The chapter count is extrapolated from the most frequent heading
        matcher in the sample, scaled by total size over sample size.

        Args:
            raw: The raw file bytes, or just a head of them.
            filename: Original filename, used only for the title.
            total_size: Full file size when ``raw`` is already a head;
                defaults to ``len(raw)``.

        Returns:
            A ParsePreview.
        """
        sample = raw[: self._config.preview.sample_bytes]
        total = max(total_size or 0, len(raw))
        truncated = len(sample) < total
        decoded = detect_encoding(sample, self._config.encoding, partial=truncated)

        counts = self._segmenter.count_headings(decoded.text)
        dominant_heading: str | None = None
        estimated = 0
        if counts:
            dominant_heading, estimated = counts.most_common(1)[0]
            if truncated:
                estimated = round(estimated * total / len(sample))

        return ParsePreview(
            title=extract_title(filename, decoded.text, self._config.metadata),
            author=extract_author(decoded.text, self._config.metadata),
            encoding=decoded.encoding,
            confidence=decoded.confidence,
            estimated_chapters=estimated,
            dominant_heading=dominant_heading,
        )


def parse_book(raw: bytes, filename: str) -> ParseResult:
    """Parse ``raw`` with the default configuration."""
    return NovelParser().parse(raw, filename)
