"""Manuscript ingestion: decoding, fingerprinting, metadata and chapters."""

from novelcore.ingestion.encoding import detect_encoding
from novelcore.ingestion.fingerprint import compute_fingerprint, is_fallback_fingerprint
from novelcore.ingestion.metadata import extract_author, extract_title
from novelcore.ingestion.parser import NovelParser, parse_book
from novelcore.ingestion.segmenter import ChapterSegmenter, count_words

__all__ = [
    "ChapterSegmenter",
    "NovelParser",
    "compute_fingerprint",
    "count_words",
    "detect_encoding",
    "extract_author",
    "extract_title",
    "is_fallback_fingerprint",
    "parse_book",
]
