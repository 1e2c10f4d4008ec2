"""Novel manuscript parsing core."""

from novelcore.ingestion.parser import NovelParser, parse_book

__version__ = "1.0.0"

__all__ = ["NovelParser", "__version__", "parse_book"]
