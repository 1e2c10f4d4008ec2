"""Command line entry point: parse a manuscript file and print the result."""

import argparse
import logging
import sys
from pathlib import Path

from novelcore.config import load_config
from novelcore.ingestion.parser import NovelParser


def main(argv: list[str] | None = None) -> int:
    """Parse one manuscript and print a chapter summary or JSON."""
    arg_parser = argparse.ArgumentParser(description="Parse a TXT novel into chapters.")
    arg_parser.add_argument("path", help="Path to the .txt manuscript")
    arg_parser.add_argument("--config", default="config.yaml", help="YAML config file")
    arg_parser.add_argument("--json", action="store_true", help="Print camelCase JSON")
    arg_parser.add_argument(
        "--preview", action="store_true", help="Only inspect the head of the file"
    )
    args = arg_parser.parse_args(argv)

    config = load_config(args.config)
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = NovelParser(config)
    try:
        if args.preview:
            path = Path(args.path)
            with open(path, "rb") as f:
                head = f.read(config.preview.sample_bytes)
            result = parser.preview(head, path.name, total_size=path.stat().st_size)
        else:
            result = parser.parse_file(args.path)
    except (FileNotFoundError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(result.model_dump_json(by_alias=True, indent=2))
    elif args.preview:
        print(f"{result.title} ({result.encoding}, ~{result.estimated_chapters} chapters)")
    else:
        print(f"{result.title} / {result.author or '-'}")
        print(f"{result.encoding}, {result.file_size} bytes, {result.total_words} words")
        for chapter in result.chapters:
            print(f"  {chapter.chapter_index:>5}  {chapter.title}  [{chapter.word_count}]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
