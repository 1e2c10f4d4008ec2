"""Tests for the novel parser."""

import codecs
import hashlib
import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from novelcore.config import AppConfig, LimitsConfig, PreviewConfig
from novelcore.ingestion import fingerprint as fingerprint_module
from novelcore.ingestion.parser import NovelParser, parse_book
from novelcore.ingestion.segmenter import count_words

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "sample_texts"


@pytest.fixture
def parser() -> NovelParser:
    return NovelParser()


def _assert_well_formed(result) -> None:
    assert result.chapters
    assert [c.chapter_index for c in result.chapters] == list(range(len(result.chapters)))


class TestScenarios:
    """Tests for end-to-end parsing scenarios."""

    def test_bom_file_with_two_chapters(self, parser: NovelParser) -> None:
        text = "第一章 开端\n他出发了。\n第二章 风起\n风越来越大。\n"
        raw = codecs.BOM_UTF8 + text.encode("utf-8")

        result = parser.parse(raw, "风起.txt")

        assert result.encoding == "utf-8"
        assert [c.chapter_index for c in result.chapters] == [0, 1]
        assert [c.title for c in result.chapters] == ["第一章 开端", "第二章 风起"]
        assert result.chapters[0].content == "他出发了。"

    def test_no_headings_gives_single_fallback_chapter(self, parser: NovelParser) -> None:
        raw = (FIXTURES_DIR / "sample_no_headings.txt").read_bytes()

        result = parser.parse(raw, "sample_no_headings.txt")

        assert len(result.chapters) == 1
        assert result.chapters[0].title == "正文"
        assert result.chapters[0].content == raw.decode("utf-8").strip()
        assert result.chapters[0].word_count == result.total_words

    def test_author_marker(self, parser: NovelParser) -> None:
        raw = "作者：张三\n第一章 开端\n正文".encode("utf-8")

        result = parser.parse(raw, "未命名.txt")

        assert result.author == "张三"
        assert result.title == "未命名"

    def test_empty_input(self, parser: NovelParser) -> None:
        result = parser.parse(b"", "empty.txt")

        assert result.file_size == 0
        assert result.total_words == 0
        assert result.title == "empty"
        assert result.author is None
        assert result.file_hash == hashlib.sha256(b"").hexdigest()
        assert len(result.chapters) == 1
        assert result.chapters[0].content == ""

    def test_empty_input_and_filename(self, parser: NovelParser) -> None:
        result = parser.parse(b"", "")
        assert result.title == "未命名"
        _assert_well_formed(result)

    def test_overlong_heading_is_body_text(self, parser: NovelParser) -> None:
        line = "第一章" + "字" * 58
        result = parser.parse(f"{line}\n正文".encode("utf-8"), "长行.txt")
        assert len(result.chapters) == 1
        assert result.chapters[0].title == "正文"


class TestParseResultProperties:
    """Tests for invariants that hold for any input."""

    @pytest.mark.parametrize(
        "raw",
        [
            b"",
            b"\xff\xfe\x00",
            b"abc\xff\x80",
            "第一章\n甲\n第二章\n乙".encode("gbk"),
            "plain prose with no headings".encode("utf-8"),
        ],
    )
    def test_always_well_formed(self, parser: NovelParser, raw: bytes) -> None:
        result = parser.parse(raw, "x.txt")
        _assert_well_formed(result)
        assert result.file_size == len(raw)
        assert result.title

    def test_hash_ignores_filename(self, parser: NovelParser) -> None:
        raw = "第一章 开端\n正文".encode("utf-8")
        first = parser.parse(raw, "a.txt")
        second = parser.parse(raw, "完全不同的名字.txt")
        assert first.file_hash == second.file_hash
        assert len(first.file_hash) == 64

    def test_total_words_counts_full_text(self, parser: NovelParser) -> None:
        text = "前言\n第一章 开端\n甲 乙\n"
        result = parser.parse(text.encode("utf-8"), "x.txt")
        assert result.total_words == count_words(text)

    def test_reparse_of_output_keeps_chapter_count(self, parser: NovelParser) -> None:
        raw = (FIXTURES_DIR / "sample_novel.txt").read_bytes()
        result = parser.parse(raw, "sample_novel.txt")

        rebuilt = "\n".join(f"{c.title}\n{c.content}" for c in result.chapters)
        again = parser.parse(rebuilt.encode("utf-8"), "sample_novel.txt")

        assert again.chapter_count == result.chapter_count

    def test_result_is_immutable(self, parser: NovelParser) -> None:
        result = parser.parse("第一章\n正文".encode("utf-8"), "x.txt")
        with pytest.raises(ValidationError):
            result.title = "changed"  # type: ignore[misc]
        with pytest.raises(ValidationError):
            result.chapters[0].content = "changed"  # type: ignore[misc]

    def test_camel_case_serialization(self, parser: NovelParser) -> None:
        result = parser.parse("作者：张三\n第一章\n正文".encode("utf-8"), "书.txt")
        data = json.loads(result.model_dump_json(by_alias=True))
        assert {"title", "author", "fileHash", "fileSize", "totalWords", "chapters"} <= set(data)
        assert data["chapters"][0] == {
            "chapterIndex": 0,
            "title": "第一章",
            "content": "正文",
            "wordCount": 2,
        }


class TestFixtures:
    """Tests against the sample manuscripts."""

    def test_chinese_novel(self, parser: NovelParser) -> None:
        raw = (FIXTURES_DIR / "sample_novel.txt").read_bytes()
        result = parser.parse(raw, "sample_novel.txt")

        assert result.title == "sample_novel"
        assert result.author == "李四"
        assert [c.title for c in result.chapters] == [
            "第一章 远行",
            "第二章 客栈",
            "第三章 归来",
        ]
        assert result.chapters[2].content.startswith("三年后的春天")

    def test_english_novel(self, parser: NovelParser) -> None:
        raw = (FIXTURES_DIR / "sample_english.txt").read_bytes()
        result = parser.parse(raw, "sample_english.txt")

        assert result.author == "Jane"
        assert [c.title for c in result.chapters] == ["Chapter 1 Departure", "Chapter 2: The Inn"]

    def test_gbk_novel(self, parser: NovelParser) -> None:
        text = (FIXTURES_DIR / "sample_novel.txt").read_text(encoding="utf-8")
        result = parser.parse(text.encode("gbk"), "山河故人.txt")

        assert result.encoding == "gbk"
        assert result.title == "山河故人"
        assert result.author == "李四"
        assert result.chapter_count == 3


class TestDegradedRuns:
    """Tests for degraded but successful parses."""

    def test_fingerprint_fallback_does_not_abort(
        self, parser: NovelParser, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def _blocked(data: bytes) -> None:
            raise ValueError("unsupported hash type")

        monkeypatch.setattr(fingerprint_module.hashlib, "sha256", _blocked)

        result = parser.parse("第一章\n正文".encode("utf-8"), "x.txt")
        assert result.file_hash.startswith("hash-")
        assert result.chapter_count == 1

    def test_gbk_novel_with_truncated_tail(self, parser: NovelParser) -> None:
        text = (FIXTURES_DIR / "sample_novel.txt").read_text(encoding="utf-8")
        raw = text.encode("gbk") + "末".encode("gbk")[:1]

        result = parser.parse(raw, "山河故人.txt")

        assert result.encoding in {"gbk", "gb18030"}
        assert result.author == "李四"
        assert [c.title for c in result.chapters] == [
            "第一章 远行",
            "第二章 客栈",
            "第三章 归来",
        ]
        assert result.chapters[2].content.startswith("三年后的春天")
        assert result.chapters[2].content.endswith("�")
        assert sum(c.content.count("�") for c in result.chapters) == 1

    def test_logs_summary(self, parser: NovelParser, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="novelcore")
        parser.parse("第一章\n正文".encode("utf-8"), "书.txt")
        assert "Parsed 书: 1 chapters" in caplog.text


class TestParseFile:
    """Tests for reading manuscripts from disk."""

    def test_parse_fixture(self, parser: NovelParser) -> None:
        result = parser.parse_file(FIXTURES_DIR / "sample_novel.txt")
        assert result.chapter_count == 3
        assert result.file_size == (FIXTURES_DIR / "sample_novel.txt").stat().st_size

    def test_uppercase_extension(self, parser: NovelParser, tmp_path: Path) -> None:
        f = tmp_path / "BOOK.TXT"
        f.write_bytes("第一章\n正文".encode("utf-8"))
        assert parser.parse_file(f).title == "BOOK"

    def test_nonexistent_file_raises(self, parser: NovelParser) -> None:
        with pytest.raises(FileNotFoundError):
            parser.parse_file("/nonexistent/file.txt")

    def test_unsupported_format_raises(self, parser: NovelParser, tmp_path: Path) -> None:
        f = tmp_path / "book.epub"
        f.touch()
        with pytest.raises(ValueError, match="Unsupported file format"):
            parser.parse_file(f)

    def test_too_large_raises(self, tmp_path: Path) -> None:
        parser = NovelParser(AppConfig(limits=LimitsConfig(max_file_size=10)))
        f = tmp_path / "book.txt"
        f.write_bytes(b"x" * 11)
        with pytest.raises(ValueError, match="File too large"):
            parser.parse_file(f)


class TestPreview:
    """Tests for head-only previews."""

    def test_small_file(self, parser: NovelParser) -> None:
        raw = (FIXTURES_DIR / "sample_novel.txt").read_bytes()
        preview = parser.preview(raw, "sample_novel.txt")

        assert preview.title == "sample_novel"
        assert preview.author == "李四"
        assert preview.encoding == "utf-8"
        assert preview.dominant_heading == "ordinal_chapter"
        assert preview.estimated_chapters == 3

    def test_extrapolates_from_sample(self) -> None:
        text = "".join(
            f"第{i}章 标题\n" + "正文内容。" * 20 + "\n" for i in range(1, 201)
        )
        raw = text.encode("utf-8")
        parser = NovelParser(AppConfig(preview=PreviewConfig(sample_bytes=10_000)))

        preview = parser.preview(raw, "长篇.txt")

        assert preview.encoding == "utf-8"
        assert preview.dominant_heading == "ordinal_chapter"
        assert 180 <= preview.estimated_chapters <= 230

    def test_head_with_total_size(self) -> None:
        text = "".join(f"Chapter {i}\n" + "words " * 30 + "\n" for i in range(1, 101))
        raw = text.encode("utf-8")
        parser = NovelParser(AppConfig(preview=PreviewConfig(sample_bytes=2_000)))

        preview = parser.preview(raw[:2_000], "book.txt", total_size=len(raw))

        assert preview.dominant_heading == "latin_chapter"
        assert preview.estimated_chapters > 50

    def test_no_headings(self, parser: NovelParser) -> None:
        preview = parser.preview("只有正文。".encode("utf-8"), "短文.txt")
        assert preview.dominant_heading is None
        assert preview.estimated_chapters == 0

    def test_empty(self, parser: NovelParser) -> None:
        preview = parser.preview(b"", "")
        assert preview.title == "未命名"
        assert preview.estimated_chapters == 0


class TestParseBook:
    """Tests for the default-config helper."""

    def test_default_configuration(self) -> None:
        result = parse_book("第一章\n正文".encode("utf-8"), "书.txt")
        assert result.title == "书"
        assert result.chapter_count == 1
