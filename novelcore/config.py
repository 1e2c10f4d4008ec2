"""Configuration loader for the novel manuscript parser."""

import os
import re
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Novel Core"
    version: str = "1.0.0"
    language: str = "zh"


class EncodingConfig(BaseModel):
    """Encoding detection configuration."""

    fallback_encodings: list[str] = Field(default_factory=lambda: ["gbk", "gb18030"])
    min_confidence: float = 0.7
    sample_bytes: int = 64 * 1024


class MetadataConfig(BaseModel):
    """Title and author extraction configuration."""

    title_scan_lines: int = 5
    max_title_length: int = 50
    author_scan_chars: int = 1000
    fallback_title: str = Field(default="未命名", min_length=1)


class SegmentationConfig(BaseModel):
    """Chapter segmentation configuration."""

    max_heading_length: int = 60
    fallback_chapter_title: str = "正文"
    extra_heading_patterns: list[str] = Field(default_factory=list)

    @field_validator("extra_heading_patterns")
    @classmethod
    def _patterns_compile(cls, patterns: list[str]) -> list[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Invalid heading pattern {pattern!r}: {exc}") from exc
        return patterns


class LimitsConfig(BaseModel):
    """Input limits enforced before a file is handed to the parser."""

    max_file_size: int = 50 * 1024 * 1024
    allowed_extensions: list[str] = Field(default_factory=lambda: [".txt"])


class PreviewConfig(BaseModel):
    """Quick preview configuration."""

    sample_bytes: int = 100 * 1024


class SearchConfig(BaseModel):
    """In-book search configuration."""

    context_length: int = 50
    max_results: int = 500
    max_results_per_chapter: int = 50


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    encoding: EncodingConfig = Field(default_factory=EncodingConfig)
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)
    segmentation: SegmentationConfig = Field(default_factory=SegmentationConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    preview: PreviewConfig = Field(default_factory=PreviewConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)

    log_level: str = "INFO"


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file, encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # Environment overrides
    log_level = os.getenv("NOVELCORE_LOG_LEVEL")
    if log_level:
        config.log_level = log_level.upper()

    max_file_size = os.getenv("NOVELCORE_MAX_FILE_SIZE")
    if max_file_size:
        config.limits.max_file_size = int(max_file_size)

    return config
