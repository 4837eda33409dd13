"""File-based configuration.

Settings come from init kwargs and a TOML file only; environment
variables are deliberately not a source.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "doccheck.toml"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Reads from ``doccheck.toml`` in the working directory."""

    # Discovery
    extensions: list[str] = [".md", ".mdx"]
    skip_directories: list[str] = [
        "node_modules",
        "vendor",
        ".venv",
        "__pycache__",
        "build",
        "dist",
        ".git",
        ".next",
    ]

    # Authoritative listings
    listing_marker: str = "<!-- doccheck:commands -->"
    listing_headings: list[str] = [
        "commands",
        "command reference",
        "available commands",
        "cli reference",
        "flags",
        "options",
    ]

    # Term roles
    entry_points: list[str] = []
    security_keywords: list[str] = [
        "trust",
        "auth",
        "token",
        "secret",
        "permission",
        "sandbox",
        "password",
        "credential",
    ]
    # canonical spelling -> alias spellings
    aliases: dict[str, list[str]] = {}

    # Output
    report_suffix: str = ".review.md"
    manifest_filename: str = "manifest.json"
    tracker_filename: str = "PROGRESS.md"

    # Scoring: points deducted per finding of each severity
    score_weights: dict[str, float] = {
        "high": 0.5,
        "medium": 0.2,
        "low": 0.1,
    }

    # Concurrency
    max_concurrency: int = 8

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        toml_file=DEFAULT_CONFIG_FILE,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, TomlConfigSettingsSource(settings_cls))

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lowercase and ensure a leading dot."""
        if not v:
            raise ValueError("extensions must contain at least one suffix")
        out: list[str] = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext.startswith("."):
                ext = "." + ext
            if ext not in out:
                out.append(ext)
        return out

    @field_validator("listing_headings", "security_keywords")
    @classmethod
    def _lowercase(cls, v: list[str]) -> list[str]:
        return [s.strip().lower() for s in v if s.strip()]

    @field_validator("score_weights")
    @classmethod
    def _validate_weights(cls, v: dict[str, float]) -> dict[str, float]:
        unknown = set(v) - {"high", "medium", "low"}
        if unknown:
            raise ValueError(
                "unknown score weight(s): " + ", ".join(sorted(unknown))
            )
        if any(w < 0 for w in v.values()):
            raise ValueError("score weights must be non-negative")
        return v

    @field_validator("max_concurrency")
    @classmethod
    def _validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrency must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"unknown log level {v!r}; expected one of "
                + ", ".join(_LOG_LEVELS)
            )
        return level

    @field_validator("report_suffix")
    @classmethod
    def _validate_suffix(cls, v: str) -> str:
        if not v.endswith(".md"):
            logger.warning(
                "Report suffix %r does not end in .md; reports are "
                "still written as markdown",
                v,
            )
        return v


def load_settings(config_path: Path | None = None) -> Settings:
    """Build settings, optionally from an explicit TOML file.

    Values from ``config_path`` are passed as init kwargs, so they win
    over the default ``doccheck.toml``.
    """
    if config_path is None:
        return Settings()
    with open(config_path, "rb") as f:
        data: dict[str, Any] = tomllib.load(f)
    # Allow either a flat file or a [doccheck] table
    section = data.get("doccheck", data)
    return Settings(**section)
