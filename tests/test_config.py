"""Tests for settings validation and file loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from doccheck.config import Settings, load_settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.extensions == [".md", ".mdx"]
        assert settings.report_suffix == ".review.md"
        assert settings.max_concurrency == 8
        assert settings.aliases == {}

    def test_extensions_normalized(self) -> None:
        settings = Settings(extensions=["MD", ".Mdx", "md"])
        assert settings.extensions == [".md", ".mdx"]

    def test_empty_extensions_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(extensions=[])

    def test_keywords_lowercased(self) -> None:
        settings = Settings(security_keywords=["Token", " ", "AUTH"])
        assert settings.security_keywords == ["token", "auth"]

    def test_unknown_weight_rejected(self) -> None:
        with pytest.raises(ValidationError, match="unknown score weight"):
            Settings(score_weights={"critical": 1.0})

    def test_negative_weight_rejected(self) -> None:
        with pytest.raises(ValidationError, match="non-negative"):
            Settings(score_weights={"high": -1.0})

    def test_concurrency_floor(self) -> None:
        with pytest.raises(ValidationError):
            Settings(max_concurrency=0)

    def test_log_level_normalized(self) -> None:
        assert Settings(log_level=" debug ").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self) -> None:
        with pytest.raises(ValidationError, match="unknown log level"):
            Settings(log_level="verbose")

    def test_environment_ignored(self, monkeypatch) -> None:
        monkeypatch.setenv("MAX_CONCURRENCY", "3")
        monkeypatch.setenv("REPORT_SUFFIX", ".env.md")
        settings = Settings()
        assert settings.max_concurrency == 8
        assert settings.report_suffix == ".review.md"

    def test_toml_in_working_directory(
        self, tmp_path: Path, monkeypatch
    ) -> None:
        (tmp_path / "doccheck.toml").write_text(
            "max_concurrency = 2\n", encoding="utf-8"
        )
        monkeypatch.chdir(tmp_path)
        assert Settings().max_concurrency == 2


class TestLoadSettings:
    def test_flat_file(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.toml"
        path.write_text(
            'entry_points = ["hyper"]\n'
            "[aliases]\n"
            'hypergen = ["hg"]\n',
            encoding="utf-8",
        )
        settings = load_settings(path)
        assert settings.entry_points == ["hyper"]
        assert settings.aliases == {"hypergen": ["hg"]}

    def test_namespaced_table(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.toml"
        path.write_text(
            "[doccheck]\nreport_suffix = \".r.md\"\n", encoding="utf-8"
        )
        assert load_settings(path).report_suffix == ".r.md"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            load_settings(tmp_path / "nope.toml")

    def test_no_path_uses_defaults(self) -> None:
        assert load_settings().extensions == [".md", ".mdx"]
