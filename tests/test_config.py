"""
Module: tests.test_config
Purpose: Tests for configuration defaults, YAML overrides and credential lookup
"""

import pytest

from aspect_gen.config import Config, RECOMPOSE_PROMPT


def test_defaults():
    config = Config()
    assert config.get_model_id() == "gemini-2.5-flash-image"
    assert config.generation["prompt"] == RECOMPOSE_PROMPT
    assert config.generation["default_ratio"] == "9:16"
    assert config.generation["timeout_ms"] is None


def test_yaml_overrides_merge_sections(tmp_path):
    override = tmp_path / "local.yaml"
    override.write_text(
        "generation:\n"
        "  default_ratio: '1:1'\n"
        "api:\n"
        "  port: 9000\n"
    )

    config = Config(override)

    assert config.generation["default_ratio"] == "1:1"
    assert config.generation["model_id"] == "gemini-2.5-flash-image"
    assert config.api["port"] == 9000
    assert config.api["host"] == "0.0.0.0"


def test_missing_override_file_is_ignored(tmp_path):
    assert Config(tmp_path / "absent.yaml").api["port"] == 8000


def test_get_section_returns_copy():
    config = Config()
    section = config.get_section("output")
    section["directory"] = "elsewhere"
    assert config.output["directory"] != "elsewhere"

    with pytest.raises(KeyError):
        config.get_section("models")


def test_api_key_lookup_order(monkeypatch):
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")
    config = Config()
    assert config.get_api_key() == "gemini-key"

    monkeypatch.setenv("API_KEY", "primary-key")
    assert config.get_api_key() == "primary-key"


def test_api_key_absent(no_api_key):
    assert Config().get_api_key() is None
