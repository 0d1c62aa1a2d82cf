"""Tests for config loading and validation."""

import pytest

from resume_pipeline.config import AppConfig, LLMConfig, OutputConfig, StorageConfig, load_config


class TestConfig:
    def test_defaults(self):
        config = AppConfig()
        assert config.llm.model == "claude-haiku-4-5-20251001"
        assert config.matching.strategy == "tag_overlap"
        assert config.output.public_root == "/resumes"

    def test_load_config_defaults(self, tmp_path):
        """Loading from non-existent path returns defaults."""
        config = load_config(tmp_path / "nonexistent.yaml")
        assert config.llm.max_retries == 3
        assert config.matching.scoring_timeout == 90.0

    def test_load_config_from_yaml(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text(
            "llm:\n  model: test-model\nmatching:\n  strategy: llm\n"
        )
        config = load_config(yaml_path)
        assert config.llm.model == "test-model"
        assert config.matching.strategy == "llm"
        # Defaults for unspecified
        assert config.storage.db_path == "~/.resume-pipeline/library.db"

    def test_empty_yaml_gives_defaults(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text("")
        assert load_config(yaml_path) == AppConfig()

    def test_resolved_paths(self):
        assert "~" not in str(StorageConfig(db_path="~/test.db").resolved_db_path)
        assert "~" not in str(OutputConfig(resumes_dir="~/out").resolved_resumes_dir)

    def test_frozen_config(self):
        config = LLMConfig()
        with pytest.raises(AttributeError):
            config.model = "changed"


class TestConfigValidation:
    def test_unknown_strategy(self, tmp_path):
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("matching:\n  strategy: vibes\n")
        with pytest.raises(ValueError, match="strategy"):
            load_config(yaml)

    def test_invalid_scoring_timeout(self, tmp_path):
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("matching:\n  scoring_timeout: 0\n")
        with pytest.raises(ValueError, match="scoring_timeout"):
            load_config(yaml)

    def test_invalid_max_retries(self, tmp_path):
        """max_retries above 10 raises ValueError."""
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("llm:\n  max_retries: 99\n")
        with pytest.raises(ValueError, match="max_retries"):
            load_config(yaml)

    def test_invalid_timeout(self, tmp_path):
        """timeout of 0 (below minimum of 1) raises ValueError."""
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("llm:\n  timeout: 0\n")
        with pytest.raises(ValueError, match="timeout"):
            load_config(yaml)
