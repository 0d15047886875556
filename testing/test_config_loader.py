"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest

from vox_engine.config import (
    CharacterConfig,
    ConfigLoader,
    ConfigLoadError,
    ConfigValidationError,
    SystemConfig,
)


class TestSystemConfig:

    def test_missing_file_uses_defaults(self, tmp_path):
        config = ConfigLoader(tmp_path).load_system_config()

        assert config == SystemConfig()
        assert config.pipeline.deadline_seconds == 60
        assert config.pipeline.fallback_voice == "qiniu_zh_female_tmjxxy"
        assert config.pipeline.tts_failure_policy == "text_only"
        assert config.auth.session_header == "X-Session-ID"

    def test_loads_yaml(self, tmp_path):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "system.yaml").write_text(
            "llm:\n"
            "  base_url: https://llm.example.com/v1/\n"
            "  model: other-model\n"
            "pipeline:\n"
            "  deadline_seconds: 15\n"
            "  tts_failure_policy: fail\n"
            "unknown_section: ignored\n",
            encoding="utf-8",
        )

        config = ConfigLoader(tmp_path).load_system_config()

        assert config.llm.base_url == "https://llm.example.com/v1"
        assert config.llm.model == "other-model"
        assert config.pipeline.deadline_seconds == 15
        assert config.pipeline.tts_failure_policy == "fail"

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "system.yaml"
        path.write_text("pipeline:\n  tts_failure_policy: sometimes\nllm:\n  base_url: ftp://x\n", encoding="utf-8")

        with pytest.raises(ConfigValidationError) as exc_info:
            ConfigLoader(tmp_path).load_system_config(path)

        message = str(exc_info.value)
        assert "tts_failure_policy" in message
        assert "base_url" in message

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "system.yaml"
        path.write_text("llm: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigLoadError):
            ConfigLoader(tmp_path).load_system_config(path)


class TestCharacterSeeds:

    def _write(self, directory: Path, name: str, body: str) -> None:
        directory.mkdir(exist_ok=True)
        (directory / f"{name}.yaml").write_text(body, encoding="utf-8")

    def test_id_defaults_to_filename(self, tmp_path):
        self._write(tmp_path / "characters", "socrates", "name: Socrates\nsystem_prompt: Ask questions.\n")

        characters = ConfigLoader(tmp_path).load_all_characters()

        assert list(characters) == ["socrates"]
        assert characters["socrates"].default_voice == ""

    def test_invalid_files_are_skipped(self, tmp_path):
        chars = tmp_path / "characters"
        self._write(chars, "good", "name: Good\nsystem_prompt: Be good.\n")
        self._write(chars, "blank_prompt", "name: Blank\nsystem_prompt: '   '\n")
        self._write(chars, "mismatch", "id: other\nname: X\nsystem_prompt: p\n")
        self._write(chars, "template", "name: Template\nsystem_prompt: p\n")

        characters = ConfigLoader(tmp_path).load_all_characters()

        assert list(characters) == ["good"]

    def test_undecodable_file_is_skipped(self, tmp_path):
        chars = tmp_path / "characters"
        self._write(chars, "good", "name: Good\nsystem_prompt: Be good.\n")
        (chars / "bad.yaml").write_bytes(b"\xff\xfe\x00name")

        characters = ConfigLoader(tmp_path).load_all_characters()

        assert list(characters) == ["good"]

    def test_unreadable_path_raises_load_error(self, tmp_path):
        directory = tmp_path / "system.yaml"
        directory.mkdir()

        with pytest.raises(ConfigLoadError):
            ConfigLoader(tmp_path).load_yaml(directory)

    def test_missing_directory(self, tmp_path):
        assert ConfigLoader(tmp_path).load_all_characters() == {}

    def test_null_voice_becomes_empty(self):
        config = CharacterConfig(id="x", name="X", system_prompt="p", default_voice=None)

        assert config.default_voice == ""

    def test_bundled_seeds_are_valid(self):
        root = Path(__file__).parent.parent

        characters = ConfigLoader(root).load_all_characters()

        assert {"harry_potter", "socrates"} <= set(characters)
