"""Tests for JarConfig: defaults, validation, immutability and env lookup."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from data_jar.config import DEFAULT_STORAGE_KEY, ENV_STORAGE_PATH, JarConfig


class TestDefaults:
    def test_values(self) -> None:
        config = JarConfig()
        assert config.storage_path == Path.home() / ".data-jar" / f"{DEFAULT_STORAGE_KEY}.json"
        assert config.export_filename == "data_jar_backup.json"
        assert config.evaluation_cache_size == 256
        assert config.export_indent == 2

    def test_storage_key(self) -> None:
        assert DEFAULT_STORAGE_KEY == "data-jar-storage"


class TestValidation:
    def test_string_path_is_coerced(self) -> None:
        config = JarConfig(storage_path="jar.json")  # type: ignore[arg-type]
        assert config.storage_path == Path("jar.json")

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"export_filename": "  "}, "export_filename"),
            ({"evaluation_cache_size": 0}, "evaluation_cache_size"),
            ({"export_indent": -1}, "export_indent"),
        ],
    )
    def test_rejects(self, kwargs: dict[str, object], message: str) -> None:
        with pytest.raises(ValueError, match=message):
            JarConfig(**kwargs)  # type: ignore[arg-type]

    def test_frozen(self) -> None:
        with pytest.raises(FrozenInstanceError):
            JarConfig().export_indent = 4  # type: ignore[misc]


class TestFromEnv:
    def test_uses_env_path(self, tmp_path: Path) -> None:
        target = tmp_path / "jar.json"
        config = JarConfig.from_env({ENV_STORAGE_PATH: str(target)})
        assert config.storage_path == target

    def test_without_env(self) -> None:
        assert JarConfig.from_env({}) == JarConfig()

    def test_reads_process_environment(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv(ENV_STORAGE_PATH, str(tmp_path / "env.json"))
        assert JarConfig.from_env().storage_path == tmp_path / "env.json"
