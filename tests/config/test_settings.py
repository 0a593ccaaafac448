"""Tests for GateSettings and environment loading."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from qualitygate.checks import build_default_registry
from qualitygate.checks.source_tree import SourceTree
from qualitygate.config.settings import DEFAULT_EXTENSIONS, GateSettings, get_settings
from qualitygate.core.checks import RegistryError


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run each test in an empty directory with no QUALITY_GATE_* variables."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.upper().startswith("QUALITY_GATE_"):
            monkeypatch.delenv(name)


class TestDefaults:
    def test_defaults(self):
        settings = GateSettings()

        assert settings.threshold == 70.0
        assert settings.ratchet_file == Path(".quality-ratchet.json")
        assert settings.jobs == 1
        assert settings.log_level == "WARNING"
        assert settings.weights == {}
        assert settings.source_dirs == ["src"]
        assert settings.extensions == DEFAULT_EXTENSIONS


class TestEnvironment:
    def test_reads_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("QUALITY_GATE_THRESHOLD", "85")
        monkeypatch.setenv("QUALITY_GATE_JOBS", "4")
        monkeypatch.setenv("QUALITY_GATE_LOG_LEVEL", "debug")

        settings = GateSettings()

        assert settings.threshold == 85.0
        assert settings.jobs == 4
        assert settings.log_level == "DEBUG"

    def test_weights_from_json(self, monkeypatch):
        monkeypatch.setenv(
            "QUALITY_GATE_WEIGHTS", '{"error-patterns": 40, "whitespace": 40, "file-size": 20}'
        )

        settings = GateSettings()

        assert settings.weights == {"error-patterns": 40, "whitespace": 40, "file-size": 20}

    def test_reads_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("QUALITY_GATE_THRESHOLD=55\n")

        assert GateSettings().threshold == 55.0

    def test_overrides_beat_environment(self, monkeypatch):
        monkeypatch.setenv("QUALITY_GATE_THRESHOLD", "85")

        settings = get_settings(threshold=60, jobs=None)

        assert settings.threshold == 60
        assert settings.jobs == 1


class TestValidation:
    @pytest.mark.parametrize("value", ["-1", "100.5"])
    def test_threshold_range(self, monkeypatch, value):
        monkeypatch.setenv("QUALITY_GATE_THRESHOLD", value)

        with pytest.raises(ValidationError, match="THRESHOLD"):
            GateSettings()

    def test_jobs_must_be_positive(self):
        with pytest.raises(ValidationError, match="JOBS"):
            GateSettings(jobs=0)

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError, match="LOG_LEVEL"):
            GateSettings(log_level="LOUD")

    def test_max_file_bytes_positive(self):
        with pytest.raises(ValidationError):
            GateSettings(max_file_bytes=0)


class TestPaths:
    def test_ratchet_path_relative_to_root(self, tmp_path):
        settings = GateSettings(root=tmp_path)

        assert settings.ratchet_path() == tmp_path / ".quality-ratchet.json"

    def test_absolute_ratchet_path_kept(self, tmp_path):
        target = tmp_path / "ci" / "main.json"

        settings = GateSettings(root=tmp_path / "repo", ratchet_file=target)

        assert settings.ratchet_path() == target

    def test_scan_roots_uses_existing_source_dirs(self, tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "lib").mkdir()

        settings = GateSettings(root=tmp_path, source_dirs=["src", "lib", "missing"])

        assert settings.scan_roots() == [tmp_path / "src", tmp_path / "lib"]

    def test_scan_roots_falls_back_to_root(self, tmp_path):
        settings = GateSettings(root=tmp_path)

        assert settings.scan_roots() == [tmp_path]

    def test_source_tree_from_settings(self, tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "a.PY").write_text("x\n")
        (tmp_path / "src" / "notes.txt").write_text("x\n")

        tree = SourceTree.from_settings(GateSettings(root=tmp_path))

        assert [tree.display(p) for p in tree.files()] == ["src/a.PY"]


class TestDefaultRegistry:
    def test_builtin_checks_and_weights(self, tmp_path):
        registry = build_default_registry(GateSettings(root=tmp_path))

        assert registry.ids == ["error-patterns", "whitespace", "file-size"]
        assert [c.weight for c in registry] == [50, 30, 20]
        assert [c.fixable for c in registry] == [False, True, False]

    def test_weight_overrides(self, tmp_path):
        settings = GateSettings(root=tmp_path, weights={"error-patterns": 40, "whitespace": 40})

        registry = build_default_registry(settings)

        assert [c.weight for c in registry] == [40, 40, 20]

    def test_invalid_weight_overrides(self, tmp_path):
        settings = GateSettings(root=tmp_path, weights={"whitespace": 90})

        with pytest.raises(RegistryError):
            build_default_registry(settings)
