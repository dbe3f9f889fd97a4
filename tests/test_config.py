"""
Test: configuration loading, environment overrides and utilities.
"""
import logging

import pytest

from smartgrade.config.loader import ENV_DATA_DIR, ENV_OWNER, ConfigLoader
from smartgrade.errors import ConfigError
from smartgrade.utils.files import csv_export_path, safe_filename, write_atomic
from smartgrade.utils.ids import ShortIdGenerator, unique_id
from smartgrade.utils.logging import PACKAGE_LOGGER, resolve_level, setup_logging


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv(ENV_DATA_DIR, raising=False)
    monkeypatch.delenv(ENV_OWNER, raising=False)
    return monkeypatch


class TestConfigLoader:
    def test_defaults_without_file(self, clean_env):
        config = ConfigLoader(use_env=False).load()
        assert config.owner == "default"
        assert config.grading.assignment_weight == 100.0
        assert config.grading.passing_percentage == 50.0
        assert config.export.decimals == 2

    def test_yaml_file(self, tmp_path, clean_env):
        (tmp_path / "smartgrade.yaml").write_text(
            "owner: ms-rivera\n"
            "grading:\n"
            "  passing_percentage: 60\n"
            "export:\n"
            "  delimiter: ';'\n"
            "logging:\n"
            "  level: info\n",
            encoding="utf-8",
        )
        config = ConfigLoader(tmp_path, use_env=False).load("smartgrade.yaml")
        assert config.owner == "ms-rivera"
        assert config.grading.passing_percentage == 60.0
        assert config.grading.assignment_weight == 100.0
        assert config.export.delimiter == ";"
        assert config.logging.level == "info"
        assert config.logging.file is None

    def test_env_overrides(self, tmp_path, clean_env):
        clean_env.chdir(tmp_path)
        clean_env.setenv(ENV_DATA_DIR, str(tmp_path / "data"))
        clean_env.setenv(ENV_OWNER, "env-owner")
        config = ConfigLoader(tmp_path).load()
        assert config.data_dir == tmp_path / "data"
        assert config.owner == "env-owner"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            ConfigLoader(tmp_path, use_env=False).load("missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / "bad.yaml").write_text("owner: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            ConfigLoader(tmp_path, use_env=False).load("bad.yaml")

    def test_not_a_mapping(self, tmp_path):
        (tmp_path / "list.yaml").write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            ConfigLoader(tmp_path, use_env=False).load("list.yaml")


class TestUtilities:
    def test_unique_id(self):
        assert unique_id("S1", set()) == "S1"
        assert unique_id("S1", {"S1", "S1-1"}) == "S1-2"

    def test_short_ids(self):
        new_id = ShortIdGenerator().new_id()
        assert len(new_id) == 8
        assert new_id == new_id.upper()

    def test_safe_filename(self):
        assert safe_filename("Lab Report: Week 1") == "Lab_Report_Week_1"
        assert safe_filename("Évaluation") == "Evaluation"
        assert safe_filename("///") == "unnamed"

    def test_csv_export_path(self, tmp_path):
        assert str(csv_export_path("Lab Report")) == "grades_Lab_Report.csv"
        assert csv_export_path("x", "course_", tmp_path) == tmp_path / "course_x.csv"

    def test_write_atomic_replaces_content(self, tmp_path):
        path = tmp_path / "nested" / "doc.json"
        write_atomic(path, b"one")
        write_atomic(path, b"two")
        assert path.read_bytes() == b"two"
        assert [p.name for p in path.parent.iterdir()] == ["doc.json"]


class TestLogging:
    def test_resolve_level(self):
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level(logging.ERROR) == logging.ERROR
        with pytest.raises(ValueError):
            resolve_level("chatty")

    def test_setup_replaces_handlers(self, tmp_path, reset_logging):
        setup_logging("info")
        logger = setup_logging("warning", log_file=tmp_path / "logs" / "run.log")
        assert logger.name == PACKAGE_LOGGER
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 2
        assert (tmp_path / "logs" / "run.log").exists()
