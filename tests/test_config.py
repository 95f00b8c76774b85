"""Tests for settings loading."""

from pathlib import Path

import pytest

from pos_pnl.config import DATABASE_ENV_VAR, ConfigError, load_config, load_yaml_file


def write_settings(tmp_path: Path, content: str) -> Path:
    """Helper to write a settings.yaml and return its path."""
    path = tmp_path / "settings.yaml"
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadConfig:
    """Tests for load_config."""

    @pytest.fixture(autouse=True)
    def clear_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Keep a developer's POS_PNL_DATABASE out of these tests."""
        monkeypatch.delenv(DATABASE_ENV_VAR, raising=False)

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        """Test a missing settings file falls back to defaults."""
        config = load_config(tmp_path / "absent.yaml")

        assert config.database.path == "inventory.db"
        assert config.database.catalog_path is None
        assert config.reports.product_limit == 50
        assert config.output.format == "xlsx"
        assert config.logging.level == "INFO"

    def test_full_settings(self, tmp_path: Path) -> None:
        """Test every section is read."""
        path = write_settings(
            tmp_path,
            """
database:
  path: /data/inventory.db
  catalog_path: /data/products.db
reports:
  product_limit: 20
  week_start: Sunday
output:
  format: CSV
  currency_symbol: ""
  decimal_places: 3
logging:
  level: DEBUG
  file: ""
""",
        )

        config = load_config(path)

        assert config.database.path == "/data/inventory.db"
        assert config.database.catalog_path == "/data/products.db"
        assert config.reports.product_limit == 20
        assert config.reports.week_start == "sunday"
        assert config.output.format == "csv"
        assert config.output.currency_symbol == ""
        assert config.output.decimal_places == 3
        assert config.logging.level == "DEBUG"
        assert config.logging.file == ""

    def test_env_overrides_database(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test POS_PNL_DATABASE wins over the settings file."""
        path = write_settings(tmp_path, "database:\n  path: from_file.db\n")
        monkeypatch.setenv(DATABASE_ENV_VAR, "/env/inventory.db")

        assert load_config(path).database.path == "/env/inventory.db"

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test an empty settings file gives defaults."""
        config = load_config(write_settings(tmp_path, ""))
        assert config.reports.product_limit == 50

    @pytest.mark.parametrize(
        "content,message",
        [
            ("reports:\n  week_start: monday\n", "week_start"),
            ("reports:\n  product_limit: 0\n", "positive"),
            ("reports:\n  product_limit: many\n", "integer"),
            ("output:\n  format: pdf\n", "format"),
            ("reports: [1, 2]\n", "mapping"),
            ("- just\n- a list\n", "mapping"),
            ("database: {path: [unclosed\n", "Invalid YAML"),
        ],
    )
    def test_invalid_settings(self, tmp_path: Path, content: str, message: str) -> None:
        """Test malformed settings raise ConfigError."""
        path = write_settings(tmp_path, content)

        with pytest.raises(ConfigError, match=message):
            load_config(path)


class TestLoadYamlFile:
    """Tests for load_yaml_file."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_yaml_file(tmp_path / "nope.yaml")
