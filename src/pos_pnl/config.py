"""Configuration loading and validation for the P&L engine."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from pos_pnl.utils.logging_config import get_logger

logger = get_logger(__name__)

# Environment variable that overrides database.path
DATABASE_ENV_VAR = "POS_PNL_DATABASE"

DEFAULT_SETTINGS_PATH = Path("config") / "settings.yaml"


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


def _section(data: dict[str, object], name: str) -> dict[str, object]:
    """Return a mapping section, rejecting non-mapping values."""
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(value).__name__}")
    return value


@dataclass
class DatabaseConfig:
    """Location of the POS SQLite databases.

    Attributes:
        path: Inventory database (transactions, inventory, expenses).
        catalog_path: Products database; None if the catalog lives in ``path``.
    """

    path: str = "inventory.db"
    catalog_path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "DatabaseConfig":
        """Create from dictionary."""
        catalog = data.get("catalog_path")
        return cls(
            path=str(data.get("path", "inventory.db")),
            catalog_path=str(catalog) if catalog else None,
        )


@dataclass
class ReportConfig:
    """Report defaults.

    Attributes:
        product_limit: Number of products in the product ranking.
        week_start: First day of a reporting week (only "sunday").
    """

    product_limit: int = 50
    week_start: str = "sunday"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ReportConfig":
        """Create from dictionary."""
        try:
            product_limit = int(data.get("product_limit", 50))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise ConfigError(f"reports.product_limit must be an integer: {data.get('product_limit')!r}") from None
        if product_limit < 1:
            raise ConfigError(f"reports.product_limit must be positive: {product_limit}")

        week_start = str(data.get("week_start", "sunday")).lower()
        if week_start != "sunday":
            raise ConfigError(f"reports.week_start must be 'sunday', got '{week_start}'")

        return cls(product_limit=product_limit, week_start=week_start)


@dataclass
class OutputConfig:
    """Configuration for output generation.

    Attributes:
        format: Export format (xlsx or csv).
        currency_symbol: Currency symbol for display.
        decimal_places: Number of decimal places.
    """

    format: str = "xlsx"
    currency_symbol: str = "$"
    decimal_places: int = 2

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "OutputConfig":
        """Create from dictionary."""
        output_format = str(data.get("format", "xlsx")).lower()
        if output_format not in ("xlsx", "csv"):
            raise ConfigError(f"output.format must be 'xlsx' or 'csv', got '{output_format}'")
        return cls(
            format=output_format,
            currency_symbol=str(data.get("currency_symbol", "$")),
            decimal_places=int(data.get("decimal_places", 2)),  # type: ignore[arg-type]
        )


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file ("" disables file logging).
    """

    level: str = "INFO"
    file: str = "pos_pnl.log"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=str(data.get("level", "INFO")),
            file=str(data.get("file", "pos_pnl.log") or ""),
        )


@dataclass
class Config:
    """Main configuration container."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    reports: ReportConfig = field(default_factory=ReportConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(content).__name__}")
    return content


def load_config(settings_path: Optional[Path] = None) -> Config:
    """Load configuration from settings.yaml and the environment.

    A missing settings file is not an error; defaults are used.

    Args:
        settings_path: Path to settings.yaml (default: config/settings.yaml).

    Returns:
        Complete Config object.

    Raises:
        ConfigError: If the settings file is malformed.
    """
    if settings_path is None:
        settings_path = DEFAULT_SETTINGS_PATH

    config = Config()

    if settings_path.exists():
        data = load_yaml_file(settings_path)
        config.database = DatabaseConfig.from_dict(_section(data, "database"))
        config.reports = ReportConfig.from_dict(_section(data, "reports"))
        config.output = OutputConfig.from_dict(_section(data, "output"))
        config.logging = LoggingConfig.from_dict(_section(data, "logging"))
        logger.info(f"Loaded settings from {settings_path}")
    else:
        logger.warning(f"Settings file not found: {settings_path}, using defaults")

    env_database = os.environ.get(DATABASE_ENV_VAR)
    if env_database:
        config.database.path = env_database
        logger.info(f"Using database from {DATABASE_ENV_VAR}: {env_database}")

    return config
