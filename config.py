"""Configuration management for Kakeibo.

Reads configuration from ~/.config/kakeibo.toml and creates default config if needed.
"""

from pathlib import Path
from dataclasses import dataclass
from typing import Optional
import tomllib
import tomli_w


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    log_level: str
    log_dir: Path
    transfer_window_days: int = 3
    top_transactions_limit: int = 5
    moving_average_period: int = 6
    min_trend_months: int = 6
    categories_file: Optional[Path] = None
    merchants_file: Optional[Path] = None

    @property
    def seed_categories_path(self) -> Path:
        """Get the category seed file (configured file or the bundled default)."""
        return self.categories_file or get_default_seed_path()

    @property
    def seed_merchants_path(self) -> Path:
        """Get the merchant seed file (configured file or the bundled default)."""
        return self.merchants_file or get_default_merchant_seed_path()

    @classmethod
    def default(cls) -> "Config":
        """Create a Config with default values."""
        home = Path.home()
        base_dir = home / "data" / "kakeibo"
        return cls(
            base_dir=base_dir,
            log_level="INFO",
            log_dir=base_dir / "logs",
        )


def get_config_path() -> Path:
    """Get the path to the config file."""
    return Path.home() / ".config" / "kakeibo.toml"


def get_default_seed_path() -> Path:
    """Get the path to the bundled default category seed.

    This is always relative to the code location, not configurable.
    """
    return Path(__file__).parent / "db" / "seed" / "categories.json"


def get_default_merchant_seed_path() -> Path:
    """Get the path to the bundled merchant master."""
    return Path(__file__).parent / "db" / "seed" / "merchants.json"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file, creating default if it doesn't exist.

    Args:
        config_path: Optional config file location. Defaults to
                     ~/.config/kakeibo.toml.

    Returns:
        Config object with loaded or default values.
    """
    config_path = config_path or get_config_path()

    # If config doesn't exist, create it with defaults
    if not config_path.exists():
        config = Config.default()
        _write_config(config, config_path)
        return config

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    # Parse with defaults for any missing values
    base_dir = Path(data.get("base_dir", Path.home() / "data" / "kakeibo"))

    log_config = data.get("logging", {})
    log_level = log_config.get("level", "INFO")
    log_dir = Path(log_config.get("log_dir", base_dir / "logs"))

    classification_config = data.get("classification", {})
    transfer_window_days = int(classification_config.get("transfer_window_days", 3))

    reports_config = data.get("reports", {})
    top_transactions_limit = int(reports_config.get("top_transactions_limit", 5))
    moving_average_period = int(reports_config.get("moving_average_period", 6))
    min_trend_months = int(reports_config.get("min_trend_months", 6))

    seed_config = data.get("seed", {})
    categories_file = seed_config.get("categories_file")
    merchants_file = seed_config.get("merchants_file")

    return Config(
        base_dir=base_dir,
        log_level=log_level,
        log_dir=log_dir,
        transfer_window_days=transfer_window_days,
        top_transactions_limit=top_transactions_limit,
        moving_average_period=moving_average_period,
        min_trend_months=min_trend_months,
        categories_file=Path(categories_file) if categories_file else None,
        merchants_file=Path(merchants_file) if merchants_file else None,
    )


def _write_config(config: Config, config_path: Path) -> None:
    """Write config to the config file.

    Args:
        config: Config object to write.
        config_path: Destination file.
    """
    # Ensure config directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "base_dir": str(config.base_dir),
        "logging": {
            "level": config.log_level,
            "log_dir": str(config.log_dir),
        },
        "classification": {
            "transfer_window_days": config.transfer_window_days,
        },
        "reports": {
            "top_transactions_limit": config.top_transactions_limit,
            "moving_average_period": config.moving_average_period,
            "min_trend_months": config.min_trend_months,
        },
    }
    # TOML has no null; an unset seed file is simply omitted
    seed = {}
    if config.categories_file:
        seed["categories_file"] = str(config.categories_file)
    if config.merchants_file:
        seed["merchants_file"] = str(config.merchants_file)
    if seed:
        data["seed"] = seed

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
