"""
Centralized settings and path configuration for the CPQ backend.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from .. import __version__
from ..errors import ConfigurationError


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, naming it if malformed."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def get_data_dir() -> Path:
    """Get the directory holding the seed catalog CSVs."""
    return Path(__file__).resolve().parent.parent / 'data'


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Seed data
    data_dir: Path

    # Service identity
    service_name: str = "CPQ Backend API"
    version: str = __version__

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Pricing / quoting
    default_term_months: int = 12
    quote_ttl_days: int = 30

    log_level: str = "INFO"

    @property
    def products_csv(self) -> Path:
        return self.data_dir / 'products.csv'

    @property
    def tiers_csv(self) -> Path:
        return self.data_dir / 'tiers.csv'

    @property
    def customers_csv(self) -> Path:
        return self.data_dir / 'customers.csv'

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings, applying CPQ_* environment overrides."""
        env = os.environ
        root = data_dir or Path(env.get('CPQ_DATA_DIR') or get_data_dir())

        return cls(
            data_dir=root,
            host=env.get('CPQ_HOST', cls.host),
            port=_env_int('CPQ_PORT', cls.port),
            quote_ttl_days=_env_int('CPQ_QUOTE_TTL_DAYS', cls.quote_ttl_days),
            log_level=env.get('CPQ_LOG_LEVEL', cls.log_level).upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
