"""
Centralized settings and path configuration for the pricing service.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


ENV_PREFIX = 'TOUR_PRICING_'


def get_package_root() -> Path:
    """Get the tour_pricing package directory (where data/ lives)."""
    return Path(__file__).resolve().parent.parent


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(f"{ENV_PREFIX}{name}")
    if value is None or value.strip() == '':
        return default
    return value.strip()


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Configuration store
    data_dir: Path
    tiers_csv: Path
    modifiers_csv: Path

    # Logging
    log_level: str = 'INFO'

    # API
    cors_origins: tuple = ('*',)

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the package layout and TOUR_PRICING_* env vars."""
        root = Path(data_dir or _env('DATA_DIR') or get_package_root() / 'data')

        tiers_csv = _env('TIERS_CSV')
        modifiers_csv = _env('MODIFIERS_CSV')
        cors = _env('CORS_ORIGINS', '*')

        return cls(
            data_dir=root,
            tiers_csv=Path(tiers_csv) if tiers_csv else root / 'pricing_tiers.csv',
            modifiers_csv=Path(modifiers_csv) if modifiers_csv else root / 'pricing_modifiers.csv',
            log_level=(_env('LOG_LEVEL', 'INFO')).upper(),
            cors_origins=tuple(o.strip() for o in cors.split(',') if o.strip()),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
