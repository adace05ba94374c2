"""
Central configuration for the operations tracker.

All paths, thresholds, and defaults are defined here.
Override via environment variables or by passing a Config instance directly.

Settings priority (highest wins):
  1. Environment variables
  2. config/settings.json  (admin-editable, persisted)
  3. Hardcoded defaults in this file
"""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

# Project root (directory containing this file)
PROJECT_ROOT = Path(__file__).parent

DEFAULT_OUTPUT_DIR = PROJECT_ROOT / "output"
DEFAULT_DB_PATH    = DEFAULT_OUTPUT_DIR / "operations.db"
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "config"

SETTINGS_FILE = "settings.json"

# Settings that an environment variable may also set; the env var wins
_ENV_NAMES = {"default_currency": "DEFAULT_CURRENCY", "default_season": "DEFAULT_SEASON"}


@dataclass
class Config:
    # --- Storage ---
    db_path: Path = field(
        default_factory=lambda: Path(os.getenv("DB_PATH", str(DEFAULT_DB_PATH)))
    )
    config_dir: Path = field(
        default_factory=lambda: Path(os.getenv("CONFIG_DIR", str(DEFAULT_CONFIG_DIR)))
    )

    # --- New PO defaults ---
    default_currency: str = field(
        default_factory=lambda: os.getenv("DEFAULT_CURRENCY", "USD")
    )
    default_season: str = field(
        default_factory=lambda: os.getenv("DEFAULT_SEASON", "AW25")
    )

    # --- Supplier matching on import ---
    supplier_fuzzy_threshold: int = 75    # Minimum rapidfuzz score (0-100)

    # --- Inventory ---
    low_stock_threshold: int = 50         # Units per size below which stock is flagged

    # --- PO export ---
    export_template: str = "po_export_template.xml.j2"

    def __post_init__(self) -> None:
        """Overlay runtime-tunable settings from settings.json if present."""
        settings_file = Path(self.config_dir) / SETTINGS_FILE
        if not settings_file.exists():
            return
        _type_map: dict[str, type] = {
            "default_currency":          str,
            "default_season":            str,
            "supplier_fuzzy_threshold":  int,
            "low_stock_threshold":       int,
            "export_template":           str,
        }
        try:
            with open(settings_file, encoding="utf-8") as f:
                overrides = {k: v for k, v in json.load(f).items() if not k.startswith("_")}
            for key, val in overrides.items():
                if os.getenv(_ENV_NAMES.get(key, "")):
                    continue
                if key in _type_map and hasattr(self, key):
                    setattr(self, key, _type_map[key](val))
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Failed to load %s: %s", SETTINGS_FILE, exc)

    def ensure_output_dir(self) -> None:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
