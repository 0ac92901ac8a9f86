"""Configuration files for GITHOOKS."""

from pathlib import Path

CONFIG_DIR = Path(__file__).parent
DEFAULT_SETTINGS_FILE = CONFIG_DIR / "defaults.yaml"
README_TEMPLATE_FILE = CONFIG_DIR / "README.md"

__all__ = ["CONFIG_DIR", "DEFAULT_SETTINGS_FILE", "README_TEMPLATE_FILE"]
