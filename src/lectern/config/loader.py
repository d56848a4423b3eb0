from pathlib import Path
from typing import Any, Dict

import yaml

from ..query.models import PaginationSettings

DEFAULT_CONFIG_PATH = Path("lectern.config.yaml")

PAGINATION_KEYS = (
    "default_per_page",
    "default_max_per_page",
    "default_max_filter_and_search_page",
)


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load lectern configuration from YAML file.

    Args:
        path: Optional path to config file. Defaults to lectern.config.yaml

    Returns:
        Dictionary with configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the file is structurally invalid
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")
    if "version" not in config:
        raise ValueError("Config must have 'version' field")

    pagination = config.get("pagination")
    if pagination is not None:
        if not isinstance(pagination, dict):
            raise ValueError("Config 'pagination' must be a dictionary if provided")
        for key, value in pagination.items():
            if key not in PAGINATION_KEYS:
                raise ValueError(f"Unknown pagination setting: {key}")
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"Pagination setting '{key}' must be a positive integer")

    return config


def get_pagination_settings(config: Dict[str, Any] | None = None) -> PaginationSettings:
    """Resolve pagination bounds with built-in fallbacks."""
    if not config:
        return PaginationSettings()
    return PaginationSettings(**(config.get("pagination") or {}))


def load_pagination_settings(path: Path | None = None) -> PaginationSettings:
    return get_pagination_settings(load_config(path))
