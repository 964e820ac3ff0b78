from pathlib import Path
from typing import Any, Dict, List

import yaml

DEFAULT_CONFIG_PATH = Path("querykv.config.yaml")
DEFAULT_SQLITE_PATH = "querykv.db"
DEFAULT_LOG_LEVEL = "INFO"

ALLOWED_SECTIONS = ("storage", "query", "logging")


def _validate_config(config: Any) -> Dict[str, Any]:
    """Check section types; missing sections are fine."""
    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")
    if "version" not in config:
        raise ValueError("Config must have 'version' field")

    for section in ALLOWED_SECTIONS:
        value = config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ValueError(f"Config '{section}' must be a dictionary if provided")

    projection = (config.get("query") or {}).get("projection")
    if projection is not None:
        if not isinstance(projection, list):
            raise ValueError("Config 'query.projection' must be a list")
        for name in projection:
            if not isinstance(name, str) or not name:
                raise ValueError(f"Projection attribute names must be non-empty strings, got {name!r}")

    sqlite_path = (config.get("storage") or {}).get("sqlite_path")
    if sqlite_path is not None and not isinstance(sqlite_path, str):
        raise ValueError("Config 'storage.sqlite_path' must be a string")

    return config


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load querykv configuration from YAML file.

    Args:
        path: Optional path to config file. Defaults to querykv.config.yaml

    Returns:
        Dictionary with configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config structure is invalid
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f)
    return _validate_config(config)


def get_sqlite_path(config: Dict[str, Any] | None = None) -> str:
    """SQLite path from config, or querykv.db."""
    storage = (config or {}).get("storage") or {}
    return storage.get("sqlite_path") or DEFAULT_SQLITE_PATH


def get_default_projection(config: Dict[str, Any] | None = None) -> List[str]:
    """Default attribute selector from config; empty means all attributes."""
    query = (config or {}).get("query") or {}
    return list(query.get("projection") or [])


def get_log_level(config: Dict[str, Any] | None = None) -> str:
    logging_cfg = (config or {}).get("logging") or {}
    return str(logging_cfg.get("level") or DEFAULT_LOG_LEVEL).upper()
