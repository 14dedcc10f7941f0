"""
Configuration management for Flow Builder.

Settings resolve in this order:
1. Environment variable FLOWBUILDER_<KEY> (a .env file is loaded at startup)
2. config.json next to the executable/project root
3. The built-in default

Config is stored in config.json next to the executable/project root.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Tuple

from flowbuilder.paths import get_config_path, get_flows_dir

logger = logging.getLogger(__name__)

ENV_PREFIX = "FLOWBUILDER_"

DEFAULT_CANVAS_SIZE = (1200, 720)
DEFAULT_PORT = 8082


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from config.json."""
    config_path = config_path or get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
                return data if isinstance(data, dict) else {}
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable config {config_path}: {e}")
            return {}
    return {}


def save_config(config: dict, config_path: Optional[Path] = None) -> None:
    """Save configuration to config.json."""
    config_path = config_path or get_config_path()
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)


def get_setting(key: str, default: Any = None, config_path: Optional[Path] = None) -> Any:
    """Look up a setting by key (e.g. 'canvas_width')."""
    env_value = os.environ.get(ENV_PREFIX + key.upper())
    if env_value:
        return env_value
    return load_config(config_path).get(key, default)


def set_setting(key: str, value: Any, config_path: Optional[Path] = None) -> None:
    config = load_config(config_path)
    config[key] = value
    save_config(config, config_path)


def _int_setting(key: str, default: int, config_path: Optional[Path] = None) -> int:
    raw = get_setting(key, default, config_path)
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Setting {key}={raw!r} is not an integer, using {default}")
        return default


def get_canvas_size(config_path: Optional[Path] = None) -> Tuple[int, int]:
    """Canvas size in screen pixels as (width, height)."""
    return (
        _int_setting('canvas_width', DEFAULT_CANVAS_SIZE[0], config_path),
        _int_setting('canvas_height', DEFAULT_CANVAS_SIZE[1], config_path),
    )


def get_port(config_path: Optional[Path] = None) -> int:
    return _int_setting('port', DEFAULT_PORT, config_path)


def get_flows_path(config_path: Optional[Path] = None) -> Path:
    """Directory for saved flows; overridable with the 'flows_dir' setting."""
    configured = get_setting('flows_dir', None, config_path)
    return Path(configured) if configured else get_flows_dir()
