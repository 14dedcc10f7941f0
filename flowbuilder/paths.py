"""
Where Flow Builder keeps its files on disk.

Saved flows and config.json sit beside the code in development and beside
the executable when frozen, never inside the bundle.
"""

import sys
from pathlib import Path

FLOWS_DIR_NAME = "flows"


def get_app_dir() -> Path:
    """Project root in development, the executable's directory when frozen."""
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(__file__).parent.parent


def get_flows_dir() -> Path:
    """Default directory for saved flows, one JSON file each."""
    return get_app_dir() / FLOWS_DIR_NAME


def get_config_path() -> Path:
    return get_app_dir() / "config.json"
