"""Huck Configuration — project-level .huckrc.json support.

Loads configuration from .huckrc.json (or huck.config.json) in the project
root or any parent directory.

Example .huckrc.json:
    {
      "log_level": "info",
      "output_format": "json",
      "opt_level": 3,
      "emit_ir_file": true
    }
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class HuckConfig:
    """Project-level Huck configuration."""
    # "debug", "info", "warning", "error"
    log_level: str = "warning"
    # "pretty" or "json"
    output_format: str = "pretty"
    # Native code generation optimisation level (0-3)
    opt_level: int = 2
    # Write <source>.ll next to the source when running `huck ir`
    emit_ir_file: bool = False

    @property
    def logging_level(self) -> int:
        level = getattr(logging, self.log_level.upper(), None)
        # logging also exposes non-level constants such as BASIC_FORMAT
        if not isinstance(level, int):
            return logging.WARNING
        return level


_CONFIG_FILES = [
    ".huckrc.json",
    "huck.config.json",
]


def find_config(start_dir: str = ".") -> Optional[str]:
    """Find the nearest config file by walking up from start_dir."""
    current = os.path.abspath(start_dir)
    while True:
        for name in _CONFIG_FILES:
            path = os.path.join(current, name)
            if os.path.isfile(path):
                return path
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Optional[str] = None, start_dir: str = ".") -> HuckConfig:
    """Load configuration from a file.

    If no path is given, searches for a config file starting from start_dir.
    If no config file is found, or it cannot be read, returns defaults.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return HuckConfig()

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("ignoring config file %s: %s", path, e)
        return HuckConfig()

    if not isinstance(data, dict):
        logger.warning("ignoring config file %s: top level is not an object", path)
        return HuckConfig()

    return _dict_to_config(data)


def _dict_to_config(data: Dict[str, Any]) -> HuckConfig:
    """Convert a parsed dict to HuckConfig."""
    config = HuckConfig()

    if "log_level" in data:
        config.log_level = str(data["log_level"])
    if "output_format" in data and data["output_format"] in ("pretty", "json"):
        config.output_format = str(data["output_format"])
    if "opt_level" in data:
        try:
            config.opt_level = max(0, min(3, int(data["opt_level"])))
        except (TypeError, ValueError, OverflowError):
            logger.warning("ignoring opt_level %r: not an integer", data["opt_level"])
    if "emit_ir_file" in data:
        config.emit_ir_file = bool(data["emit_ir_file"])

    return config
