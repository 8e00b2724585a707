"""
Global Configuration and Explorer Defaults.

This module centralizes the defaults used by the exploration controller
and the backend client, plus the optional `.narsil/explorer.yaml` override
file and `NARSIL_*` environment variables.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from .core.exceptions import ConfigError
from .core.types import Direction, LayoutType, ViewKind

logger = logging.getLogger(__name__)

# --- Backend ---
# narsil-mcp serves its HTTP API here when started with --http
DEFAULT_BASE_URL = "http://localhost:3000"

# Seconds before a single backend request is abandoned
REQUEST_TIMEOUT_SECONDS = 30.0

# Extra attempts after a failed request (total attempts = RETRY_COUNT + 1)
RETRY_COUNT = 1

# Cached graph responses are served without refetching for this long
STALE_TIME_SECONDS = 60.0

# --- Query defaults ---
# Small depth keeps the first load fast
DEFAULT_DEPTH = 2
DEFAULT_VIEW = ViewKind.CALL
DEFAULT_DIRECTION = Direction.BOTH

# --- Rendering bounds ---
DEFAULT_MAX_NODES = 100
MIN_MAX_NODES = 10

# At or above this bound the reducer never prunes
MAX_NODES_CEILING = 500

DEFAULT_LAYOUT = LayoutType.DAGRE

DEFAULT_SETTINGS_PATH = Path(".narsil/explorer.yaml")

REMEDIATION_COMMAND = "./narsil-mcp --repos . --http --call-graph"


class ExplorerSettings(BaseModel):
    """
    User-tunable settings for one explorer session.
    """
    base_url: str = DEFAULT_BASE_URL
    timeout: float = REQUEST_TIMEOUT_SECONDS
    retries: int = RETRY_COUNT
    stale_time: float = STALE_TIME_SECONDS
    depth: int = DEFAULT_DEPTH
    view: ViewKind = DEFAULT_VIEW
    direction: Direction = DEFAULT_DIRECTION
    max_nodes: int = DEFAULT_MAX_NODES
    layout: LayoutType = DEFAULT_LAYOUT

    @field_validator("max_nodes")
    @classmethod
    def _clamp_max_nodes(cls, value: int) -> int:
        return clamp_max_nodes(value)

    @field_validator("depth", "retries")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must be >= 0")
        return value


def clamp_max_nodes(value: int) -> int:
    """Clamp a node bound into the range the controls allow."""
    return max(MIN_MAX_NODES, min(MAX_NODES_CEILING, value))


def load_settings(config_path: Optional[Path] = None) -> ExplorerSettings:
    """
    Load settings from yaml, then apply environment overrides.

    A missing file yields defaults. An unreadable file is logged and ignored.

    Raises:
        ConfigError: If the file parses but contains invalid values.
    """
    path = config_path or DEFAULT_SETTINGS_PATH
    data: dict = {}

    if path.exists():
        try:
            with open(path, "r") as f:
                loaded = yaml.safe_load(f) or {}
            data = loaded.get("explorer", loaded) if isinstance(loaded, dict) else {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Ignoring unreadable settings file {path}: {e}")

    env_url = os.getenv("NARSIL_URL")
    if env_url:
        data["base_url"] = env_url

    env_max_nodes = os.getenv("NARSIL_MAX_NODES")
    if env_max_nodes:
        try:
            data["max_nodes"] = int(env_max_nodes)
        except ValueError:
            logger.warning(f"Ignoring non-integer NARSIL_MAX_NODES={env_max_nodes!r}")

    try:
        return ExplorerSettings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {path}: {e}") from e
