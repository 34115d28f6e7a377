"""Settings files for the motion analysis engine."""

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)


def load_config(config_path) -> Dict[str, Any]:
    """
    Read engine settings from YAML.

    An empty file reads as `{}`, leaving every option at its default.
    A missing file raises FileNotFoundError; a file whose top level is
    not a mapping raises ValueError. YAML syntax errors propagate.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.info(f"Reading motion analysis settings from {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Config root must be a mapping, got {type(config).__name__}")

    logger.debug(f"Loaded config sections: {list(config.keys())}")

    return config


def get_nested_config(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """`config['a']['b']` for key_path 'a.b', or `default` when any level is absent."""
    value = config
    for key in key_path.split('.'):
        if not isinstance(value, dict) or key not in value:
            return default
        value = value[key]
    return value
