"""Shared utilities for the motion analysis engine."""

from .config_loader import get_nested_config, load_config

__all__ = [
    'get_nested_config',
    'load_config',
]
