"""Configuration loading and validation."""

from flowboost.config.settings import (
    build_flow_config,
    load_config,
    load_flow_config,
    validate_config,
)

__all__ = [
    "load_config",
    "validate_config",
    "build_flow_config",
    "load_flow_config",
]
