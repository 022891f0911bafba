"""
DAGSCOPE INFRASTRUCTURE

Configuration and logging setup shared by dagcore consumers.
"""
from daginfra.config import (
    DagConfig,
    MatcherConfig,
    LoggingConfig,
    get_config,
    set_config,
    reset_config,
    init_config,
    load_config,
)
from daginfra.log_setup import configure_logging

__all__ = [
    "DagConfig",
    "MatcherConfig",
    "LoggingConfig",
    "get_config",
    "set_config",
    "reset_config",
    "init_config",
    "load_config",
    "configure_logging",
]
