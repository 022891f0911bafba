"""
DAGSCOPE CONFIGURATION

Settings are read from TOML once, overlaid with environment variables,
and held in a process-wide object that dagcore consults for defaults.

Nothing is read from disk implicitly: until init_config() or set_config()
is called, get_config() returns the built-in defaults.

Usage:
    from daginfra.config import init_config, get_config

    # At startup
    init_config()                          # config/dagscope.toml + env

    # Anywhere
    get_config().matcher.strict_degrees    # True

Environment overrides:
    DAGSCOPE_STRICT_DEGREES     "true" / "false"
    DAGSCOPE_MAX_PATTERN_NODES  integer, or "" / "none" for unlimited
    DAGSCOPE_LOG_LEVEL          logging level name
"""
import os
import warnings
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import msgspec


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "dagscope.toml"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# =============================================================================
# CONFIG SCHEMAS
# =============================================================================

class MatcherConfig(msgspec.Struct, kw_only=True, frozen=True):
    """Subgraph matcher defaults."""
    strict_degrees: bool = True                 # Degree-consistency pruning
    max_pattern_nodes: Optional[int] = None     # Search budget. None = unlimited.


class LoggingConfig(msgspec.Struct, kw_only=True, frozen=True):
    """Logging setup for daginfra.log_setup."""
    level: str = "WARNING"
    format: str = DEFAULT_LOG_FORMAT


class DagConfig(msgspec.Struct, kw_only=True, frozen=True):
    """Top-level configuration."""
    matcher: MatcherConfig = msgspec.field(default_factory=MatcherConfig)
    logging: LoggingConfig = msgspec.field(default_factory=LoggingConfig)


# =============================================================================
# LOADING
# =============================================================================

def load_toml_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load raw configuration sections from TOML.

    Returns:
        Dict of sections, or {} if the file is missing or unreadable
    """
    import tomllib

    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        warnings.warn(f"Failed to load config from {config_path}: {e}")
        return {}


def _parse_bool(raw: str) -> Optional[bool]:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return None


def _apply_env_overrides(sections: Dict[str, Any], env: Mapping[str, str]) -> Dict[str, Any]:
    matcher = dict(sections.get("matcher", {}))
    logging_section = dict(sections.get("logging", {}))

    raw = env.get("DAGSCOPE_STRICT_DEGREES")
    if raw is not None:
        parsed = _parse_bool(raw)
        if parsed is None:
            warnings.warn(f"Ignoring DAGSCOPE_STRICT_DEGREES={raw!r}: not a boolean")
        else:
            matcher["strict_degrees"] = parsed

    raw = env.get("DAGSCOPE_MAX_PATTERN_NODES")
    if raw is not None:
        if raw.strip().lower() in ("", "none"):
            matcher["max_pattern_nodes"] = None
        else:
            try:
                matcher["max_pattern_nodes"] = int(raw)
            except ValueError:
                warnings.warn(f"Ignoring DAGSCOPE_MAX_PATTERN_NODES={raw!r}: not an integer")

    raw = env.get("DAGSCOPE_LOG_LEVEL")
    if raw:
        logging_section["level"] = raw.strip().upper()

    merged = dict(sections)
    merged["matcher"] = matcher
    merged["logging"] = logging_section
    return merged


def load_config(
    path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> DagConfig:
    """
    Build a DagConfig from TOML plus environment overrides.

    Unknown sections and keys are ignored. A section with values of the
    wrong type falls back to the defaults, with a warning.

    Args:
        path: TOML file. Defaults to config/dagscope.toml.
        env: Environment mapping. Defaults to os.environ.
    """
    sections = load_toml_config(path)
    sections = _apply_env_overrides(sections, os.environ if env is None else env)

    try:
        return msgspec.convert(
            {"matcher": sections["matcher"], "logging": sections["logging"]},
            DagConfig,
        )
    except msgspec.ValidationError as e:
        warnings.warn(f"Invalid configuration, using defaults: {e}")
        return DagConfig()


# =============================================================================
# PROCESS-WIDE ACCESSOR
# =============================================================================

_config: Optional[DagConfig] = None


def get_config() -> DagConfig:
    """Current configuration (built-in defaults until set)."""
    global _config
    if _config is None:
        _config = DagConfig()
    return _config


def set_config(config: Optional[DagConfig]) -> None:
    """Replace the process-wide configuration. None restores defaults."""
    global _config
    _config = config


def reset_config() -> None:
    """Restore built-in defaults."""
    set_config(None)


def init_config(path: Optional[Path] = None) -> DagConfig:
    """Load configuration from disk and environment, and install it."""
    config = load_config(path)
    set_config(config)
    return config
