"""
Server Configuration

Configuration dataclasses for sqlitectl: store location, logging sinks and
server identity. Includes load_config() for reading a JSON config file
with silent fallback to compiled defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlitectl.executor import DEFAULT_DB_PATH


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when config values are invalid."""

    pass


VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class StoreConfig:
    """SQLite store configuration."""
    db_path: str = str(DEFAULT_DB_PATH)

    def validate(self) -> List[str]:
        """Return list of validation error messages (empty = valid)."""
        if not self.db_path or not self.db_path.strip():
            return ["store.db_path: must be a non-empty path"]
        return []


@dataclass
class LoggingConfig:
    """Log level and optional file sinks."""
    level: str = "INFO"
    error_log: Optional[str] = None     # ERROR and above only
    combined_log: Optional[str] = None  # everything at `level`

    def validate(self) -> List[str]:
        """Return list of validation error messages (empty = valid)."""
        if str(self.level).upper() not in VALID_LOG_LEVELS:
            return [
                f"logging.level: {self.level!r} not in {', '.join(VALID_LOG_LEVELS)}"
            ]
        return []


@dataclass
class ServerConfig:
    """MCP server identity and audit sink."""
    name: str = "sqlite"
    audit_log: Optional[str] = None

    def validate(self) -> List[str]:
        """Return list of validation error messages (empty = valid)."""
        if not self.name:
            return ["server.name: must be non-empty"]
        return []


@dataclass
class SqliteConfig:
    """Top-level sqlitectl configuration."""
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> SqliteConfig:
        """Build config from a nested dict (e.g. JSON)."""
        kwargs: Dict[str, Any] = {}
        if "store" in d:
            kwargs["store"] = StoreConfig(**d["store"])
        if "logging" in d:
            kwargs["logging"] = LoggingConfig(**d["logging"])
        if "server" in d:
            kwargs["server"] = ServerConfig(**d["server"])
        return cls(**kwargs)

    def validate(self) -> List[str]:
        """Validate all config sections. Returns list of error messages."""
        errors: List[str] = []
        errors.extend(self.store.validate())
        errors.extend(self.logging.validate())
        errors.extend(self.server.validate())
        return errors


def load_config(
    path: Optional[str] = None, *, strict: bool = False,
) -> SqliteConfig:
    """Load config from a JSON file. Returns defaults if file missing/invalid.

    Args:
        path: Path to config.json. If None, returns compiled defaults.
        strict: If True, raise ConfigError on invalid config values.

    Returns:
        SqliteConfig with values from file or defaults.

    Raises:
        ConfigError: If strict=True and config values are invalid.
    """
    if path is None:
        cfg = SqliteConfig()
    else:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            cfg = SqliteConfig.from_dict(data)
        except (FileNotFoundError, json.JSONDecodeError, TypeError, KeyError):
            cfg = SqliteConfig()

    if strict:
        errors = cfg.validate()
        if errors:
            raise ConfigError(
                f"Config validation failed: {'; '.join(errors)}"
            )

    return cfg
