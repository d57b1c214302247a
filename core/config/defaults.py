# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for database connections and reconciliation
# CREATED: 07 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for the database connection and the reconciler.
These can be overridden via environment variables or CLI arguments.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class DatabaseDefaults:
    """
    Defaults for the PostgreSQL connection.

    DATABASE_URL, when set, wins over the individual POSTGRES_* settings.
    """
    host: str = "localhost"
    port: int = 5432
    dbname: str = "postgres"
    user: str = "postgres"
    password: str = ""
    sslmode: str = "prefer"
    schema: Optional[str] = None
    url: Optional[str] = None

    # Pool settings (pool is only used when enabled)
    use_pool: bool = False
    pool_min_size: int = 1
    pool_max_size: int = 5
    connect_timeout: int = 10

    def connection_string(self) -> str:
        """libpq connection string for psycopg.connect()."""
        if self.url:
            return self.url
        parts = [
            f"host={self.host}",
            f"port={self.port}",
            f"dbname={self.dbname}",
            f"user={self.user}",
            f"sslmode={self.sslmode}",
            f"connect_timeout={self.connect_timeout}",
        ]
        if self.password:
            parts.append(f"password={self.password}")
        return " ".join(parts)

    def safe_description(self) -> str:
        """Connection target without credentials, for logs."""
        if self.url:
            return self.url.split("@")[-1]
        return f"{self.host}:{self.port}/{self.dbname}"

    @classmethod
    def from_env(cls) -> "DatabaseDefaults":
        """Create from environment variables."""
        return cls(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=int(os.getenv("POSTGRES_PORT", 5432)),
            dbname=os.getenv("POSTGRES_DB", "postgres"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", ""),
            sslmode=os.getenv("POSTGRES_SSLMODE", "prefer"),
            schema=os.getenv("POSTGRES_SCHEMA") or None,
            url=os.getenv("DATABASE_URL") or None,
            use_pool=_env_bool("POSTGRES_USE_POOL", False),
            pool_min_size=int(os.getenv("POSTGRES_POOL_MIN_SIZE", 1)),
            pool_max_size=int(os.getenv("POSTGRES_POOL_MAX_SIZE", 5)),
            connect_timeout=int(os.getenv("POSTGRES_CONNECT_TIMEOUT", 10)),
        )


@dataclass(frozen=True)
class ReconcileDefaults:
    """
    Defaults for schema reconciliation runs.
    """
    dry_run: bool = False
    log_statements: bool = True

    @classmethod
    def from_env(cls) -> "ReconcileDefaults":
        """Create from environment variables."""
        return cls(
            dry_run=_env_bool("RECONCILE_DRY_RUN", False),
            log_statements=_env_bool("RECONCILE_LOG_STATEMENTS", True),
        )


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    database: DatabaseDefaults = field(default_factory=DatabaseDefaults)
    reconcile: ReconcileDefaults = field(default_factory=ReconcileDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            database=DatabaseDefaults.from_env(),
            reconcile=ReconcileDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DatabaseDefaults",
    "ReconcileDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
