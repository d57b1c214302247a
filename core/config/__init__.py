# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 07 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for schema reconciliation.
"""

from core.config.defaults import (
    DatabaseDefaults,
    ReconcileDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "DatabaseDefaults",
    "ReconcileDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
