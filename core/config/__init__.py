# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 02 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for health evaluation.
"""

from core.config.defaults import (
    HealthDefaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "HealthDefaults",
    "get_defaults",
    "reset_defaults",
]
