"""
Constants for SCOPEWIRE.

This module contains shared constants used across the codebase to avoid
magic strings and improve maintainability.
"""

from typing import Final

# ============================================================================
# ENVIRONMENT CONFIGURATION
# ============================================================================

ENV_AUTO_RESOLVE: Final[str] = "SCOPEWIRE_AUTO_RESOLVE"
"""Environment variable toggling auto-resolution of injectable classes."""

ENV_DEFAULT_SCOPE: Final[str] = "SCOPEWIRE_DEFAULT_SCOPE"
"""Environment variable selecting the scope for auto-registered classes."""

ENV_RECORD_METRICS: Final[str] = "SCOPEWIRE_RECORD_METRICS"
"""Environment variable toggling resolve metrics."""

TRUTHY_VALUES: Final[frozenset] = frozenset({"1", "true", "yes", "on"})
"""Accepted truthy spellings for boolean environment variables."""

FALSY_VALUES: Final[frozenset] = frozenset({"0", "false", "no", "off"})
"""Accepted falsy spellings for boolean environment variables."""

# ============================================================================
# METRICS
# ============================================================================

METRIC_RESOLVE: Final[str] = "container.resolve"
"""Operation name recorded for top-level synchronous resolves."""

METRIC_RESOLVE_ASYNC: Final[str] = "container.resolve_async"
"""Operation name recorded for top-level asynchronous resolves."""

METRIC_LOAD_MODULE: Final[str] = "container.load_module"
"""Operation name recorded each time a container module is applied."""

DEFAULT_MAX_METRICS: Final[int] = 10000
"""Maximum number of distinct metric keys kept before LRU eviction."""

# ============================================================================
# DIAGNOSTICS
# ============================================================================

CHAIN_SEPARATOR: Final[str] = " -> "
"""Separator used when rendering a resolution chain."""
