"""
Pytest configuration and shared fixtures for SCOPEWIRE tests.

This module provides:
- Fresh descriptor registries and containers per test
- Reset of process-wide state (global container, metrics)
"""

import pytest

from scopewire import Container, ContainerOptions
from scopewire.di import DescriptorRegistry
from scopewire.observability.logging import clear_correlation_id
from scopewire.observability.metrics import reset_metrics_collector

# ============================================================================
# GLOBAL STATE
# ============================================================================


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset the global container, metrics and logging context around each test."""
    Container.reset_global()
    reset_metrics_collector()
    yield
    Container.reset_global()
    reset_metrics_collector()
    clear_correlation_id()


# ============================================================================
# CONTAINER FIXTURES
# ============================================================================


@pytest.fixture
def registry() -> DescriptorRegistry:
    """Descriptor registry isolated from the process-wide default."""
    return DescriptorRegistry()


@pytest.fixture
def container(registry: DescriptorRegistry) -> Container:
    """Root container backed by the test's registry."""
    return Container(descriptors=registry, name="test")


@pytest.fixture
def manual_container(registry: DescriptorRegistry) -> Container:
    """Root container with auto-resolution switched off."""
    return Container(ContainerOptions(auto_resolve=False), descriptors=registry)
