"""
Pytest configuration and shared fixtures for RuntimeKit tests.
"""

import json

import pytest

from runtimekit.core.layer import Layer
from runtimekit.core.network import NetworkPolicy
from runtimekit.core.platform import PlatformInfo
from runtimekit.runtime.registry import RuntimeRegistry

# Import test fixtures to make them available to all tests
# ruff: noqa: F401
from tests.fixtures.archives import go_archive
from tests.fixtures.projects import bare_go_project, empty_project, go_project
from tests.mocks.network import FakeExtractor, FakeHttpClient
from tests.utils.helpers import GO_ALT_CATALOG_URL, GO_CATALOG_URL, go_archive_url


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def registry() -> RuntimeRegistry:
    """Registry with the built-in runtime definitions."""
    return RuntimeRegistry()


@pytest.fixture
def go_runtime(registry):
    """The built-in Go runtime definition."""
    return registry.get("go")


@pytest.fixture
def linux_x64() -> PlatformInfo:
    """Canonical linux-x64 platform."""
    return PlatformInfo("linux", "x64")


@pytest.fixture
def layers_dir(tmp_path):
    """Empty layers root."""
    path = tmp_path / "layers"
    path.mkdir()
    return path


@pytest.fixture
def go_layer(layers_dir) -> Layer:
    """Empty Go layer."""
    return Layer(layers_dir, "go")


@pytest.fixture
def catalog_body() -> str:
    """Catalog whose newest entry is a pre-release."""
    return json.dumps(
        [
            {"version": "go1.21.0", "stable": False},
            {"version": "go1.20.5", "stable": True},
            {"version": "go1.19.10", "stable": True},
        ]
    )


@pytest.fixture
def fake_http(catalog_body) -> FakeHttpClient:
    """Transport serving both catalogs and the default 1.20.5 archive."""
    return FakeHttpClient(
        statuses={go_archive_url("1.20.5"): 200},
        bodies={GO_CATALOG_URL: catalog_body, GO_ALT_CATALOG_URL: catalog_body},
    )


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    """Extractor that records calls and writes bin/go."""
    return FakeExtractor()


@pytest.fixture
def default_policy() -> NetworkPolicy:
    return NetworkPolicy.DEFAULT
