"""Shared test fixtures for zakat_engine."""

import os
import tempfile

import pytest


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML settings file."""
    import yaml

    config_data = {
        "methodology": {"default": "hanafi"},
        "snapshot": {"default_age": 45, "default_tax_rate": 0.30},
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture(scope="session")
def registry():
    """Registry of the packaged presets, default bradford."""
    from zakat_engine.methodology.registry import build_registry

    return build_registry()


@pytest.fixture
def methodology(registry):
    """Look up a packaged methodology by id."""
    return registry.get


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Reset settings and registry singletons between tests."""
    from zakat_engine.core.config import reset_config
    from zakat_engine.methodology.registry import reset_default_registry

    reset_config()
    reset_default_registry()
    yield
    reset_config()
    reset_default_registry()
