"""Root-level pytest fixtures for the spatialunits test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture, an in-memory datastore loaded with a small territory, and
registries of fake processes.
"""

import logging

import pytest
from pathlib import Path
import tempfile
import shutil

from spatialunits.datasource import DataSource
from spatialunits.schemas import ParamConfig, UserConfig, PipelineInputs, resolve_config
from tests.helpers.fake_processes import load_territory, make_registry


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides)."""
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_distance(make_config):
    ...     config = make_config(DISTANCE=2)
    ...     assert config.thresholds.distance == 2.0
    """
    def _make(**user_overrides):
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


# =============================================================================
# Datastore and Process Fixtures
# =============================================================================

@pytest.fixture
def datasource():
    """In-memory datastore, closed after the test."""
    ds = DataSource()
    yield ds
    ds.close()


@pytest.fixture
def territory(datasource):
    """Default input layers loaded on the datastore; returns their names."""
    return load_territory(datasource)


@pytest.fixture
def journal():
    """Shared list receiving the name of each process call, in order."""
    return []


@pytest.fixture
def registry(journal):
    """Registry of fake processes that all succeed."""
    return make_registry(journal)


@pytest.fixture
def inputs(datasource, territory):
    """Pipeline inputs on the default territory with prefix 'p1'."""
    return PipelineInputs(datasource=datasource, prefix_name="p1", **territory)


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def restore_root_logger():
    """Undo setup_logging() changes to the root logger after the test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
