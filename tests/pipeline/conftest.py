import pytest

from spatialunits.pipeline import RunTracker, build_units_pipeline


@pytest.fixture
def tracker(temp_dir):
    db_path = temp_dir / "runs.db"
    t = RunTracker(db_path)
    yield t
    t.close()


@pytest.fixture
def definition(registry):
    """The six-step units pipeline wired on fake processes."""
    return build_units_pipeline(registry)

