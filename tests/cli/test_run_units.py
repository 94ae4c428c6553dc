"""End-to-end tests of the command-line runner on a file datastore."""

import pytest

import spatialunits.cli.run_units as run_units
from spatialunits.cli.run_units import load_user_config_dict, main, run_units_pipeline
from spatialunits.contracts import ContractViolation
from spatialunits.datasource import DataSource
from spatialunits.pipeline import RunTracker
from tests.helpers.fake_processes import load_territory, make_registry

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]

PROVIDER = "tests.helpers.fake_processes:make_registry"


@pytest.fixture
def datastore(tmp_path):
    """File datastore holding the default territory."""
    path = tmp_path / "territory.sqlite"
    with DataSource(path) as ds:
        load_territory(ds)
    return path


@pytest.fixture
def user_config(tmp_path, datastore):
    path = tmp_path / "user_config.py"
    path.write_text(
        "CONFIG = {\n"
        f"    'BASE_DIR': {str(tmp_path / 'out')!r},\n"
        f"    'DATASTORE': {str(datastore)!r},\n"
        "    'PREFIX_NAME': 'p1',\n"
        "    'ZONE_TABLE': 'ZONE',\n"
        "    'BUILDING_TABLE': 'BUILDING',\n"
        "    'ROAD_TABLE': 'ROAD',\n"
        "    'RAIL_TABLE': 'RAIL',\n"
        "    'VEGETATION_TABLE': 'VEGETATION',\n"
        "    'HYDROGRAPHIC_TABLE': 'HYDRO',\n"
        "}\n"
    )
    return path


def test_load_user_config_dict(user_config):
    config = load_user_config_dict(str(user_config))

    assert config["PREFIX_NAME"] == "p1"


def test_load_user_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_user_config_dict(str(tmp_path / "nope.py"))


def test_load_user_config_without_dict(tmp_path):
    path = tmp_path / "empty.py"
    path.write_text("X = 1\n")

    with pytest.raises(ValueError, match="No CONFIG dict"):
        load_user_config_dict(str(path))


def test_run_with_registry(user_config, datastore, tmp_path, restore_root_logger):
    result = run_units_pipeline(str(user_config), registry=make_registry())

    assert result.ok
    assert result.outputs.rsu_table == "p1_rsu"
    with DataSource(datastore) as ds:
        assert ds.table_exists(result.outputs.building_table)
        assert ds.table_exists(result.outputs.block_table)

    out = tmp_path / "out"
    assert (out / "logs" / "units_p1.log").exists()
    tracker = RunTracker(out / "runs" / "runs.db")
    try:
        assert tracker.get_run(result.run_id)["status"] == "completed"
    finally:
        tracker.close()


def test_run_with_provider_and_cli_prefix(user_config, datastore, restore_root_logger):
    result = run_units_pipeline(
        str(user_config),
        cli_args={"process_provider": PROVIDER, "prefix_name": "p2", "mode": "parallel"},
    )

    assert result.ok
    assert result.outputs.rsu_table == "p2_rsu"
    assert result.outputs.block_table.startswith("p2")


def test_run_without_processes_raises(user_config, restore_root_logger):
    with pytest.raises(ValueError, match="No process implementations"):
        run_units_pipeline(str(user_config))


def test_failed_run_reports_step(user_config, restore_root_logger):
    result = run_units_pipeline(str(user_config), registry=make_registry(fail=["create_blocks"]))

    assert not result.ok
    assert result.failed_step == "create_blocks"
    assert result.outputs is None


def test_main_success(user_config, capsys, restore_root_logger):
    code = main([str(user_config), "--provider", PROVIDER])

    assert code == 0
    out = capsys.readouterr().out
    assert "p1_rsu" in out
    assert "p1_block_id_rsu" in out


def test_main_failure_exit_code(tmp_path, datastore, capsys, restore_root_logger):
    # no building table configured: create_blocks cannot bind its input
    config = tmp_path / "partial.py"
    config.write_text(
        "CONFIG = {\n"
        f"    'BASE_DIR': {str(tmp_path / 'out')!r},\n"
        "    'ZONE_TABLE': 'ZONE', 'ROAD_TABLE': 'ROAD', 'RAIL_TABLE': 'RAIL',\n"
        "    'VEGETATION_TABLE': 'VEGETATION', 'HYDROGRAPHIC_TABLE': 'HYDRO',\n"
        "}\n"
    )

    code = main([str(config), "--provider", PROVIDER, "--datastore", str(datastore)])

    assert code == 1
    err = capsys.readouterr().err
    assert "create_blocks" in err
    assert "building_table" in err


def test_main_reports_output_contract_violation(user_config, monkeypatch, capsys, restore_root_logger):
    def inconsistent(datasource, result):
        raise ContractViolation("block ids missing from p1_rsu", "check_outputs")

    monkeypatch.setattr(run_units, "check_outputs", inconsistent)

    code = main([str(user_config), "--provider", PROVIDER])

    assert code == 1
    err = capsys.readouterr().err
    assert "[check_outputs] block ids missing from p1_rsu" in err
