import sys
import types

import pytest

from spatialunits.processes import (
    CREATE_RSU,
    FunctionProcess,
    ProcessRegistry,
    ProcessSpec,
    load_provider,
    param,
)
from tests.helpers.fake_processes import FAKE_PROCESSES, FakeCreateRsu, make_registry

pytestmark = pytest.mark.unit


def test_register_and_get():
    registry = ProcessRegistry()
    proc = FakeCreateRsu()

    registry.register(proc)

    assert registry.get("create_rsu") is proc
    assert "create_rsu" in registry
    assert len(registry) == 1
    assert registry.names() == ["create_rsu"]


def test_missing_lists_unregistered_catalog_names():
    registry = ProcessRegistry([FakeCreateRsu()])

    assert registry.missing() == ["prepare_rsu_data", "create_blocks", "create_scales_relations"]
    assert make_registry().missing() == []


def test_get_unknown_raises():
    with pytest.raises(KeyError, match="create_districts"):
        ProcessRegistry().get("create_districts")


def test_register_function():
    registry = ProcessRegistry()

    proc = registry.register_function(
        CREATE_RSU, lambda datasource, input_table_name, prefix_name: {"output_table_name": "rsu"}
    )

    assert isinstance(proc, FunctionProcess)
    outcome = proc.execute({"datasource": None, "input_table_name": "t", "prefix_name": ""})
    assert outcome.outputs["output_table_name"] == "rsu"


def test_schema_mismatch_is_rejected():
    wrong = ProcessSpec(name="create_rsu", inputs=[param("datasource")], outputs=[param("output_table_name", str)])

    with pytest.raises(ValueError, match="does not match the declared schema"):
        ProcessRegistry().register_function(wrong, lambda **kw: {})


def test_extra_process_names_are_allowed():
    extra = ProcessSpec(name="create_districts", outputs=[param("output_table_name", str)])
    registry = ProcessRegistry()

    registry.register_function(extra, lambda **kw: {"output_table_name": "districts"})

    assert "create_districts" in registry


def test_replacing_logs_a_warning(caplog):
    registry = ProcessRegistry([FakeCreateRsu()])

    registry.register(FakeCreateRsu())

    assert "Replacing registered process" in caplog.text


# =============================================================================
# Provider loading
# =============================================================================

@pytest.fixture
def provider_module(monkeypatch):
    module = types.ModuleType("units_provider_for_tests")
    module.REGISTRY = make_registry()
    module.PROCESSES = {name: cls() for name, cls in FAKE_PROCESSES.items()}
    module.PROCESS_LIST = [cls() for cls in FAKE_PROCESSES.values()]
    module.build = make_registry
    module.NOT_A_PROVIDER = 42
    monkeypatch.setitem(sys.modules, module.__name__, module)
    return module


@pytest.mark.parametrize("attr", ["REGISTRY", "PROCESSES", "PROCESS_LIST", "build"])
def test_load_provider_variants(provider_module, attr):
    registry = load_provider(f"units_provider_for_tests:{attr}")

    assert isinstance(registry, ProcessRegistry)
    assert registry.missing() == []


def test_load_provider_returns_registry_unchanged(provider_module):
    assert load_provider("units_provider_for_tests:REGISTRY") is provider_module.REGISTRY


@pytest.mark.parametrize("target", ["units_provider_for_tests", ":REGISTRY", "units_provider_for_tests:"])
def test_malformed_target(target):
    with pytest.raises(ValueError, match="module:attribute"):
        load_provider(target)


def test_unsupported_provider_type(provider_module):
    with pytest.raises(ValueError, match="Unsupported process provider"):
        load_provider("units_provider_for_tests:NOT_A_PROVIDER")


def test_unknown_module():
    with pytest.raises(ImportError):
        load_provider("no_such_units_provider:REGISTRY")
