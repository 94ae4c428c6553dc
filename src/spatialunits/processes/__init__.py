"""Process declarations and implementations.

- spec: ProcessSpec / ParameterSpec declarations
- outcome: Success / Failure step outcomes
- base: Process interface and FunctionProcess adapter
- catalog: schemas of the spatial unit processes
- registry: name to implementation mapping
"""

from spatialunits.processes.spec import ParameterSpec, ProcessSpec, param
from spatialunits.processes.outcome import Failure, StepOutcome, Success, as_outcome, sequence
from spatialunits.processes.base import FunctionProcess, Process
from spatialunits.processes.catalog import (
    CATALOG,
    CREATE_BLOCKS,
    CREATE_RSU,
    CREATE_SCALES_RELATIONS,
    CREATE_UNITS_OF_ANALYSIS,
    PREPARE_RSU_DATA,
)
from spatialunits.processes.registry import ProcessRegistry, load_provider

__all__ = [
    "ParameterSpec",
    "ProcessSpec",
    "param",
    "Success",
    "Failure",
    "StepOutcome",
    "as_outcome",
    "sequence",
    "Process",
    "FunctionProcess",
    "CATALOG",
    "PREPARE_RSU_DATA",
    "CREATE_RSU",
    "CREATE_BLOCKS",
    "CREATE_SCALES_RELATIONS",
    "CREATE_UNITS_OF_ANALYSIS",
    "ProcessRegistry",
    "load_provider",
]
