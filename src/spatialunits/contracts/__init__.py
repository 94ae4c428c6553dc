"""Pipeline contracts: fail-fast enforcement at step boundaries.

Key principle:
- Pydantic validates config correctness
- The binder validates wiring between steps
- Contracts validate what each step claims to have produced
"""

from spatialunits.contracts.failure import (
    BindingError,
    ContractViolation,
    MissingBinding,
    PipelineError,
    StepExecutionError,
)
from spatialunits.contracts.base import require
from spatialunits.contracts.units import (
    assert_scales_relation,
    assert_step_outputs,
    assert_unit_table,
    assert_units_of_analysis,
)

__all__ = [
    "PipelineError",
    "BindingError",
    "MissingBinding",
    "StepExecutionError",
    "ContractViolation",
    "require",
    "assert_step_outputs",
    "assert_unit_table",
    "assert_scales_relation",
    "assert_units_of_analysis",
]
