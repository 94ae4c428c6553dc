"""Pipeline modules.

- binder: Parameter binding between steps
- steps: Step graph and the units-of-analysis pipeline
- orchestrator: Fail-fast pipeline controller
- run_tracker: SQLite-based run tracking
"""

from spatialunits.pipeline.binder import ResultContext, bind_arguments, external, output_of
from spatialunits.pipeline.steps import PipelineDefinition, PipelineStep, build_units_pipeline
from spatialunits.pipeline.orchestrator import (
    PipelineOrchestrator,
    PipelineResult,
    RunContext,
    UnitsOfAnalysis,
    UnitsOfAnalysisProcess,
)
from spatialunits.pipeline.run_tracker import RunTracker

__all__ = [
    "ResultContext",
    "bind_arguments",
    "external",
    "output_of",
    "PipelineDefinition",
    "PipelineStep",
    "build_units_pipeline",
    "PipelineOrchestrator",
    "PipelineResult",
    "RunContext",
    "UnitsOfAnalysis",
    "UnitsOfAnalysisProcess",
    "RunTracker",
]
