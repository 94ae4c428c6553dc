"""Fail-fast pipeline orchestration.

Runs the steps of a PipelineDefinition in dependency order, binding each
step's inputs from external inputs and earlier outputs. The first failing
step aborts the run: no retry, no partial result.
"""

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any, List, Mapping, Optional, Tuple, Union

from pydantic import field_validator

from spatialunits.contracts.failure import (
    BindingError,
    PipelineError,
    StepExecutionError,
)
from spatialunits.contracts.units import assert_step_outputs
from spatialunits.pipeline.binder import ResultContext, bind_arguments
from spatialunits.pipeline.run_tracker import RunTracker
from spatialunits.pipeline.steps import PipelineDefinition, PipelineStep, build_units_pipeline
from spatialunits.processes.base import Process
from spatialunits.processes.catalog import CREATE_UNITS_OF_ANALYSIS
from spatialunits.processes.outcome import Failure, StepOutcome, Success, sequence
from spatialunits.processes.registry import ProcessRegistry
from spatialunits.schemas.base import FrozenModel
from spatialunits.schemas.inputs import PipelineInputs

__all__ = ['PipelineOrchestrator', 'PipelineResult', 'RunContext', 'UnitsOfAnalysis', 'UnitsOfAnalysisProcess']

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Explicit per-run context handed to ``run``.

    Attributes
    ----------
    logger : logging.Logger, optional
        Logger for this run. Defaults to the module logger.
    run_id : str
        Run identifier, generated when not given.
    tracker : RunTracker, optional
        Records run and step status when provided.
    """
    logger: Optional[logging.Logger] = None
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    tracker: Optional[RunTracker] = None

    @property
    def log(self) -> logging.Logger:
        return self.logger or logger


class UnitsOfAnalysis(FrozenModel):
    """Names of the three tables produced by a successful run.

    Attributes
    ----------
    building_table : str
        Buildings with their block id and RSU id.
    block_table : str
        Blocks with their RSU id.
    rsu_table : str
        Reference spatial units.
    """
    building_table: str
    block_table: str
    rsu_table: str

    @field_validator("building_table", "block_table", "rsu_table")
    @classmethod
    def not_empty(cls, v):
        if not v:
            raise ValueError("table name must not be empty")
        return v


class PipelineResult(FrozenModel):
    """Outcome of a pipeline run.

    Exactly one of ``outputs`` and ``error`` is set.

    Attributes
    ----------
    run_id : str
    outputs : UnitsOfAnalysis or mapping, optional
        Final tables on success.
    error : PipelineError, optional
        The failure, attributed to ``failed_step``.
    failed_step : str, optional
    message : str
        Human-readable summary naming the failed step on failure.
    executed_steps : tuple of str
        Steps that completed successfully, in completion order.
    step_outputs : mapping
        Every recorded step output, keyed ``"step.output"``. Empty on
        failure: a failed run exposes no intermediate tables.
    """
    run_id: str
    outputs: Optional[Any] = None
    error: Optional[PipelineError] = None
    failed_step: Optional[str] = None
    message: str = ""
    executed_steps: Tuple[str, ...] = ()
    step_outputs: Mapping[str, Any] = {}

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> Any:
        """Return the outputs, or raise the run's error."""
        if self.error is not None:
            raise self.error
        return self.outputs


class PipelineOrchestrator:
    """Executes a PipelineDefinition with strict fail-fast semantics.

    For each step the orchestrator binds the inputs (aborting on a binding
    error), executes the process, treats a failure signal and a raised
    exception the same way, checks the declared outputs, and records them
    under the step name. Once every step succeeded the final outputs are
    assembled from the definition's output bindings.

    **Modes:**

    - **sequential** (default): steps run one at a time in declared order.
    - **parallel**: the independent branches of the definition run in a
      thread pool; every branch finishes (or fails) before the next stage
      starts. When several branches fail, the failure of the earliest step
      in declared order is reported.

    Example usage::

        registry = ProcessRegistry([...])
        orch = PipelineOrchestrator.for_units(registry)
        result = orch.run(PipelineInputs(datasource=ds, zone_table="ZONE", ...))
        if result.ok:
            print(result.outputs.building_table)
        else:
            print(result.message)
    """

    def __init__(self, definition: PipelineDefinition, mode: str = "sequential",
                 max_workers: int = 2, check_contracts: bool = True):
        if mode not in ("sequential", "parallel"):
            raise ValueError(f"Invalid mode: {mode}. Must be 'sequential' or 'parallel'")
        self.definition = definition
        self.mode = mode
        self.max_workers = max_workers
        self.check_contracts = check_contracts

    @classmethod
    def for_units(cls, registry: ProcessRegistry, **kwargs) -> "PipelineOrchestrator":
        """Orchestrator of the building / block / RSU pipeline."""
        return cls(build_units_pipeline(registry), **kwargs)

    @classmethod
    def from_config(cls, config, registry: ProcessRegistry) -> "PipelineOrchestrator":
        """Build from an InternalConfig."""
        return cls.for_units(
            registry,
            mode=config.execution.mode,
            max_workers=config.execution.max_workers,
            check_contracts=config.execution.check_contracts,
        )

    def run(self, inputs: Union[PipelineInputs, Mapping[str, Any]],
            context: Optional[RunContext] = None) -> PipelineResult:
        """Run every step and assemble the final outputs.

        Parameters
        ----------
        inputs : PipelineInputs or mapping
            External inputs of the run.
        context : RunContext, optional
            Logger, run id and tracker of this run.

        Returns
        -------
        PipelineResult
            Outputs on success; on failure no outputs and the error of the
            first failing step.
        """
        context = context or RunContext()
        log = context.log
        externals = inputs.as_mapping() if isinstance(inputs, PipelineInputs) else dict(inputs)
        results = ResultContext(externals)

        log.info("Running %s (run %s, %s mode, %d steps)",
                 self.definition.name, context.run_id, self.mode, len(self.definition))
        if not self._track(context, "start_run", self.definition.name,
                           self.definition.step_names, externals.get("prefix_name")):
            # Do not write step or run status over another run's record
            context = replace(context, tracker=None)

        stages = self.definition.plan(parallel=self.mode == "parallel")
        outcome, failed_step = self._run_stages(stages, results, context)

        if not outcome.ok:
            return self._failed(outcome, failed_step, results, context)

        outputs = {name: results.lookup(source) for name, source in self.definition.outputs.items()}
        if set(outputs) == set(UnitsOfAnalysis.model_fields):
            outputs = UnitsOfAnalysis(**outputs)
        else:
            outputs = dict(outputs)

        log.info("%s completed: %s", self.definition.name, _dump(outputs))
        self._track(context, "finish_run", True, outputs=_dump(outputs))

        return PipelineResult(
            run_id=context.run_id,
            outputs=outputs,
            message=f"{self.definition.name} completed",
            executed_steps=results.completed_steps,
            step_outputs=dict(results.outputs),
        )

    def _run_stages(self, stages, results: ResultContext,
                    context: RunContext) -> Tuple[StepOutcome, Optional[PipelineStep]]:
        for stage in stages:
            if len(stage) == 1:
                outcome, step, _ = sequence(stage[0], lambda s: self._run_step(s, results, context))
            else:
                outcome, step = self._run_concurrently(stage, results, context)
            if not outcome.ok:
                return outcome, step
        return Success({}), None

    def _run_concurrently(self, stage: List[List[PipelineStep]], results: ResultContext,
                          context: RunContext) -> Tuple[StepOutcome, Optional[PipelineStep]]:
        def run_branch(branch):
            outcome, step, _ = sequence(branch, lambda s: self._run_step(s, results, context))
            return outcome, step

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(stage))) as executor:
            futures = [executor.submit(run_branch, branch) for branch in stage]
            branch_outcomes = [f.result() for f in futures]

        failures = [(o, s) for o, s in branch_outcomes if not o.ok]
        if failures:
            return min(failures, key=lambda item: self.definition.index(item[1].name))
        return Success({}), None

    def _run_step(self, step: PipelineStep, results: ResultContext,
                  context: RunContext) -> StepOutcome:
        """Bind, execute and check one step. Never raises."""
        log = context.log

        try:
            arguments = bind_arguments(step.spec, step.bindings, results, step.name)
        except BindingError as exc:
            return self._step_failure(step, exc.with_step(step.name), context)

        log.info("Step %s: %s", step.name, step.spec.title or step.spec.name)
        self._track(context, "mark_step", step.name, "running")

        try:
            outcome = step.process.execute(arguments)
        except Exception as exc:
            error = StepExecutionError(f"{type(exc).__name__}: {exc}", step.name)
            error.__cause__ = exc
            return self._step_failure(step, error, context)

        if not outcome.ok:
            error = StepExecutionError(outcome.reason, step.name)
            error.__cause__ = outcome.error
            return self._step_failure(step, error, context)

        outputs = {name: outcome.outputs.get(name) for name in step.spec.output_names}
        if self.check_contracts:
            try:
                assert_step_outputs(step.spec, outcome.outputs, step.name)
            except PipelineError as exc:
                return self._step_failure(step, exc, context)

        results.record(step.name, outputs)
        log.debug("Step %s produced %s", step.name, outputs)
        self._track(context, "mark_step", step.name, "completed", outputs=outputs)
        return Success(outputs)

    def _step_failure(self, step: PipelineStep, error: PipelineError,
                      context: RunContext) -> Failure:
        context.log.error("Step %s failed: %s", step.name, error.reason)
        self._track(context, "mark_step", step.name, "failed", error=error.reason)
        return Failure(error.reason, error)

    @staticmethod
    def _track(context: RunContext, method: str, *args, **kwargs) -> bool:
        """Call ``context.tracker.<method>(run_id, ...)``; tracking is best-effort.

        A tracker error is logged and never changes the outcome of the run.
        Returns False when the call failed.
        """
        if not context.tracker:
            return True
        try:
            getattr(context.tracker, method)(context.run_id, *args, **kwargs)
        except Exception as exc:
            context.log.warning("Run tracking failed for run %s (%s): %s",
                                context.run_id, method, exc)
            return False
        return True

    def _failed(self, outcome: Failure, step: PipelineStep, results: ResultContext,
                context: RunContext) -> PipelineResult:
        error = outcome.error
        if not isinstance(error, PipelineError):
            error = StepExecutionError(outcome.reason, step.name)
        message = f"Cannot complete {self.definition.name}: step '{step.name}' failed: {error.reason}"
        context.log.error(message)
        self._track(context, "finish_run", False, failed_step=step.name, error=error.reason)

        return PipelineResult(
            run_id=context.run_id,
            error=error,
            failed_step=step.name,
            message=message,
            executed_steps=results.completed_steps,
        )


class UnitsOfAnalysisProcess(Process):
    """The whole units pipeline exposed as a single Process.

    Lets a larger chain compose the units of analysis like any other step.
    A failed run becomes a Failure carrying the run's error.
    """

    spec = CREATE_UNITS_OF_ANALYSIS

    def __init__(self, orchestrator: PipelineOrchestrator, context_factory=RunContext):
        self.orchestrator = orchestrator
        self.context_factory = context_factory

    def _execute(self, **arguments) -> StepOutcome:
        result = self.orchestrator.run(arguments, self.context_factory())
        if not result.ok:
            return Failure(result.message, result.error)
        return Success(_dump(result.outputs))


def _dump(outputs) -> dict:
    if isinstance(outputs, UnitsOfAnalysis):
        return outputs.model_dump()
    return dict(outputs)
