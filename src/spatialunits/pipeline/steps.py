"""Pipeline step graph.

A PipelineDefinition is an ordered list of steps, the bindings that wire
each step's inputs to external inputs or earlier outputs, and the outputs
that make up the final result. The wiring is validated when the definition
is built, against the declared ProcessSpec of every step.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from spatialunits.contracts.failure import BindingError
from spatialunits.pipeline.binder import Source, StepOutput, external, output_of
from spatialunits.processes.base import Process
from spatialunits.processes.registry import ProcessRegistry
from spatialunits.processes.spec import ProcessSpec


@dataclass(frozen=True)
class PipelineStep:
    """One invocation of a process inside a pipeline.

    Attributes
    ----------
    name : str
        Step name, unique in the pipeline. Several steps may share a process.
    process : Process
        Implementation to execute.
    bindings : mapping
        Input name to Source. Unlisted inputs bind to the external input of
        the same name.
    """
    name: str
    process: Process
    bindings: Mapping[str, Source] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "bindings", MappingProxyType(dict(self.bindings)))

    @property
    def spec(self) -> ProcessSpec:
        return self.process.spec

    @property
    def depends_on(self) -> Tuple[str, ...]:
        deps = []
        for source in self.bindings.values():
            if isinstance(source, StepOutput) and source.step not in deps:
                deps.append(source.step)
        return tuple(deps)


class PipelineDefinition:
    """Validated, ordered step graph.

    Parameters
    ----------
    name : str
        Pipeline name, used in logs.
    steps : sequence of PipelineStep
        Steps in execution order.
    outputs : mapping
        Final result name to the StepOutput that provides it.
    branches : sequence of sequences of str, optional
        Independent branches that may run concurrently. Each branch is a
        run of step names executed in order; together they must form a
        contiguous block of the step list, and no branch may consume an
        output of another.

    Raises
    ------
    BindingError
        If a binding names an unknown input, a later or unknown step, or an
        output the referenced step does not declare.
    """

    def __init__(
        self,
        name: str,
        steps: Sequence[PipelineStep],
        outputs: Mapping[str, StepOutput],
        branches: Optional[Sequence[Sequence[str]]] = None,
    ):
        self.name = name
        self.steps: Tuple[PipelineStep, ...] = tuple(steps)
        self.outputs = MappingProxyType(dict(outputs))
        self.branches: Tuple[Tuple[str, ...], ...] = tuple(tuple(b) for b in branches or ())
        self._validate()

    def _validate(self):
        seen: Dict[str, PipelineStep] = {}
        for step in self.steps:
            if step.name in seen:
                raise BindingError(f"duplicate step name '{step.name}'", step.name)
            unknown = sorted(set(step.bindings) - set(step.spec.input_names))
            if unknown:
                raise BindingError(f"'{step.spec.name}' declares no input named {unknown}", step.name)
            for source in step.bindings.values():
                if isinstance(source, StepOutput):
                    self._check_reference(source, seen, step.name)
            seen[step.name] = step

        for result_name, source in self.outputs.items():
            self._check_reference(source, seen, None)

        self._validate_branches()

    @staticmethod
    def _check_reference(source: StepOutput, earlier: Mapping[str, PipelineStep], step: Optional[str]):
        producer = earlier.get(source.step)
        if producer is None:
            raise BindingError(f"'{source}' does not name an earlier step", step)
        if not producer.spec.declares_output(source.output):
            raise BindingError(
                f"step '{source.step}' ({producer.spec.name}) declares no output '{source.output}'",
                step,
            )

    def _validate_branches(self):
        if not self.branches:
            return
        names = self.step_names
        if any(not branch for branch in self.branches):
            raise BindingError(f"empty branch in {[list(b) for b in self.branches]}")
        members = [name for branch in self.branches for name in branch]
        if len(set(members)) != len(members):
            raise BindingError(f"a step appears in more than one branch: {members}")
        for name in members:
            if name not in names:
                raise BindingError(f"branch step '{name}' is not part of the pipeline")
        positions = sorted(names.index(name) for name in members)
        if positions != list(range(positions[0], positions[0] + len(positions))):
            raise BindingError(f"branch steps must be contiguous in the step list: {members}")
        for branch in self.branches:
            if [names.index(n) for n in branch] != sorted(names.index(n) for n in branch):
                raise BindingError(f"branch steps must keep the declared order: {list(branch)}")
            others = set(members) - set(branch)
            for name in branch:
                crossing = set(self.step(name).depends_on) & others
                if crossing:
                    raise BindingError(
                        f"step '{name}' consumes outputs of concurrent branch step(s) {sorted(crossing)}",
                        name,
                    )

    @property
    def step_names(self) -> List[str]:
        return [step.name for step in self.steps]

    def step(self, name: str) -> PipelineStep:
        for step in self.steps:
            if step.name == name:
                return step
        raise KeyError(f"No step named '{name}' in '{self.name}'")

    def index(self, name: str) -> int:
        return self.step_names.index(name)

    def plan(self, parallel: bool = False) -> List[List[List[PipelineStep]]]:
        """Execution plan as a list of stages.

        Each stage is a list of branches, each branch a list of steps run in
        order. Stages run one after another; branches of a stage may run
        concurrently. Without ``parallel`` every stage holds one single-step
        branch, which is the declared order.
        """
        if not parallel or not self.branches:
            return [[[step]] for step in self.steps]

        members = {name for branch in self.branches for name in branch}
        stages: List[List[List[PipelineStep]]] = []
        grouped = False
        for step in self.steps:
            if step.name not in members:
                stages.append([[step]])
            elif not grouped:
                stages.append([[self.step(n) for n in branch] for branch in self.branches])
                grouped = True
        return stages

    def __iter__(self) -> Iterable[PipelineStep]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __repr__(self) -> str:
        return f"PipelineDefinition({self.name!r}, steps={self.step_names})"


# =============================================================================
# Units of analysis pipeline
# =============================================================================

PREPARE_RSU_DATA_STEP = "prepare_rsu_data"
CREATE_RSU_STEP = "create_rsu"
CREATE_BLOCKS_STEP = "create_blocks"
RELATE_BLOCKS_RSU_STEP = "relate_blocks_rsu"
RELATE_BUILDINGS_BLOCKS_STEP = "relate_buildings_blocks"
RELATE_BUILDINGS_RSU_STEP = "relate_buildings_rsu"


def build_units_pipeline(registry: ProcessRegistry) -> PipelineDefinition:
    """Build the six-step building / block / RSU pipeline.

    The RSU are created first, then the blocks, then the scale relations:
    the RSU id is stored in the block table and in the building table, the
    block id only in the building table.

    The building table gets its RSU id from its own relation with the RSU,
    not through its block, so the RSU id of a building may differ from the
    RSU id of its block.

    Raises
    ------
    KeyError
        If the registry lacks one of the four processes.
    """
    missing = registry.missing()
    if missing:
        raise KeyError(f"No implementation registered for {missing}")

    prepare = registry.get("prepare_rsu_data")
    create_rsu = registry.get("create_rsu")
    create_blocks = registry.get("create_blocks")
    relations = registry.get("create_scales_relations")

    steps = [
        PipelineStep(PREPARE_RSU_DATA_STEP, prepare),
        PipelineStep(CREATE_RSU_STEP, create_rsu, {
            "input_table_name": output_of(PREPARE_RSU_DATA_STEP, "output_table_name"),
        }),
        PipelineStep(CREATE_BLOCKS_STEP, create_blocks, {
            "input_table_name": external("building_table"),
        }),
        PipelineStep(RELATE_BLOCKS_RSU_STEP, relations, {
            "input_lower_scale_table_name": output_of(CREATE_BLOCKS_STEP, "output_table_name"),
            "input_upper_scale_table_name": output_of(CREATE_RSU_STEP, "output_table_name"),
            "id_column_up": output_of(CREATE_RSU_STEP, "output_id_rsu"),
        }),
        PipelineStep(RELATE_BUILDINGS_BLOCKS_STEP, relations, {
            "input_lower_scale_table_name": external("building_table"),
            "input_upper_scale_table_name": output_of(CREATE_BLOCKS_STEP, "output_table_name"),
            "id_column_up": output_of(CREATE_BLOCKS_STEP, "output_id_block"),
        }),
        PipelineStep(RELATE_BUILDINGS_RSU_STEP, relations, {
            "input_lower_scale_table_name": output_of(RELATE_BUILDINGS_BLOCKS_STEP, "output_table_name"),
            "input_upper_scale_table_name": output_of(CREATE_RSU_STEP, "output_table_name"),
            "id_column_up": output_of(CREATE_RSU_STEP, "output_id_rsu"),
        }),
    ]

    outputs = {
        "building_table": output_of(RELATE_BUILDINGS_RSU_STEP, "output_table_name"),
        "block_table": output_of(RELATE_BLOCKS_RSU_STEP, "output_table_name"),
        "rsu_table": output_of(CREATE_RSU_STEP, "output_table_name"),
    }

    return PipelineDefinition(
        "create_units_of_analysis",
        steps,
        outputs,
        branches=[(PREPARE_RSU_DATA_STEP, CREATE_RSU_STEP), (CREATE_BLOCKS_STEP,)],
    )
