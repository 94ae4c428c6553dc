"""Parameter binding between pipeline steps.

Each step input is bound to a source: an external input of the run, or a
named output of an earlier step. The accumulated results of a run live in a
ResultContext keyed ``"step.output"``; binding reads it and never writes.
"""

import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from spatialunits.contracts.failure import BindingError, MissingBinding
from spatialunits.processes.spec import ProcessSpec


@dataclass(frozen=True)
class External:
    """Bind to the external input ``name``."""
    name: str

    def __str__(self) -> str:
        return f"input:{self.name}"


@dataclass(frozen=True)
class StepOutput:
    """Bind to output ``output`` of the earlier step ``step``."""
    step: str
    output: str

    @property
    def key(self) -> str:
        return f"{self.step}.{self.output}"

    def __str__(self) -> str:
        return self.key


Source = Union[External, StepOutput]


def external(name: str) -> External:
    return External(name)


def output_of(step: str, output: str) -> StepOutput:
    return StepOutput(step, output)


class ResultContext:
    """Accumulated state of one run: external inputs plus recorded step outputs.

    Outputs are recorded once per step and never overwritten.
    """

    def __init__(self, externals: Optional[Mapping[str, Any]] = None):
        self._externals = MappingProxyType(dict(externals or {}))
        self._outputs: Dict[str, Any] = {}
        self._steps = []
        self._lock = threading.Lock()

    @property
    def externals(self) -> Mapping[str, Any]:
        return self._externals

    @property
    def outputs(self) -> Mapping[str, Any]:
        return MappingProxyType(self._outputs)

    @property
    def completed_steps(self) -> tuple:
        return tuple(self._steps)

    def record(self, step: str, outputs: Mapping[str, Any]) -> None:
        with self._lock:
            if step in self._steps:
                raise BindingError(f"outputs of '{step}' already recorded", step)
            for name, value in outputs.items():
                self._outputs[f"{step}.{name}"] = value
            self._steps.append(step)

    def has(self, source: Source) -> bool:
        if isinstance(source, StepOutput):
            return source.key in self._outputs
        return source.name in self._externals

    def lookup(self, source: Source) -> Any:
        """Return the value of ``source``.

        Raises
        ------
        KeyError
            If the source has no value in this context.
        """
        if isinstance(source, StepOutput):
            return self._outputs[source.key]
        return self._externals[source.name]


def bind_arguments(
    spec: ProcessSpec,
    bindings: Mapping[str, Source],
    context: ResultContext,
    step: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the argument mapping of a process from the accumulated context.

    Inputs without an explicit binding are bound to the external input of
    the same name. An unresolved external input falls back to the declared
    default; an unresolved step output never does.

    Parameters
    ----------
    spec : ProcessSpec
        Declared inputs of the process to run.
    bindings : mapping
        Input parameter name to Source.
    context : ResultContext
        Accumulated state of the run.
    step : str, optional
        Step name used to attribute errors.

    Returns
    -------
    dict
        Declared input name to value, in declaration order.

    Raises
    ------
    MissingBinding
        If a required input has no value.
    BindingError
        If a binding names an undeclared input or a value has the wrong type.
    """
    unknown = sorted(set(bindings) - set(spec.input_names))
    if unknown:
        raise BindingError(f"'{spec.name}' declares no input named {unknown}", step)

    arguments = {}
    for parameter in spec.inputs:
        source = bindings.get(parameter.name, External(parameter.name))
        if context.has(source):
            value = context.lookup(source)
        elif isinstance(source, External) and not parameter.required:
            value = parameter.default
        else:
            raise MissingBinding(parameter.name, step, source=str(source))

        if not parameter.accepts(value):
            raise BindingError(
                f"input '{parameter.name}' expects {parameter.type_name}, "
                f"got {type(value).__name__} from {source}",
                step,
            )
        arguments[parameter.name] = value

    return arguments
