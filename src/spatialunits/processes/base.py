"""Process interface implemented by the geoprocessing collaborators.

The orchestrator only ever calls ``execute``. Implementations subclass
Process and override ``_execute``, or wrap a plain function with
FunctionProcess.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping

from spatialunits.processes.outcome import StepOutcome, as_outcome
from spatialunits.processes.spec import ProcessSpec

logger = logging.getLogger(__name__)


class Process(ABC):
    """A named unit of work with declared inputs and outputs.

    Subclasses set ``spec`` and implement ``_execute``. ``_execute`` receives
    the bound arguments as keyword arguments and returns a mapping of output
    values, a Success/Failure, or ``None``/``False`` to signal failure.
    Raising is also a failure signal; the orchestrator treats both the same.
    """

    spec: ProcessSpec

    @property
    def name(self) -> str:
        return self.spec.name

    def execute(self, arguments: Mapping[str, Any]) -> StepOutcome:
        """Run the process on fully bound ``arguments``."""
        logger.debug("Executing %s with %s", self.name, sorted(arguments))
        return as_outcome(self._execute(**arguments))

    @abstractmethod
    def _execute(self, **arguments) -> Any:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class FunctionProcess(Process):
    """Adapt a plain callable to the Process interface.

    Examples
    --------
    >>> def create_rsu(datasource, input_table_name, prefix_name):
    ...     ...
    ...     return {"output_table_name": name, "output_id_rsu": "id_rsu"}
    >>> proc = FunctionProcess(CREATE_RSU, create_rsu)
    """

    def __init__(self, spec: ProcessSpec, func: Callable[..., Any]):
        self.spec = spec
        self._func = func

    def _execute(self, **arguments) -> Any:
        return self._func(**arguments)
