"""Registry of Process implementations keyed by process name."""

import importlib
import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Union

from spatialunits.processes.base import FunctionProcess, Process
from spatialunits.processes.catalog import CATALOG
from spatialunits.processes.spec import ProcessSpec

logger = logging.getLogger(__name__)


class ProcessRegistry:
    """Maps process names to implementations.

    Registering an implementation under a catalog name requires the
    implementation to declare the same schema as the catalog entry, so the
    pipeline definition can be validated against declarations alone.

    Examples
    --------
    >>> registry = ProcessRegistry()
    >>> registry.register_function(CREATE_RSU, my_create_rsu)
    >>> registry.get("create_rsu")
    FunctionProcess('create_rsu')
    """

    def __init__(self, processes: Optional[Iterable[Process]] = None):
        self._processes: Dict[str, Process] = {}
        for proc in processes or ():
            self.register(proc)

    def register(self, process: Process) -> Process:
        expected = CATALOG.get(process.name)
        if expected is not None and process.spec != expected:
            raise ValueError(
                f"Process '{process.name}' does not match the declared schema "
                f"(inputs {process.spec.input_names} / outputs {process.spec.output_names})"
            )
        if process.name in self._processes:
            logger.warning("Replacing registered process: %s", process.name)
        self._processes[process.name] = process
        return process

    def register_function(self, spec: ProcessSpec, func: Callable[..., Any]) -> Process:
        return self.register(FunctionProcess(spec, func))

    def get(self, name: str) -> Process:
        try:
            return self._processes[name]
        except KeyError:
            raise KeyError(f"No process registered under '{name}'") from None

    def missing(self) -> list:
        """Catalog names with no registered implementation."""
        return [name for name in CATALOG if name not in self._processes]

    def __contains__(self, name: str) -> bool:
        return name in self._processes

    def __len__(self) -> int:
        return len(self._processes)

    def names(self) -> list:
        return list(self._processes)


def load_provider(target: str) -> ProcessRegistry:
    """Import a process provider given as ``"package.module:attribute"``.

    The attribute may be a ProcessRegistry, a mapping of name to Process,
    an iterable of Process, or a zero-argument callable returning any of
    these.

    Raises
    ------
    ValueError
        If ``target`` is malformed or the attribute has an unsupported type.
    ImportError
        If the module cannot be imported.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Process provider must look like 'module:attribute', got {target!r}")

    module = importlib.import_module(module_name)
    obj: Any = getattr(module, attr)
    if callable(obj) and not isinstance(obj, (ProcessRegistry, Process)):
        obj = obj()
    return _as_registry(obj, target)


def _as_registry(obj: Union[ProcessRegistry, Mapping, Iterable], target: str) -> ProcessRegistry:
    if isinstance(obj, ProcessRegistry):
        return obj
    if isinstance(obj, Mapping):
        return ProcessRegistry(obj.values())
    try:
        return ProcessRegistry(list(obj))
    except TypeError:
        raise ValueError(f"Unsupported process provider type from {target!r}: {type(obj).__name__}") from None
