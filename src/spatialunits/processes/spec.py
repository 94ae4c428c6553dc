"""Static declarations of process inputs and outputs.

A ProcessSpec is immutable once defined. The binder checks arguments against
it before a step runs, and the output contract checks results against it
after the step succeeds.
"""

from numbers import Real
from typing import Any, Optional, Tuple

from pydantic import field_validator, model_validator

from spatialunits.schemas.base import FrozenModel


class ParameterSpec(FrozenModel):
    """One declared parameter of a process.

    Attributes
    ----------
    name : str
        Parameter name, unique within its input or output list.
    type : type
        Semantic type of the value. ``object`` accepts anything.
    required : bool
        False when the parameter carries a default.
    default : Any
        Value used when the parameter is neither bound nor supplied.
    """

    name: str
    type: Any = object
    required: bool = True
    default: Any = None

    def accepts(self, value: Any) -> bool:
        """Return True if ``value`` matches the declared semantic type."""
        if self.type is object or self.type is Any:
            return True
        if self.type is float:
            return isinstance(value, Real) and not isinstance(value, bool)
        return isinstance(value, self.type)

    @property
    def type_name(self) -> str:
        return getattr(self.type, "__name__", str(self.type))


def param(name: str, type: Any = object, **kwargs) -> ParameterSpec:
    """Declare a parameter. Passing ``default`` makes it optional.

    Examples
    --------
    >>> param("zone_table", str)
    >>> param("surface_hydro", float, default=2500)
    """
    if "default" in kwargs:
        return ParameterSpec(name=name, type=type, required=False, default=kwargs.pop("default"))
    if kwargs:
        raise TypeError(f"Unexpected arguments: {sorted(kwargs)}")
    return ParameterSpec(name=name, type=type)


class ProcessSpec(FrozenModel):
    """Declared identity and parameter schema of a process.

    Attributes
    ----------
    name : str
        Process identity.
    title : str
        Human-readable description, used in logs.
    inputs : tuple of ParameterSpec
        Ordered input parameters.
    outputs : tuple of ParameterSpec
        Ordered output parameters.
    """

    name: str
    title: str = ""
    inputs: Tuple[ParameterSpec, ...] = ()
    outputs: Tuple[ParameterSpec, ...] = ()

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v):
        if not v.strip():
            raise ValueError("process name must not be empty")
        return v.strip()

    @model_validator(mode="after")
    def unique_parameter_names(self):
        for kind, params in (("input", self.inputs), ("output", self.outputs)):
            names = [p.name for p in params]
            duplicates = {n for n in names if names.count(n) > 1}
            if duplicates:
                raise ValueError(f"duplicate {kind} parameters in '{self.name}': {sorted(duplicates)}")
        return self

    @property
    def input_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.inputs)

    @property
    def output_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.outputs)

    def input(self, name: str) -> Optional[ParameterSpec]:
        for p in self.inputs:
            if p.name == name:
                return p
        return None

    def output(self, name: str) -> Optional[ParameterSpec]:
        for p in self.outputs:
            if p.name == name:
                return p
        return None

    def declares_output(self, name: str) -> bool:
        return self.output(name) is not None
