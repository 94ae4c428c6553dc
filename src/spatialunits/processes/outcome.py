"""Explicit step outcomes.

A step either succeeds with a mapping of output name to value, or fails with
a reason and no usable outputs. External processes may still signal failure
the old way (returning ``None`` or ``False``); ``as_outcome`` folds every
return convention into one of the two outcome types.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple, TypeVar, Union


@dataclass(frozen=True)
class Success:
    """Successful step outcome. ``outputs`` is read-only."""
    outputs: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "outputs", MappingProxyType(dict(self.outputs)))

    ok = True

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Failed step outcome.

    Attributes
    ----------
    reason : str
        Human-readable reason reported by the process.
    error : BaseException, optional
        Exception raised by the process, if any.
    """
    reason: str
    error: Optional[BaseException] = None

    ok = False

    def __bool__(self) -> bool:
        return False


StepOutcome = Union[Success, Failure]


def as_outcome(value: Any) -> StepOutcome:
    """Normalize a process return value into a StepOutcome.

    - Success / Failure: returned unchanged
    - None / False: Failure ("process returned failure")
    - True: Success with no outputs
    - Mapping: Success carrying the mapping
    - object with a ``results`` mapping: Success carrying it

    Raises
    ------
    TypeError
        If the value follows none of these conventions.
    """
    if isinstance(value, (Success, Failure)):
        return value
    if value is None or value is False:
        return Failure("process returned failure")
    if value is True:
        return Success({})
    if isinstance(value, Mapping):
        return Success(value)
    results = getattr(value, "results", None)
    if isinstance(results, Mapping):
        return Success(results)
    raise TypeError(f"Unsupported process return value: {type(value).__name__}")


T = TypeVar("T")


def sequence(
    items: Iterable[T],
    run_one: Callable[[T], StepOutcome],
) -> Tuple[StepOutcome, Optional[T], int]:
    """Run ``run_one`` over ``items`` in order, stopping at the first Failure.

    Returns
    -------
    outcome : StepOutcome
        The first Failure, or the last Success (``Success({})`` when empty).
    item : T or None
        The item that produced ``outcome``.
    count : int
        Number of items run.
    """
    outcome: StepOutcome = Success({})
    last = None
    count = 0
    for item in items:
        count += 1
        last = item
        outcome = run_one(item)
        if not outcome.ok:
            break
    return outcome, last, count
