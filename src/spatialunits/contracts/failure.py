"""Failure taxonomy for the spatial units pipeline.

Every failure is non-recoverable at the orchestrator level: the run aborts,
reports the step that failed, and produces no output tables. All errors
derive from PipelineError so callers can handle them uniformly.
"""

from typing import Optional


class PipelineError(RuntimeError):
    """Base class for all pipeline failures.

    Parameters
    ----------
    message : str
        Human-readable reason.
    step : str, optional
        Name of the step the failure is attributed to.
    """

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        self.reason = message
        self.step = step

    def with_step(self, step: str) -> "PipelineError":
        """Attribute this error to ``step`` (keeps an existing attribution)."""
        if self.step is None:
            self.step = step
        return self

    def __str__(self) -> str:
        if self.step:
            return f"[{self.step}] {self.reason}"
        return self.reason


class BindingError(PipelineError):
    """A step input cannot be bound.

    Raised when a later step references an output never produced, when a
    required external input is absent, when a bound value does not match
    the declared type, or when a pipeline definition references a step or
    output that does not exist earlier in the sequence.
    """
    pass


class MissingBinding(BindingError):
    """A declared input parameter has no value and no default."""

    def __init__(self, parameter: str, step: Optional[str] = None, source: Optional[str] = None):
        detail = f"no value for input parameter '{parameter}'"
        if source:
            detail += f" (expected from '{source}')"
        super().__init__(detail, step)
        self.parameter = parameter
        self.source = source


class StepExecutionError(PipelineError):
    """The invoked Process reported failure or raised while executing.

    Covers domain failures such as degenerate geometry or an empty
    intermediate table. The orchestrator does not diagnose them.
    """
    pass


class ContractViolation(StepExecutionError):
    """A step reported success but broke its output contract.

    Key distinction:
    - ValueError / ValidationError: user or config error (handled by Pydantic)
    - BindingError: wiring error between steps
    - StepExecutionError: the Process itself failed
    - ContractViolation: the Process claimed success without the outputs it declares
    """
    pass
