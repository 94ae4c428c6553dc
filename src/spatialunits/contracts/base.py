"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
It enforces semantic invariants at step boundaries.
"""

from typing import Optional

from spatialunits.contracts.failure import ContractViolation


def require(condition: bool, message: str, step: Optional[str] = None) -> None:
    """Enforce a pipeline contract.

    Called at step boundaries to verify the preceding step produced what it
    declares. It is fail-fast: no recovery, no fallback, no silence.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.
    message : str
        Error message explaining the contract violation.
    step : str, optional
        Step the violation is attributed to.

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require("output_table_name" in outputs, "missing 'output_table_name'")
    >>> require(ds.table_exists(name), f"table '{name}' was not created")
    """
    if not condition:
        raise ContractViolation(message, step)
