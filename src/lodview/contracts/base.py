"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
"""

from lodview.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a contract.

    Fail-fast: no recovery, no fallback, no silence.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation (for debugging).

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(target_points >= 2, "Reduction contract: target_points must be >= 2")
    """
    if not condition:
        raise ContractViolation(message)
