"""Centralized failure policy for contract violations.

Contracts fail fast, loud, and once. All violations raise the same
exception type, allowing callers to handle contract bugs uniformly.
"""

from enum import Enum


class FailurePolicy(str, Enum):
    """Failure policy for contract violations.

    FAIL_FAST (default): Raise immediately on contract violation.
    Values are never clamped or coerced into range.
    """
    FAIL_FAST = "fail_fast"


class ContractViolation(RuntimeError):
    """Raised when a caller or component breaks a documented contract.

    Key distinction:
    - ValidationError: User/config error (handled by Pydantic)
    - ContractViolation: Caller bug (e.g. target_points < 2) or a component
      that did not produce the invariants it promised
    - Empty inputs are never errors; they produce empty results
    """
    pass
