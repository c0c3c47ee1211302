"""Approval phase selection from claim workflow status codes.

Cost figures are computed in one of two phases:

    - APPROVED: a claims officer has adjudicated the bills; statuses
      110, 111, 120 and 140 use bill-level approved figures
    - EXECUTIVE: any other status; only the raw requested total is meaningful
"""

from enum import Enum

APPROVED_STATUS_CODES: frozenset[int] = frozenset({110, 111, 120, 140})

# Status codes are stored as SQL smallint upstream
MAX_STATUS_CODE = 32767


def validate_status_code(status_code: object) -> int:
    """Return the status code, or raise if it is not a small non-negative integer.

    Args:
        status_code: Claim status code supplied by the caller

    Returns:
        The validated status code

    Raises:
        ValueError: If the code is not an int in 0..MAX_STATUS_CODE
    """
    if isinstance(status_code, bool) or not isinstance(status_code, int):
        raise ValueError(f"claim status code must be an integer, got {status_code!r}")
    if status_code < 0 or status_code > MAX_STATUS_CODE:
        raise ValueError(
            f"claim status code must be between 0 and {MAX_STATUS_CODE}, got {status_code}"
        )
    return status_code


class ApprovalPhase(str, Enum):
    approved = "approved"
    executive = "executive"

    @classmethod
    def from_status_code(cls, status_code: int) -> "ApprovalPhase":
        code = validate_status_code(status_code)
        if code in APPROVED_STATUS_CODES:
            return cls.approved
        return cls.executive
