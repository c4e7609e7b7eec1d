"""
Error Taxonomy

Exceptions raised by the core and the record used to report partial
batch failures.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


class CropwatchError(Exception):
    """Base class for all cropwatch errors."""


class NotFoundError(CropwatchError, LookupError):
    """A claim, farm or alert id does not resolve."""

    def __init__(self, kind: str, identifier: Union[str, int]):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class ValidationError(CropwatchError, ValueError):
    """Malformed input rejected at the boundary."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class InvalidTransitionError(ValidationError):
    """A claim status change that the review workflow does not allow."""

    def __init__(self, claim_id: str, current: str, target: str):
        self.claim_id = claim_id
        self.current = current
        self.target = target
        super().__init__(
            f"Claim {claim_id} cannot move from '{current}' to '{target}'",
            field="status",
        )


@dataclass
class BatchError:
    """
    One item of a batch that failed without aborting the batch.

    Attributes:
        farm_id: The farm whose step failed
        error: Human-readable error message
        error_type: Exception class name
    """
    farm_id: Optional[int]
    error: str
    error_type: str = "Exception"

    @classmethod
    def from_exception(cls, farm_id: Optional[int], exc: BaseException) -> "BatchError":
        return cls(farm_id=farm_id, error=str(exc), error_type=type(exc).__name__)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "farm_id": self.farm_id,
            "error": self.error,
            "error_type": self.error_type,
        }
