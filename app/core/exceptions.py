from typing import Any, Dict, List, Optional, Sequence
from fastapi import HTTPException, status


class ScopeForbidden(HTTPException):
    """The caller asked for data outside their authorized scope."""
    error_code = "SCOPE_FORBIDDEN"

    def __init__(self, detail: str = "Requested data is outside your access scope."):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class PartialAuthorization(HTTPException):
    """Some of the target IDs of a bulk operation are outside the caller's scope."""
    error_code = "PARTIAL_AUTHORIZATION"

    def __init__(self, valid_ids: Sequence[int], invalid_ids: Sequence[int], detail: Optional[str] = None):
        self.valid_ids: List[int] = list(valid_ids)
        self.invalid_ids: List[int] = list(invalid_ids)
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail or f"Access denied to {len(self.invalid_ids)} of {len(self.valid_ids) + len(self.invalid_ids)} requested records.",
        )

    @property
    def details(self) -> Dict[str, Any]:
        return {
            "valid_ids": self.valid_ids,
            "invalid_ids": self.invalid_ids,
            "valid_count": len(self.valid_ids),
            "invalid_count": len(self.invalid_ids),
        }
