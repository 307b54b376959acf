"""Public return types for the maids API."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from maids.errors import AllocationError, MaidsError
from maids.models.utils import generate_id

STATUS_OK = 200


@dataclass
class ErrorDetail:
    """One error in a :class:`Reply`."""

    code: str
    message: str
    status: int
    message_data: dict[str, Any] = field(default_factory=dict)
    reference_data: Any = None
    index: int | None = None

    @classmethod
    def from_error(cls, error: MaidsError) -> ErrorDetail:
        return cls(
            code=error.code,
            message=error.message,
            status=error.status,
            message_data=dict(error.message_data),
            reference_data=error.reference_data,
            index=error.index if isinstance(error, AllocationError) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "status": self.status,
            "messageData": self.message_data,
        }
        if self.reference_data is not None:
            data["referenceData"] = self.reference_data
        if self.index is not None:
            data["index"] = self.index
        return data


@dataclass
class Reply:
    """Response to a single request.

    ``response`` holds the successes and ``errors`` the failures; the
    request counts as failed whenever ``errors`` is non-empty, even if
    some items succeeded.
    """

    id: str = field(default_factory=generate_id)
    response: Any = None
    errors: list[ErrorDetail] = field(default_factory=list)

    @property
    def status(self) -> int:
        if not self.errors:
            return STATUS_OK
        return max(e.status for e in self.errors)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_errors(self, errors: Sequence[MaidsError] | MaidsError) -> None:
        if isinstance(errors, MaidsError):
            errors = [errors]
        self.errors.extend(ErrorDetail.from_error(e) for e in errors)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "status": self.status}
        if self.response is not None:
            data["response"] = self.response
        if self.errors:
            data["errors"] = [e.to_dict() for e in self.errors]
        return data
