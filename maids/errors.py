"""Error taxonomy for maids.

Every error carries a stable machine-readable ``code``, the parameters
used to render its message, optional reference data identifying the
input that caused it, and the HTTP-style status a reply should report.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from maids.i18n import translate

if TYPE_CHECKING:
    from maids.models import AppId


class MaidsError(Exception):
    code = "internal_error"
    status = 500

    def __init__(
        self,
        message_data: dict[str, Any] | None = None,
        *,
        reference_data: Any = None,
    ):
        self.message_data = message_data or {}
        self.reference_data = reference_data
        self.message = translate(self.code, self.message_data)
        super().__init__(self.message)


class ConfigError(ValueError):
    """Raised for invalid configuration or an unknown store provider."""

    pass


# ── Request validation ──────────────────────────────────────────────


class ValidationError(MaidsError):
    """Malformed or out-of-bound input; always terminal for the request."""

    status = 400


class MissingRequiredParameterError(ValidationError):
    code = "missing_required_parameter"

    def __init__(self, parameter: str, *, reference_data: Any = None):
        super().__init__({"parameter": parameter}, reference_data=reference_data)


class InvalidParameterError(ValidationError):
    code = "invalid_parameter"

    def __init__(self, parameter: str, type: str, *, reference_data: Any = None):
        super().__init__(
            {"parameter": parameter, "type": type}, reference_data=reference_data
        )


class MaxIdsInRegisterExceededError(ValidationError):
    code = "max_ids_in_register_exceeded"

    def __init__(self, num_of_ids: int, max_num_of_ids: int):
        super().__init__({"num_of_ids": num_of_ids, "max_num_of_ids": max_num_of_ids})


class MaxIdsInCreateExceededError(ValidationError):
    code = "max_ids_in_create_exceeded"

    def __init__(self, num_of_ids: int, max_num_of_ids: int):
        super().__init__({"num_of_ids": num_of_ids, "max_num_of_ids": max_num_of_ids})


class UnauthorizedError(MaidsError):
    code = "unauthorized"
    status = 401


# ── Per-item allocation errors ──────────────────────────────────────


class AllocationError(MaidsError):
    """An error scoped to one item of a batch.

    ``index`` is the item's position in the submitted batch; the batch
    coordinator fills it in.
    """

    index: int | None = None


class DuplicateAppIdError(AllocationError):
    """The id already exists and will not be retried."""

    code = "duplicate_app_id"
    status = 400

    def __init__(self, app_id: AppId):
        self.id = app_id.id
        super().__init__({"id": app_id.id}, reference_data=app_id.to_dict())


class StoreError(AllocationError):
    """Infrastructure failure reported by the store backend.

    The outcome of the failed operation is unknown; callers must not
    assume the row was or was not written.
    """

    code = "store_error"
    status = 500

    def __init__(self, reason: str, *, reference_data: Any = None):
        self.reason = reason
        super().__init__({"reason": reason}, reference_data=reference_data)
