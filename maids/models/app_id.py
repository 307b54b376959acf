from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

from maids.models.utils import generate_id


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class AppId:
    """A single application ID plus its ownership metadata.

    Instances are immutable.  The allocator never edits a candidate in
    place: a regenerated id is a new instance (:meth:`with_new_id`) and a
    successful insert returns a copy with ``applied`` set.
    """

    id: str
    created_by: str
    created_on: datetime = field(default_factory=_utcnow)
    is_generated: bool = False
    applied: bool = field(default=False, compare=False)

    @classmethod
    def new(
        cls,
        created_by: str,
        id: Any = None,
        *,
        is_generated: bool | None = None,
    ) -> AppId:
        """Build a candidate from a caller-supplied ``id`` or a generated one.

        A missing ``id`` is generated and flagged ``is_generated``; a
        supplied value is coerced to ``str`` and flagged caller-owned.  An
        explicit ``is_generated`` overrides either default.
        """
        if id is None or id == "":
            value = generate_id()
            generated = True
        else:
            value = str(id)
            generated = False
        if is_generated is not None:
            generated = is_generated
        return cls(id=value, created_by=created_by, is_generated=generated)

    @classmethod
    def many(cls, created_by: str, count: int) -> list[AppId]:
        return [cls.new(created_by) for _ in range(count)]

    def with_new_id(self) -> AppId:
        return replace(self, id=generate_id(), applied=False)

    def mark_applied(self) -> AppId:
        return replace(self, applied=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "createdBy": self.created_by,
            "createdOn": self.created_on.isoformat(),
            "isGenerated": self.is_generated,
        }
