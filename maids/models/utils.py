"""Shared ID generator for generated application IDs."""

from __future__ import annotations

import uuid


def generate_id() -> str:
    """Return a new random UUID string (v4).

    122 random bits, so a collision with an existing row is possible but
    vanishingly rare; the allocator still retries when one happens.
    """
    return str(uuid.uuid4())
