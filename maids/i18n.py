"""Message catalog for error codes.

Renders a stable error code plus its parameters into a human-readable
string.  Only ``en-us`` ships today; unknown locales fall back to it.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en-us"

MESSAGES: dict[str, dict[str, str]] = {
    "en-us": {
        "missing_required_parameter": (
            "The required parameter '{parameter}' is missing."
        ),
        "invalid_parameter": "The parameter '{parameter}' must be of type {type}.",
        "max_ids_in_register_exceeded": (
            "Cannot register {num_of_ids} application IDs in one request, "
            "the maximum is {max_num_of_ids}."
        ),
        "max_ids_in_create_exceeded": (
            "Cannot create {num_of_ids} application IDs in one request, "
            "the maximum is {max_num_of_ids}."
        ),
        "duplicate_app_id": "The application ID '{id}' already exists.",
        "store_error": "The application ID store failed: {reason}",
        "unauthorized": "A valid access token is required.",
    },
}


def translate(
    code: str,
    params: dict[str, Any] | None = None,
    locale: str = DEFAULT_LOCALE,
) -> str:
    """Return the message for *code* with *params* substituted.

    An unknown code renders as the code itself so a reply never loses
    its error just because the catalog is behind.
    """
    catalog = MESSAGES.get(locale) or MESSAGES[DEFAULT_LOCALE]
    template = catalog.get(code)
    if template is None:
        logger.warning("No message for error code %s (locale %s)", code, locale)
        return code
    try:
        return template.format(**(params or {}))
    except KeyError as exc:
        logger.warning("Missing parameter %s for error code %s", exc, code)
        return template
