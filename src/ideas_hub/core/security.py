"""Owner credential checks."""
from __future__ import annotations

import secrets


def is_owner_credential(
    expected_token: str,
    *,
    bearer: str | None = None,
    api_token: str | None = None,
) -> bool:
    """Return True if either the bearer token or ``X-Api-Token`` matches.

    Args:
        expected_token: Configured owner token. Empty disables owner access.
        bearer: Credential from an ``Authorization: Bearer`` header.
        api_token: Raw ``X-Api-Token`` header value.

    Returns:
        True if one of the supplied credentials equals the configured token.
    """
    if not expected_token:
        return False
    for candidate in ((bearer or "").strip(), (api_token or "").strip()):
        if candidate and secrets.compare_digest(candidate, expected_token):
            return True
    return False
