from __future__ import annotations

import json
from typing import Any, Mapping


def coerce_sign_result(raw: Mapping[str, Any] | str | None) -> Mapping[str, Any]:
    """
    Accept a U2F device response either as a mapping or as its JSON text.

    Browsers using the U2F JavaScript API hand back objects, while some clients
    forward the response already serialized, so both forms are accepted.

    Args:
        raw: Device response mapping or JSON object text.
    Returns:
        Mapping[str, Any]: Parsed device response.
    Assumptions:
        Field-level validation belongs to the U2F protocol adapter.
    Raises:
        ValueError: If value is missing, not valid JSON, or not a JSON object.
    Side Effects:
        None.
    """
    if raw is None:
        raise ValueError("signResult is required")
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as error:
            raise ValueError("signResult must be valid JSON") from error
        raw = parsed
    if not isinstance(raw, Mapping):
        raise ValueError("signResult must be an object")
    return raw
