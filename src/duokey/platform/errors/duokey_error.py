from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence


@dataclass(frozen=True, slots=True)
class DuokeyError(Exception):
    """
    DuokeyError — platform error contract rendered by the API exception handlers.

    Related:
      - apps/api/common/errors.py
      - src/duokey/contexts/credentials/application/use_cases/credential_errors.py
    """

    code: str
    message: str
    details: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        """
        Strip code/message and freeze details into plain JSON-compatible values.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            `code` is a stable token that the HTTP layer maps to a status code.
        Raises:
            ValueError: If `code` or `message` are blank.
            TypeError: If `details` is provided but is not a mapping.
        Side Effects:
            Rewrites frozen slots with normalized values.
        """
        code = self.code.strip()
        message = self.message.strip()
        if not code:
            raise ValueError("DuokeyError.code must be non-empty")
        if not message:
            raise ValueError("DuokeyError.message must be non-empty")
        object.__setattr__(self, "code", code)
        object.__setattr__(self, "message", message)

        if self.details is None:
            return
        if not isinstance(self.details, Mapping):
            raise TypeError("DuokeyError.details must be a mapping when provided")
        object.__setattr__(self, "details", _plain(value=self.details))

    def to_payload(self) -> dict[str, Any]:
        """
        Build `{"error": {"code", "message", "details"}}` response payload.

        Args:
            None.
        Returns:
            dict[str, Any]: JSON-compatible payload.
        Assumptions:
            Details were normalized at construction time.
        Raises:
            None.
        Side Effects:
            None.
        """
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": dict(self.details or {}),
            }
        }


def _plain(*, value: Any) -> Any:
    """Convert nested mappings/sequences into sorted dicts and lists of JSON scalars."""
    if isinstance(value, Mapping):
        return {
            str(key): _plain(value=item)
            for key, item in sorted(value.items(), key=lambda pair: str(pair[0]))
        }
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [_plain(value=item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
