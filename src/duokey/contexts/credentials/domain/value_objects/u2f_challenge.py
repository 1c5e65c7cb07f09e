from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping

U2F_VERSION_V2 = "U2F_V2"


@dataclass(frozen=True, slots=True)
class U2fChallenge:
    """
    U2fChallenge — server-side U2F request (registration or authentication).

    The JSON form uses the U2F JavaScript API field names so stored challenges and
    challenges returned to the browser are interchangeable.

    Related:
      - src/duokey/contexts/credentials/application/ports/u2f_protocol.py
      - src/duokey/contexts/credentials/adapters/outbound/security/u2f/fido2_u2f_protocol.py
      - src/duokey/contexts/credentials/application/use_cases/begin_u2f_registration.py
    """

    version: str
    app_id: str
    challenge: str
    key_handle: str | None = None

    def __post_init__(self) -> None:
        """
        Validate required challenge fields.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Registration challenges carry no key handle; authentication challenges do.
        Raises:
            ValueError: If version, app id, or challenge nonce is blank.
        Side Effects:
            None.
        """
        if not self.version.strip():
            raise ValueError("U2fChallenge.version must be non-empty")
        if not self.app_id.strip():
            raise ValueError("U2fChallenge.app_id must be non-empty")
        if not self.challenge.strip():
            raise ValueError("U2fChallenge.challenge must be non-empty")
        if self.key_handle is not None and not self.key_handle.strip():
            raise ValueError("U2fChallenge.key_handle must be non-empty when provided")

    def to_payload(self) -> dict[str, str]:
        """
        Build U2F JavaScript API request payload with stable key order.

        Args:
            None.
        Returns:
            dict[str, str]: `{"version", "appId", "challenge"[, "keyHandle"]}` payload.
        Assumptions:
            Payload is returned to clients and serialized for encrypted storage.
        Raises:
            None.
        Side Effects:
            None.
        """
        payload = {
            "version": self.version,
            "appId": self.app_id,
            "challenge": self.challenge,
        }
        if self.key_handle is not None:
            payload["keyHandle"] = self.key_handle
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), separators=(",", ":"))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> U2fChallenge:
        """
        Parse challenge from U2F JavaScript API request payload.

        Args:
            payload: Mapping with `version`, `appId`, `challenge`, optional `keyHandle`.
        Returns:
            U2fChallenge: Parsed challenge.
        Assumptions:
            Unknown keys are ignored.
        Raises:
            ValueError: If required keys are missing or not strings.
        Side Effects:
            None.
        """
        try:
            version = payload["version"]
            app_id = payload["appId"]
            challenge = payload["challenge"]
        except KeyError as error:
            raise ValueError(f"U2fChallenge payload is missing {error.args[0]!r}") from error
        key_handle = payload.get("keyHandle")
        for name, value in (("version", version), ("appId", app_id), ("challenge", challenge)):
            if not isinstance(value, str):
                raise ValueError(f"U2fChallenge payload field {name!r} must be a string")
        if key_handle is not None and not isinstance(key_handle, str):
            raise ValueError("U2fChallenge payload field 'keyHandle' must be a string")
        return cls(version=version, app_id=app_id, challenge=challenge, key_handle=key_handle)

    @classmethod
    def from_json(cls, raw_json: str) -> U2fChallenge:
        """
        Parse challenge from its serialized JSON form.

        Args:
            raw_json: JSON text produced by `to_json`.
        Returns:
            U2fChallenge: Parsed challenge.
        Assumptions:
            Text comes from a decrypted storage blob.
        Raises:
            ValueError: If text is not a JSON object with required fields.
        Side Effects:
            None.
        """
        try:
            payload = json.loads(raw_json)
        except json.JSONDecodeError as error:
            raise ValueError("U2fChallenge JSON is malformed") from error
        if not isinstance(payload, Mapping):
            raise ValueError("U2fChallenge JSON must be an object")
        return cls.from_payload(payload)
