from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from duokey.contexts.credentials.domain.value_objects import U2fChallenge


class U2fProtocolError(ValueError):
    """
    U2fProtocolError — device proof rejected by the U2F challenge-response check.

    The message is caller-actionable (wrong device, timeout, bad signature) and is
    returned to API clients as is.
    """


@dataclass(frozen=True, slots=True)
class U2fRegistrationResult:
    """
    U2fRegistrationResult — key material extracted from a verified registration proof.

    Related:
      - src/duokey/contexts/credentials/application/use_cases/complete_u2f_registration.py
    """

    public_key: str
    key_handle: str

    def __post_init__(self) -> None:
        if not self.public_key:
            raise ValueError("U2fRegistrationResult.public_key must be non-empty")
        if not self.key_handle:
            raise ValueError("U2fRegistrationResult.key_handle must be non-empty")


@dataclass(frozen=True, slots=True)
class U2fAuthenticationResult:
    """Verified authentication proof details."""

    counter: int


class U2fProtocol(Protocol):
    """
    U2fProtocol — U2F (FIDO v1.2) registration/authentication message handling.

    Public keys and key handles cross this port as websafe-base64 strings.

    Related:
      - src/duokey/contexts/credentials/adapters/outbound/security/u2f/fido2_u2f_protocol.py
      - src/duokey/contexts/credentials/application/use_cases/complete_u2f_registration.py
      - src/duokey/contexts/credentials/application/use_cases/complete_u2f_authentication.py
    """

    def build_registration_challenge(self, *, app_id: str) -> U2fChallenge:
        """
        Build registration request bound to the relying-party app id.

        Args:
            app_id: U2F facet/app identifier (usually the site origin).
        Returns:
            U2fChallenge: Request with fresh random challenge and no key handle.
        Assumptions:
            Challenge nonce is at least 32 random bytes.
        Raises:
            ValueError: If app id is blank.
        Side Effects:
            Reads the OS random source.
        """
        ...

    def check_registration_proof(
        self,
        *,
        challenge: U2fChallenge,
        proof: Mapping[str, Any],
    ) -> U2fRegistrationResult:
        """
        Verify device registration response against the stored challenge.

        Args:
            challenge: Challenge issued by `build_registration_challenge`.
            proof: U2F `RegisterResponse` mapping (`registrationData`, `clientData`).
        Returns:
            U2fRegistrationResult: Device public key and key handle.
        Assumptions:
            Attestation certificate trust is not evaluated.
        Raises:
            U2fProtocolError: If the response is malformed or fails verification.
        Side Effects:
            None.
        """
        ...

    def build_authentication_challenge(self, *, app_id: str, key_handle: str) -> U2fChallenge:
        """
        Build authentication request addressed to one registered device.

        Args:
            app_id: App id stored at registration.
            key_handle: Registered websafe-base64 key handle.
        Returns:
            U2fChallenge: Request with fresh random challenge and key handle.
        Assumptions:
            Key handle belongs to the same credential as the app id.
        Raises:
            ValueError: If app id or key handle is blank.
        Side Effects:
            Reads the OS random source.
        """
        ...

    def check_authentication_proof(
        self,
        *,
        challenge: U2fChallenge,
        proof: Mapping[str, Any],
        public_key: str,
    ) -> U2fAuthenticationResult:
        """
        Verify device sign response against the stored challenge and public key.

        Args:
            challenge: Challenge issued by `build_authentication_challenge`.
            proof: U2F `SignResponse` mapping (`keyHandle`, `clientData`, `signatureData`).
            public_key: Registered websafe-base64 public key.
        Returns:
            U2fAuthenticationResult: Signature counter of the accepted proof.
        Assumptions:
            Counter monotonicity is not enforced.
        Raises:
            U2fProtocolError: If the response is malformed or fails verification.
        Side Effects:
            None.
        """
        ...
