from __future__ import annotations

import hashlib
import hmac
import json
import os
import struct
from typing import Any, Mapping

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ec
from fido2.attestation.base import InvalidAttestation
from fido2.ctap1 import RegistrationData, SignatureData
from fido2.utils import websafe_decode, websafe_encode

from duokey.contexts.credentials.application.ports.u2f_protocol import (
    U2fAuthenticationResult,
    U2fProtocol,
    U2fProtocolError,
    U2fRegistrationResult,
)
from duokey.contexts.credentials.domain.value_objects import U2F_VERSION_V2, U2fChallenge

_CHALLENGE_BYTES = 32
_TYPE_REGISTRATION = "navigator.id.finishEnrollment"
_TYPE_AUTHENTICATION = "navigator.id.getAssertion"
_USER_PRESENCE_FLAG = 0x01

# U2F JavaScript API client error codes.
_CLIENT_ERRORS = {
    1: "OTHER_ERROR",
    2: "BAD_REQUEST",
    3: "CONFIGURATION_UNSUPPORTED",
    4: "DEVICE_INELIGIBLE",
    5: "TIMEOUT",
}


class Fido2U2fProtocol(U2fProtocol):
    """
    Fido2U2fProtocol — U2F raw-message verification built on `fido2.ctap1`.

    Registration checks the attestation signature with the certificate embedded in the
    response; certificate trust chains are not evaluated. Authentication checks the
    ECDSA P-256 signature with the stored device public key.

    Related:
      - src/duokey/contexts/credentials/application/ports/u2f_protocol.py
      - src/duokey/contexts/credentials/domain/value_objects/u2f_challenge.py
      - apps/api/wiring/modules/credentials.py
    """

    def build_registration_challenge(self, *, app_id: str) -> U2fChallenge:
        return U2fChallenge(
            version=U2F_VERSION_V2,
            app_id=_require_text(name="app_id", value=app_id),
            challenge=_new_challenge(),
        )

    def build_authentication_challenge(self, *, app_id: str, key_handle: str) -> U2fChallenge:
        return U2fChallenge(
            version=U2F_VERSION_V2,
            app_id=_require_text(name="app_id", value=app_id),
            challenge=_new_challenge(),
            key_handle=_require_text(name="key_handle", value=key_handle),
        )

    def check_registration_proof(
        self,
        *,
        challenge: U2fChallenge,
        proof: Mapping[str, Any],
    ) -> U2fRegistrationResult:
        """
        Verify `RegisterResponse` and extract device key material.

        Args:
            challenge: Stored registration challenge.
            proof: Mapping with `registrationData` and `clientData` (websafe base64).
        Returns:
            U2fRegistrationResult: Websafe-base64 public key and key handle.
        Assumptions:
            Client data origin is not compared with the app id.
        Raises:
            U2fProtocolError: If response is malformed, was reported as failed by the
                client, belongs to another challenge, carries a non-P-256 attestation
                key, or has an invalid signature.
        Side Effects:
            None.
        """
        _raise_client_error(proof=proof)
        client_data = _decode_client_data(
            proof=proof,
            expected_type=_TYPE_REGISTRATION,
            challenge=challenge,
        )
        raw_registration = _decode_field(proof=proof, name="registrationData")
        try:
            registration = RegistrationData(raw_registration)
        except (ValueError, IndexError, struct.error) as error:
            raise U2fProtocolError("registrationData is malformed") from error

        _require_p256_attestation_key(certificate=registration.certificate)
        try:
            registration.verify(_sha256(challenge.app_id.encode("utf-8")), _sha256(client_data))
        except (InvalidSignature, InvalidAttestation) as error:
            raise U2fProtocolError("registration signature is invalid") from error
        except ValueError as error:
            raise U2fProtocolError("attestation certificate is malformed") from error

        return U2fRegistrationResult(
            public_key=websafe_encode(registration.public_key),
            key_handle=websafe_encode(registration.key_handle),
        )

    def check_authentication_proof(
        self,
        *,
        challenge: U2fChallenge,
        proof: Mapping[str, Any],
        public_key: str,
    ) -> U2fAuthenticationResult:
        """
        Verify `SignResponse` against the stored challenge and device public key.

        Args:
            challenge: Stored authentication challenge with key handle.
            proof: Mapping with `keyHandle`, `clientData`, and `signatureData`.
            public_key: Websafe-base64 uncompressed P-256 public key.
        Returns:
            U2fAuthenticationResult: Signature counter.
        Assumptions:
            User presence is required.
        Raises:
            U2fProtocolError: If response is malformed, answers another key handle or
                challenge, lacks user presence, or has an invalid signature.
        Side Effects:
            None.
        """
        _raise_client_error(proof=proof)
        key_handle = proof.get("keyHandle")
        if not isinstance(key_handle, str) or not hmac.compare_digest(
            key_handle.encode("utf-8"),
            (challenge.key_handle or "").encode("utf-8"),
        ):
            raise U2fProtocolError("keyHandle does not match the registered device")
        client_data = _decode_client_data(
            proof=proof,
            expected_type=_TYPE_AUTHENTICATION,
            challenge=challenge,
        )
        raw_signature = _decode_field(proof=proof, name="signatureData")
        try:
            signature = SignatureData(raw_signature)
        except (ValueError, IndexError, struct.error) as error:
            raise U2fProtocolError("signatureData is malformed") from error
        if not signature.user_presence & _USER_PRESENCE_FLAG:
            raise U2fProtocolError("user presence was not confirmed")

        try:
            signature.verify(
                _sha256(challenge.app_id.encode("utf-8")),
                _sha256(client_data),
                websafe_decode(public_key),
            )
        except InvalidSignature as error:
            raise U2fProtocolError("authentication signature is invalid") from error
        except ValueError as error:
            raise U2fProtocolError("registered public key is unusable") from error

        return U2fAuthenticationResult(counter=int(signature.counter))


def _new_challenge() -> str:
    return websafe_encode(os.urandom(_CHALLENGE_BYTES))


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def _require_text(*, name: str, value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(f"Fido2U2fProtocol requires non-empty {name}")
    return normalized


def _raise_client_error(*, proof: Mapping[str, Any]) -> None:
    error_code = proof.get("errorCode")
    if error_code in (None, 0):
        return
    label = error_code
    if isinstance(error_code, int):
        label = _CLIENT_ERRORS.get(error_code, str(error_code))
    raise U2fProtocolError(f"client reported error {label}")


def _decode_field(*, proof: Mapping[str, Any], name: str) -> bytes:
    value = proof.get(name)
    if not isinstance(value, str) or not value:
        raise U2fProtocolError(f"{name} is required")
    try:
        return websafe_decode(value)
    except ValueError as error:
        raise U2fProtocolError(f"{name} must be websafe base64") from error


def _require_p256_attestation_key(*, certificate: bytes) -> None:
    """
    Reject attestation certificates whose subject key is not ECDSA P-256.

    Args:
        certificate: DER attestation certificate from `registrationData`.
    Returns:
        None.
    Assumptions:
        U2F attestation signatures are ECDSA P-256 with SHA-256.
    Raises:
        U2fProtocolError: If the certificate cannot be parsed or carries another key type.
    Side Effects:
        None.
    """
    try:
        public_key = x509.load_der_x509_certificate(certificate).public_key()
    except ValueError as error:
        raise U2fProtocolError("attestation certificate is malformed") from error
    if not isinstance(public_key, ec.EllipticCurvePublicKey) or not isinstance(
        public_key.curve,
        ec.SECP256R1,
    ):
        raise U2fProtocolError("attestation certificate key must be ECDSA P-256")


def _decode_client_data(
    *,
    proof: Mapping[str, Any],
    expected_type: str,
    challenge: U2fChallenge,
) -> bytes:
    """
    Decode client data and check its type and challenge.

    Args:
        proof: Device response mapping.
        expected_type: Required `typ` value.
        challenge: Stored challenge the response must answer.
    Returns:
        bytes: Raw client data bytes, hashed into the signed message.
    Assumptions:
        Client data is UTF-8 JSON as produced by U2F clients.
    Raises:
        U2fProtocolError: If client data is malformed or does not match.
    Side Effects:
        None.
    """
    raw_client_data = _decode_field(proof=proof, name="clientData")
    try:
        client_data = json.loads(raw_client_data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise U2fProtocolError("clientData is not valid JSON") from error
    if not isinstance(client_data, dict):
        raise U2fProtocolError("clientData must be an object")
    if client_data.get("typ") != expected_type:
        raise U2fProtocolError(f"clientData typ must be {expected_type}")
    received = client_data.get("challenge")
    if not isinstance(received, str) or not hmac.compare_digest(
        received.encode("utf-8"),
        challenge.challenge.encode("utf-8"),
    ):
        raise U2fProtocolError("clientData challenge does not match")
    return raw_client_data
