from __future__ import annotations

import pytest
from fido2.utils import websafe_decode, websafe_encode

from duokey.contexts.credentials.adapters.outbound.security import Fido2U2fProtocol
from duokey.contexts.credentials.application.ports import U2fProtocolError
from duokey.contexts.credentials.domain import U2fChallenge

_APP_ID = "https://example.com"


def test_registration_challenge_has_u2f_v2_shape() -> None:
    """
    Verify registration challenge carries version, app id, and 32 random bytes.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Challenges are websafe base64 without padding.
    Raises:
        AssertionError: If challenge shape differs from U2F `RegisterRequest`.
    Side Effects:
        None.
    """
    protocol = Fido2U2fProtocol()

    first = protocol.build_registration_challenge(app_id=_APP_ID)
    second = protocol.build_registration_challenge(app_id=_APP_ID)

    assert first.version == "U2F_V2"
    assert first.app_id == _APP_ID
    assert first.key_handle is None
    assert len(websafe_decode(first.challenge)) == 32
    assert "=" not in first.challenge
    assert first.challenge != second.challenge


def test_registration_proof_yields_device_public_key_and_key_handle(soft_u2f_device) -> None:
    """
    Verify a valid `RegisterResponse` returns the device key material.

    Args:
        soft_u2f_device: Software authenticator fixture.
    Returns:
        None.
    Assumptions:
        Attestation certificate is self-signed and not chain-validated.
    Raises:
        AssertionError: If extracted key material differs from the device's.
    Side Effects:
        None.
    """
    protocol = Fido2U2fProtocol()
    challenge = protocol.build_registration_challenge(app_id=_APP_ID)

    result = protocol.check_registration_proof(
        challenge=challenge,
        proof=soft_u2f_device.register(challenge=challenge.to_payload()),
    )

    assert result.public_key == websafe_encode(soft_u2f_device.public_key)
    assert result.key_handle == websafe_encode(soft_u2f_device.key_handle)


@pytest.mark.parametrize(
    ("register_kwargs", "message"),
    [
        ({"typ": "navigator.id.getAssertion"}, "typ"),
        ({"challenge_override": "b3RoZXItY2hhbGxlbmdl"}, "challenge does not match"),
    ],
)
def test_registration_proof_rejects_wrong_client_data(
    soft_u2f_device,
    register_kwargs: dict[str, str],
    message: str,
) -> None:
    protocol = Fido2U2fProtocol()
    challenge = protocol.build_registration_challenge(app_id=_APP_ID)
    proof = soft_u2f_device.register(challenge=challenge.to_payload(), **register_kwargs)

    with pytest.raises(U2fProtocolError, match=message):
        protocol.check_registration_proof(challenge=challenge, proof=proof)


def test_registration_proof_rejects_other_app_id(soft_u2f_device) -> None:
    protocol = Fido2U2fProtocol()
    challenge = protocol.build_registration_challenge(app_id=_APP_ID)
    proof = soft_u2f_device.register(challenge=challenge.to_payload())
    spoofed = U2fChallenge(
        version=challenge.version,
        app_id="https://evil.example",
        challenge=challenge.challenge,
    )

    with pytest.raises(U2fProtocolError, match="signature is invalid"):
        protocol.check_registration_proof(challenge=spoofed, proof=proof)


def test_registration_proof_rejects_attestation_signed_for_other_app_id(soft_u2f_device) -> None:
    """
    Verify an attestation signed over another app id is a protocol failure.

    Args:
        soft_u2f_device: Software authenticator fixture.
    Returns:
        None.
    Assumptions:
        Client data answers the stored challenge, so only the signature differs.
    Raises:
        AssertionError: If the fido2 attestation error escapes the adapter.
    Side Effects:
        None.
    """
    protocol = Fido2U2fProtocol()
    challenge = protocol.build_registration_challenge(app_id=_APP_ID)
    proof = soft_u2f_device.register(
        challenge=challenge.to_payload(),
        app_id_override="https://evil.example",
    )

    with pytest.raises(U2fProtocolError, match="registration signature is invalid"):
        protocol.check_registration_proof(challenge=challenge, proof=proof)


def test_registration_proof_rejects_non_p256_attestation_key(p384_attested_u2f_device) -> None:
    protocol = Fido2U2fProtocol()
    challenge = protocol.build_registration_challenge(app_id=_APP_ID)
    proof = p384_attested_u2f_device.register(challenge=challenge.to_payload())

    with pytest.raises(U2fProtocolError, match="must be ECDSA P-256"):
        protocol.check_registration_proof(challenge=challenge, proof=proof)


@pytest.mark.parametrize(
    ("proof", "message"),
    [
        ({"errorCode": 4}, "DEVICE_INELIGIBLE"),
        ({"clientData": "e30"}, "typ"),
        ({}, "clientData is required"),
    ],
)
def test_registration_proof_rejects_client_errors_and_missing_fields(
    proof: dict[str, object],
    message: str,
) -> None:
    protocol = Fido2U2fProtocol()
    challenge = protocol.build_registration_challenge(app_id=_APP_ID)

    with pytest.raises(U2fProtocolError, match=message):
        protocol.check_registration_proof(challenge=challenge, proof=proof)


def test_registration_proof_rejects_truncated_registration_data(soft_u2f_device) -> None:
    protocol = Fido2U2fProtocol()
    challenge = protocol.build_registration_challenge(app_id=_APP_ID)
    proof = soft_u2f_device.register(challenge=challenge.to_payload())
    proof["registrationData"] = websafe_encode(websafe_decode(proof["registrationData"])[:40])

    with pytest.raises(U2fProtocolError, match="registrationData is malformed"):
        protocol.check_registration_proof(challenge=challenge, proof=proof)


def test_authentication_proof_returns_counter_for_valid_signature(soft_u2f_device) -> None:
    """
    Verify a valid `SignResponse` is accepted and its counter is reported.

    Args:
        soft_u2f_device: Software authenticator fixture.
    Returns:
        None.
    Assumptions:
        Device increments its counter on every signature.
    Raises:
        AssertionError: If a valid signature is rejected or counter is wrong.
    Side Effects:
        None.
    """
    protocol = Fido2U2fProtocol()
    key_handle = websafe_encode(soft_u2f_device.key_handle)
    public_key = websafe_encode(soft_u2f_device.public_key)

    first = protocol.build_authentication_challenge(app_id=_APP_ID, key_handle=key_handle)
    first_result = protocol.check_authentication_proof(
        challenge=first,
        proof=soft_u2f_device.authenticate(challenge=first.to_payload()),
        public_key=public_key,
    )
    second = protocol.build_authentication_challenge(app_id=_APP_ID, key_handle=key_handle)
    second_result = protocol.check_authentication_proof(
        challenge=second,
        proof=soft_u2f_device.authenticate(challenge=second.to_payload()),
        public_key=public_key,
    )

    assert first.to_payload()["keyHandle"] == key_handle
    assert first_result.counter == 1
    assert second_result.counter == 2


def test_authentication_proof_requires_user_presence(soft_u2f_device) -> None:
    protocol = Fido2U2fProtocol()
    challenge = protocol.build_authentication_challenge(
        app_id=_APP_ID,
        key_handle=websafe_encode(soft_u2f_device.key_handle),
    )
    proof = soft_u2f_device.authenticate(challenge=challenge.to_payload(), user_presence=False)

    with pytest.raises(U2fProtocolError, match="user presence"):
        protocol.check_authentication_proof(
            challenge=challenge,
            proof=proof,
            public_key=websafe_encode(soft_u2f_device.public_key),
        )


def test_authentication_proof_rejects_signature_for_other_app_id(soft_u2f_device) -> None:
    protocol = Fido2U2fProtocol()
    challenge = protocol.build_authentication_challenge(
        app_id=_APP_ID,
        key_handle=websafe_encode(soft_u2f_device.key_handle),
    )
    proof = soft_u2f_device.authenticate(
        challenge=challenge.to_payload(),
        app_id_override="https://evil.example",
    )

    with pytest.raises(U2fProtocolError, match="signature is invalid"):
        protocol.check_authentication_proof(
            challenge=challenge,
            proof=proof,
            public_key=websafe_encode(soft_u2f_device.public_key),
        )


def test_authentication_proof_rejects_other_key_handle(soft_u2f_device) -> None:
    protocol = Fido2U2fProtocol()
    challenge = protocol.build_authentication_challenge(
        app_id=_APP_ID,
        key_handle=websafe_encode(soft_u2f_device.key_handle),
    )
    proof = soft_u2f_device.authenticate(challenge=challenge.to_payload())
    proof["keyHandle"] = websafe_encode(b"\x01" * 64)

    with pytest.raises(U2fProtocolError, match="keyHandle"):
        protocol.check_authentication_proof(
            challenge=challenge,
            proof=proof,
            public_key=websafe_encode(soft_u2f_device.public_key),
        )


def test_authentication_proof_rejects_signature_from_other_device(soft_u2f_device) -> None:
    protocol = Fido2U2fProtocol()
    challenge = protocol.build_authentication_challenge(
        app_id=_APP_ID,
        key_handle=websafe_encode(soft_u2f_device.key_handle),
    )
    proof = soft_u2f_device.authenticate(challenge=challenge.to_payload())
    other_device = type(soft_u2f_device)()

    with pytest.raises(U2fProtocolError, match="signature is invalid"):
        protocol.check_authentication_proof(
            challenge=challenge,
            proof=proof,
            public_key=websafe_encode(other_device.public_key),
        )


def test_challenge_builders_require_app_id() -> None:
    with pytest.raises(ValueError):
        Fido2U2fProtocol().build_registration_challenge(app_id="  ")
