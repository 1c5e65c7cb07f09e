from __future__ import annotations

import base64
import hashlib
import json
import os
import struct
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from cryptography.x509.oid import NameOID
from fido2.utils import websafe_encode

TEST_API_SECRET = base64.b64encode(bytes(range(32))).decode("ascii")
OTHER_API_SECRET = base64.b64encode(bytes(range(32, 64))).decode("ascii")


class SoftU2fDevice:
    """
    Software U2F authenticator producing raw FIDO U2F v1.2 messages.

    Registration is attested by a self-signed certificate (P-256 unless another
    attestation curve is given); authentication is signed by the per-device P-256 key.
    """

    def __init__(self, *, attestation_curve: ec.EllipticCurve | None = None) -> None:
        self._credential_key = ec.generate_private_key(ec.SECP256R1())
        self._attestation_key = ec.generate_private_key(attestation_curve or ec.SECP256R1())
        self._certificate = _self_signed_certificate(key=self._attestation_key)
        self.key_handle = os.urandom(64)
        self.counter = 0

    @property
    def public_key(self) -> bytes:
        return self._credential_key.public_key().public_bytes(
            Encoding.X962,
            PublicFormat.UncompressedPoint,
        )

    def register(
        self,
        *,
        challenge: Mapping[str, Any],
        typ: str = "navigator.id.finishEnrollment",
        challenge_override: str | None = None,
        app_id_override: str | None = None,
    ) -> dict[str, str]:
        app_id = app_id_override or str(challenge["appId"])
        client_data = _client_data(
            typ=typ,
            challenge=challenge_override or str(challenge["challenge"]),
            origin=app_id,
        )
        signed = (
            b"\x00"
            + _sha256(app_id.encode("utf-8"))
            + _sha256(client_data)
            + self.key_handle
            + self.public_key
        )
        signature = self._attestation_key.sign(signed, ec.ECDSA(hashes.SHA256()))
        registration_data = (
            b"\x05"
            + self.public_key
            + bytes([len(self.key_handle)])
            + self.key_handle
            + self._certificate.public_bytes(Encoding.DER)
            + signature
        )
        return {
            "version": "U2F_V2",
            "registrationData": websafe_encode(registration_data),
            "clientData": websafe_encode(client_data),
        }

    def authenticate(
        self,
        *,
        challenge: Mapping[str, Any],
        user_presence: bool = True,
        app_id_override: str | None = None,
    ) -> dict[str, str]:
        self.counter += 1
        app_id = app_id_override or str(challenge["appId"])
        client_data = _client_data(
            typ="navigator.id.getAssertion",
            challenge=str(challenge["challenge"]),
            origin=app_id,
        )
        prefix = bytes([0x01 if user_presence else 0x00]) + struct.pack(">I", self.counter)
        signed = _sha256(app_id.encode("utf-8")) + prefix + _sha256(client_data)
        signature = self._credential_key.sign(signed, ec.ECDSA(hashes.SHA256()))
        return {
            "keyHandle": str(challenge["keyHandle"]),
            "clientData": websafe_encode(client_data),
            "signatureData": websafe_encode(prefix + signature),
        }


@pytest.fixture
def soft_u2f_device() -> SoftU2fDevice:
    return SoftU2fDevice()


@pytest.fixture
def p384_attested_u2f_device() -> SoftU2fDevice:
    return SoftU2fDevice(attestation_curve=ec.SECP384R1())


@pytest.fixture
def api_secret() -> str:
    return TEST_API_SECRET


@pytest.fixture
def other_api_secret() -> str:
    return OTHER_API_SECRET


def _client_data(*, typ: str, challenge: str, origin: str) -> bytes:
    return json.dumps(
        {"typ": typ, "challenge": challenge, "origin": origin},
        separators=(",", ":"),
    ).encode("utf-8")


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def _self_signed_certificate(*, key: ec.EllipticCurvePrivateKey) -> x509.Certificate:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "Soft U2F Attestation")])
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=365))
        .sign(key, hashes.SHA256())
    )
