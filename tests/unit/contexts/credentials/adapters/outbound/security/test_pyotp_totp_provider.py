from __future__ import annotations

from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, unquote, urlparse

import pyotp
import pytest

from duokey.contexts.credentials.adapters.outbound.security import PyOtpTotpProvider

_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_totp_provider_creates_base32_secret_and_issuer_label_uri() -> None:
    """
    Verify secrets are base32 and URIs carry `issuer:label` plus issuer query parameter.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        pyotp percent-encodes the label path segment.
    Raises:
        AssertionError: If URI shape differs from authenticator expectations.
    Side Effects:
        None.
    """
    provider = PyOtpTotpProvider()
    secret = provider.create_secret()

    uri = provider.build_otpauth_uri(secret=secret, label="alice", issuer="Acme")
    parsed = urlparse(uri)
    query = parse_qs(parsed.query)

    assert len(secret) >= 16
    assert set(secret) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZ234567")
    assert parsed.scheme == "otpauth"
    assert parsed.netloc == "totp"
    assert unquote(parsed.path) == "/Acme:alice"
    assert query["secret"] == [secret]
    assert query["issuer"] == ["Acme"]


def test_totp_provider_uri_without_issuer_uses_plain_label() -> None:
    provider = PyOtpTotpProvider()

    uri = provider.build_otpauth_uri(secret="JBSWY3DPEHPK3PXP", label="SecretKey", issuer=None)

    assert unquote(urlparse(uri).path) == "/SecretKey"
    assert "issuer" not in parse_qs(urlparse(uri).query)


@pytest.mark.parametrize("offset_seconds", [-30, 0, 30])
def test_totp_provider_accepts_codes_inside_one_step_window(offset_seconds: int) -> None:
    """
    Verify codes from the previous, current, and next step are accepted.

    Args:
        offset_seconds: Offset of the code generation time from verification time.
    Returns:
        None.
    Assumptions:
        Default window is one 30-second step on each side.
    Raises:
        AssertionError: If an in-window code is rejected.
    Side Effects:
        None.
    """
    secret = "JBSWY3DPEHPK3PXP"
    code = pyotp.TOTP(secret).at(_NOW + timedelta(seconds=offset_seconds))

    assert PyOtpTotpProvider().verify_code(secret=secret, code=code, at_time=_NOW) is True


def test_totp_provider_rejects_codes_outside_window_and_garbage() -> None:
    secret = "JBSWY3DPEHPK3PXP"
    provider = PyOtpTotpProvider()
    stale_code = pyotp.TOTP(secret).at(_NOW - timedelta(seconds=90))
    current_code = pyotp.TOTP(secret).at(_NOW)

    if stale_code != current_code:
        assert provider.verify_code(secret=secret, code=stale_code, at_time=_NOW) is False
    assert provider.verify_code(secret=secret, code="abcdef", at_time=_NOW) is False
    assert provider.verify_code(secret=secret, code="", at_time=_NOW) is False


def test_totp_provider_zero_window_accepts_only_current_step() -> None:
    secret = "JBSWY3DPEHPK3PXP"
    provider = PyOtpTotpProvider(valid_window=0)
    previous_code = pyotp.TOTP(secret).at(_NOW - timedelta(seconds=30))
    current_code = pyotp.TOTP(secret).at(_NOW)

    assert provider.verify_code(secret=secret, code=current_code, at_time=_NOW) is True
    if previous_code != current_code:
        assert provider.verify_code(secret=secret, code=previous_code, at_time=_NOW) is False


def test_totp_provider_requires_utc_time_and_valid_arguments() -> None:
    provider = PyOtpTotpProvider()

    with pytest.raises(ValueError, match="UTC"):
        provider.verify_code(
            secret="JBSWY3DPEHPK3PXP",
            code="123456",
            at_time=datetime(2026, 3, 1, 12, 0, 0),
        )
    with pytest.raises(ValueError):
        provider.build_otpauth_uri(secret="JBSWY3DPEHPK3PXP", label=" ", issuer=None)
    with pytest.raises(ValueError):
        PyOtpTotpProvider(period_seconds=0)
