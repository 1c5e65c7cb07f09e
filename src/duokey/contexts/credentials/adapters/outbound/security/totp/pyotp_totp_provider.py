from __future__ import annotations

import binascii
from datetime import datetime

import pyotp

from duokey.contexts.credentials.application.ports.totp_provider import TotpProvider

_DEFAULT_TOTP_DIGITS = 6
_DEFAULT_TOTP_PERIOD_SECONDS = 30
_DEFAULT_VALID_WINDOW = 1


class PyOtpTotpProvider(TotpProvider):
    """
    PyOtpTotpProvider — RFC 6238 TOTP (SHA-1) seed generation, provisioning URI, and checks.

    Related:
      - src/duokey/contexts/credentials/application/ports/totp_provider.py
      - src/duokey/contexts/credentials/application/use_cases/enroll_totp.py
      - src/duokey/contexts/credentials/application/use_cases/verify_totp.py
    """

    def __init__(
        self,
        *,
        digits: int = _DEFAULT_TOTP_DIGITS,
        period_seconds: int = _DEFAULT_TOTP_PERIOD_SECONDS,
        valid_window: int = _DEFAULT_VALID_WINDOW,
    ) -> None:
        """
        Initialize TOTP parameters shared by URI building and verification.

        Args:
            digits: Code length.
            period_seconds: Time step in seconds.
            valid_window: Steps accepted on each side of the current step.
        Returns:
            None.
        Assumptions:
            Defaults match common authenticator apps.
        Raises:
            ValueError: If arguments are outside supported ranges.
        Side Effects:
            None.
        """
        if digits <= 0:
            raise ValueError("PyOtpTotpProvider digits must be > 0")
        if period_seconds <= 0:
            raise ValueError("PyOtpTotpProvider period_seconds must be > 0")
        if valid_window < 0:
            raise ValueError("PyOtpTotpProvider valid_window must be >= 0")

        self._digits = digits
        self._period_seconds = period_seconds
        self._valid_window = valid_window

    def create_secret(self) -> str:
        secret = pyotp.random_base32().strip().upper()
        if not secret:
            raise ValueError("PyOtpTotpProvider generated empty secret")
        return secret

    def build_otpauth_uri(self, *, secret: str, label: str, issuer: str | None) -> str:
        """
        Build otpauth URI; with an issuer the label becomes `issuer:label`.

        Args:
            secret: Base32 seed.
            label: Account label.
            issuer: Optional issuer.
        Returns:
            str: URI starting with `otpauth://totp/`.
        Assumptions:
            pyotp adds the `issuer` query parameter when an issuer is given.
        Raises:
            ValueError: If secret or label is blank.
        Side Effects:
            None.
        """
        normalized_secret = secret.strip().upper()
        normalized_label = label.strip()
        if not normalized_secret:
            raise ValueError("PyOtpTotpProvider requires non-empty secret")
        if not normalized_label:
            raise ValueError("PyOtpTotpProvider requires non-empty label")

        uri = self._totp(secret=normalized_secret).provisioning_uri(
            name=normalized_label,
            issuer_name=issuer.strip() if issuer else None,
        )
        if not uri.startswith("otpauth://totp/"):
            raise ValueError("PyOtpTotpProvider produced invalid otpauth URI")
        return uri

    def verify_code(self, *, secret: str, code: str, at_time: datetime) -> bool:
        """
        Verify code at given UTC time within the configured window.

        Args:
            secret: Base32 seed.
            code: Submitted code.
            at_time: Timezone-aware UTC datetime.
        Returns:
            bool: `True` when a step inside the window matches.
        Assumptions:
            Non-numeric codes simply do not match.
        Raises:
            ValueError: If secret is blank or not base32, or time is not UTC.
        Side Effects:
            None.
        """
        normalized_secret = secret.strip().upper()
        if not normalized_secret:
            raise ValueError("PyOtpTotpProvider verify requires non-empty secret")
        offset = at_time.utcoffset()
        if at_time.tzinfo is None or offset is None or offset.total_seconds() != 0:
            raise ValueError("at_time must be timezone-aware UTC datetime")

        try:
            return bool(
                self._totp(secret=normalized_secret).verify(
                    code.strip(),
                    for_time=int(at_time.timestamp()),
                    valid_window=self._valid_window,
                )
            )
        except binascii.Error as error:
            raise ValueError("PyOtpTotpProvider secret is not valid base32") from error

    def _totp(self, *, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(secret, digits=self._digits, interval=self._period_seconds)
