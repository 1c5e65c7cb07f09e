from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TotpProvider(Protocol):
    """
    TotpProvider — RFC 6238 operations used by TOTP enrollment and verification.

    Related:
      - src/duokey/contexts/credentials/adapters/outbound/security/totp/pyotp_totp_provider.py
      - src/duokey/contexts/credentials/application/use_cases/enroll_totp.py
      - src/duokey/contexts/credentials/application/use_cases/verify_totp.py
    """

    def create_secret(self) -> str:
        """
        Generate a new base32 TOTP seed.

        Args:
            None.
        Returns:
            str: Base32 seed without padding.
        Assumptions:
            Seed comes from a cryptographically secure random source.
        Raises:
            ValueError: If provider produced an empty seed.
        Side Effects:
            Reads the OS random source.
        """
        ...

    def build_otpauth_uri(self, *, secret: str, label: str, issuer: str | None) -> str:
        """
        Build `otpauth://totp/...` URI for authenticator apps.

        Args:
            secret: Base32 seed.
            label: Account label shown in authenticator apps.
            issuer: Optional issuer; when present the label is prefixed with `issuer:`.
        Returns:
            str: Provisioning URI.
        Assumptions:
            URI carries the plaintext seed and must never be logged.
        Raises:
            ValueError: If secret or label is blank.
        Side Effects:
            None.
        """
        ...

    def verify_code(self, *, secret: str, code: str, at_time: datetime) -> bool:
        """
        Check code against the current step and the configured neighbouring steps.

        Args:
            secret: Base32 seed.
            code: Caller-submitted code.
            at_time: Timezone-aware UTC verification time.
        Returns:
            bool: `True` when any accepted step matches.
        Assumptions:
            Verification is stateless; codes are not marked as used.
        Raises:
            ValueError: If secret is not valid base32 or time is not UTC.
        Side Effects:
            None.
        """
        ...
