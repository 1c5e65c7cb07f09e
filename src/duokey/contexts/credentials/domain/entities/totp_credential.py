from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TotpCredential:
    """
    TotpCredential — enrolled TOTP seed stored only as an encrypted blob.

    Related:
      - src/duokey/contexts/credentials/domain/entities/account_record.py
      - src/duokey/contexts/credentials/application/use_cases/enroll_totp.py
      - src/duokey/contexts/credentials/application/use_cases/verify_totp.py
    """

    encrypted_secret: str

    def __post_init__(self) -> None:
        """
        Validate that encrypted seed is present.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Blob format is checked by the encryptor at decrypt time, not here.
        Raises:
            ValueError: If encrypted seed is blank.
        Side Effects:
            None.
        """
        if not self.encrypted_secret.strip():
            raise ValueError("TotpCredential.encrypted_secret must be non-empty")
