from __future__ import annotations

from datetime import datetime
from typing import Protocol


class CredentialsClock(Protocol):
    """
    CredentialsClock — source of current UTC time for TOTP verification.

    Related:
      - src/duokey/contexts/credentials/adapters/outbound/time/system_credentials_clock.py
      - src/duokey/contexts/credentials/application/use_cases/verify_totp.py
    """

    def now(self) -> datetime:
        """
        Return current timezone-aware UTC datetime.

        Args:
            None.
        Returns:
            datetime: Current UTC datetime.
        Assumptions:
            Clock is reasonably synchronized with client authenticators.
        Raises:
            None.
        Side Effects:
            None.
        """
        ...
