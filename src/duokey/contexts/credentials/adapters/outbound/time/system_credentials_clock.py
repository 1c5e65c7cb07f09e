from __future__ import annotations

from datetime import datetime, timezone

from duokey.contexts.credentials.application.ports.clock import CredentialsClock


class SystemCredentialsClock(CredentialsClock):
    """
    SystemCredentialsClock — wall-clock UTC time for TOTP verification.

    Related:
      - src/duokey/contexts/credentials/application/ports/clock.py
      - apps/api/wiring/modules/credentials.py
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
