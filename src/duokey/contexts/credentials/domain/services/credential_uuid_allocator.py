from __future__ import annotations

import logging
from typing import Callable, Collection
from uuid import UUID, uuid4

log = logging.getLogger(__name__)


def allocate_credential_uuid(
    *,
    existing_keys: Collection[str],
    generate: Callable[[], UUID] = uuid4,
) -> str:
    """
    Allocate a random v4 UUID string that is not already a key of one credential mapping.

    Args:
        existing_keys: Keys of the target `totp` or `u2f` mapping of one account.
        generate: UUID factory; defaults to `uuid.uuid4`.
    Returns:
        str: Canonical UUID string unique within `existing_keys`.
    Assumptions:
        Collisions are astronomically rare; the loop only guards correctness.
    Raises:
        None.
    Side Effects:
        Reads the OS random source through `generate`.
    """
    candidate = str(generate())
    while candidate in existing_keys:
        log.info("credential uuid already in use, generating a new one")
        candidate = str(generate())
    return candidate
