from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ApiKey:
    """
    ApiKey — opaque account identifier used as the primary key of account records.

    Related:
      - src/duokey/contexts/credentials/application/ports/account_store.py
      - src/duokey/contexts/credentials/domain/entities/account_record.py
      - src/duokey/contexts/credentials/application/use_cases/account_access.py
    """

    value: str

    def __post_init__(self) -> None:
        """
        Validate and normalize raw API key value.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            API keys are issued by the account provisioning service and are opaque here.
        Raises:
            ValueError: If value is not a string or is blank after stripping.
        Side Effects:
            Replaces `value` with its stripped form.
        """
        if not isinstance(self.value, str):
            raise ValueError(f"ApiKey requires str value, got {self.value!r}")
        normalized = self.value.strip()
        if not normalized:
            raise ValueError("ApiKey requires non-empty value")
        object.__setattr__(self, "value", normalized)

    @classmethod
    def from_string(cls, raw_value: str | None) -> ApiKey:
        """
        Parse API key from a raw request value.

        Args:
            raw_value: Raw header or path value, possibly `None`.
        Returns:
            ApiKey: Parsed API key value object.
        Assumptions:
            Missing and blank values are both invalid.
        Raises:
            ValueError: If raw value is missing or blank.
        Side Effects:
            None.
        """
        if raw_value is None:
            raise ValueError("ApiKey.from_string requires non-empty value")
        return cls(raw_value)

    def __str__(self) -> str:
        """
        Return canonical string representation of the API key.

        Args:
            None.
        Returns:
            str: Stripped API key.
        Assumptions:
            Value was validated in `__post_init__`.
        Raises:
            None.
        Side Effects:
            None.
        """
        return self.value
