from __future__ import annotations

from typing import Protocol


class QrCodeRenderError(RuntimeError):
    """QR image could not be produced for the given content."""


class QrCodeRenderer(Protocol):
    """
    QrCodeRenderer — renders text (an otpauth URI) as a scannable image data URI.

    Related:
      - src/duokey/contexts/credentials/adapters/outbound/rendering/qrcode_png_renderer.py
      - src/duokey/contexts/credentials/application/use_cases/enroll_totp.py
    """

    def render_data_uri(self, *, content: str) -> str:
        """
        Render content as QR code image.

        Args:
            content: Text to encode.
        Returns:
            str: `data:image/...;base64,...` URI.
        Assumptions:
            Content fits into one QR symbol.
        Raises:
            QrCodeRenderError: If rendering fails.
        Side Effects:
            None.
        """
        ...
