from __future__ import annotations

import base64
import io

import qrcode
from qrcode.exceptions import DataOverflowError

from duokey.contexts.credentials.application.ports.qr_code_renderer import (
    QrCodeRenderer,
    QrCodeRenderError,
)


class QrCodePngRenderer(QrCodeRenderer):
    """
    QrCodePngRenderer — renders content as a PNG QR code `data:` URI with `qrcode` + Pillow.

    Related:
      - src/duokey/contexts/credentials/application/ports/qr_code_renderer.py
      - src/duokey/contexts/credentials/application/use_cases/enroll_totp.py
    """

    def __init__(self, *, box_size: int = 4, border: int = 4) -> None:
        if box_size <= 0:
            raise ValueError("QrCodePngRenderer box_size must be > 0")
        if border < 0:
            raise ValueError("QrCodePngRenderer border must be >= 0")
        self._box_size = box_size
        self._border = border

    def render_data_uri(self, *, content: str) -> str:
        """
        Encode content into the smallest fitting QR version and return PNG data URI.

        Args:
            content: Text to encode, typically an otpauth URI.
        Returns:
            str: `data:image/png;base64,...` URI.
        Assumptions:
            Low error correction is enough for on-screen scanning.
        Raises:
            QrCodeRenderError: If content is empty or does not fit a QR symbol.
        Side Effects:
            None.
        """
        if not content:
            raise QrCodeRenderError("QR content must be non-empty")
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=self._box_size,
            border=self._border,
        )
        qr.add_data(content)
        try:
            qr.make(fit=True)
        except (DataOverflowError, ValueError) as error:
            raise QrCodeRenderError("QR content does not fit a QR code") from error

        image = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"
