from .pyotp_totp_provider import PyOtpTotpProvider

__all__ = ["PyOtpTotpProvider"]
