from .system_credentials_clock import SystemCredentialsClock

__all__ = ["SystemCredentialsClock"]
