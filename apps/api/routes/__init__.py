from .credentials import build_credentials_router

__all__ = ["build_credentials_router"]
