"""
Shared Kernel primitives.

Re-exports the domain primitives shared across credential contexts:

    from duokey.shared_kernel.primitives import ApiKey
"""

from .api_key import ApiKey

__all__ = [
    "ApiKey",
]
