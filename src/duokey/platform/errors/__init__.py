from .duokey_error import DuokeyError

__all__ = [
    "DuokeyError",
]
