from .u2f_challenge import U2F_VERSION_V2, U2fChallenge

__all__ = [
    "U2F_VERSION_V2",
    "U2fChallenge",
]
