from .fido2_u2f_protocol import Fido2U2fProtocol

__all__ = ["Fido2U2fProtocol"]
