from .credential_uuid_allocator import allocate_credential_uuid

__all__ = [
    "allocate_credential_uuid",
]
