from .errors import (
    duokey_error_handler,
    register_api_error_handlers,
    request_validation_error_handler,
)

__all__ = [
    "duokey_error_handler",
    "register_api_error_handlers",
    "request_validation_error_handler",
]
