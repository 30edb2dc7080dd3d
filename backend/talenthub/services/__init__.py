from talenthub.services.auth import (
    hash_password,
    verify_password,
    create_access_token,
    create_user_token,
    decode_access_token,
    dummy_verify_password,
)

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "create_user_token",
    "decode_access_token",
    "dummy_verify_password",
]
