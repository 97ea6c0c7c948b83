from typing import Protocol


class PasswordEncrypter(Protocol):
    """Slow, salted one-way password hashing."""
    def hash_password(self, password: str) -> str: ...
    def check_password(self, password_hash: str, password: str) -> bool: ...
