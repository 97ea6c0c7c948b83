"""bcrypt implementation of PasswordEncrypter."""

import bcrypt

# 2^12 = 4096 iterations; tests drop to the bcrypt minimum of 4
DEFAULT_BCRYPT_ROUNDS = 12


class BcryptPasswordEncrypter:
    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        """Hash password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Bcrypt hashed password as string
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    def check_password(self, password_hash: str, password: str) -> bool:
        """Verify password against hash in constant time.

        A malformed stored hash counts as a mismatch.
        """
        try:
            return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
        except ValueError:
            return False
