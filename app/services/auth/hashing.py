"""One-way salted password hashing with bcrypt."""

from functools import cached_property

import bcrypt

DEFAULT_ROUNDS = 10


class PasswordHasher:
    """bcrypt wrapper. bcrypt only looks at the first 72 bytes of input."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8")[:72], salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(
                password.encode("utf-8")[:72],
                password_hash.encode("utf-8"),
            )
        except ValueError:
            # Malformed stored hash
            return False

    @cached_property
    def dummy_hash(self) -> str:
        """Hash checked when there is no account, so both paths cost one bcrypt round."""
        return self.hash("not-a-real-password")

    def verify_dummy(self, password: str) -> bool:
        return self.verify(password, self.dummy_hash)
