from src.api.auth_utils import get_password_hash, verify_password


class PasslibPasswordHasher:
    """Argon2 password hashing through passlib (PasswordHasherPort)."""

    def hash_password(self, password: str) -> str:
        return get_password_hash(password)

    def verify_password(self, plain: str, hashed: str) -> bool:
        return verify_password(plain, hashed)
