"""Password hashing (bcrypt). Tokens are issued by the upstream auth layer, not here."""
import bcrypt
from ownbroker.config import get_settings


def _pwd_bytes(password: str, max_len: int = 72) -> bytes:
    return password.encode("utf-8")[:max_len]


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_pwd_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash (e.g. a legacy plaintext value)
        return False


def get_password_hash(password: str, rounds: int | None = None) -> str:
    if rounds is None:
        rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(_pwd_bytes(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")
