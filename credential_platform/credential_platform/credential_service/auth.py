from passlib.context import CryptContext

from .config import settings

DEFAULT_BCRYPT_ROUNDS = 10


def build_password_context(rounds: int = DEFAULT_BCRYPT_ROUNDS) -> CryptContext:
    """
    Build a bcrypt hashing context.

    Args:
        rounds: bcrypt cost factor (log2 of iterations). 10 in production,
                4 (the bcrypt minimum) keeps tests fast.

    Returns:
        CryptContext producing self-describing "$2b$" hashes with a random
        salt per call.
    """
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


pwd_context = build_password_context(settings.BCRYPT_ROUNDS)

def hash_password(password: str, context: CryptContext = pwd_context) -> str:
    return context.hash(password)

def verify_password(plain_password: str, hashed_password: str, context: CryptContext = pwd_context) -> bool:
    return context.verify(plain_password, hashed_password)

def dummy_verify(context: CryptContext = pwd_context) -> None:
    # Spend the same time as a real verify when there is no stored hash
    context.dummy_verify()
