# charity_records/security.py
import bcrypt
from itsdangerous import URLSafeTimedSerializer, SignatureExpired, BadSignature

from charity_records.config import settings

serializer = URLSafeTimedSerializer(settings.SECRET_KEY)


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def is_password_hash(value) -> bool:
    return isinstance(value, str) and value.startswith(("$2a$", "$2b$", "$2y$")) and len(value) == 60


def create_session_token(username: str) -> str:
    return serializer.dumps(username)


def read_session_token(token: str):
    try:
        return serializer.loads(token, max_age=settings.SESSION_MAX_AGE)
    except (SignatureExpired, BadSignature):
        return None
