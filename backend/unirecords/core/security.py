from datetime import datetime, timedelta
from typing import Optional, Dict, Any, Tuple
from jose import ExpiredSignatureError, JWTError, jwt
import bcrypt
import hashlib
import secrets

from unirecords.core.config import settings
from unirecords.core.exceptions import InvalidTokenError, TokenExpiredError


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password"""
    if not hashed_password:
        return False
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS in .env)"""
    password_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a JWT.

    Raises TokenExpiredError or InvalidTokenError; both are 401 responses and
    only differ in the message the client sees.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise InvalidTokenError()


def hash_reset_token(token: str) -> str:
    """SHA-256 digest of a password reset token, the only form that is stored"""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def generate_reset_token() -> Tuple[str, str]:
    """Return (plain_token, token_hash) for a password reset"""
    token = secrets.token_hex(32)
    return token, hash_reset_token(token)


def generate_temporary_password() -> str:
    """Random password for accounts provisioned on someone's behalf"""
    return secrets.token_hex(8)
