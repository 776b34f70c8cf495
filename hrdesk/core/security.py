import hashlib
import logging
import secrets
from typing import Optional, Tuple
from cryptography.fernet import Fernet, InvalidToken
from hrdesk.core.config import settings

logger = logging.getLogger(__name__)

_cipher = Fernet(settings.fernet_key)


def encrypt_data(data: Optional[str]) -> Optional[str]:
    """Encrypt sensitive string data."""
    if not data:
        return data
    try:
        return _cipher.encrypt(data.encode()).decode()
    except Exception as e:
        logger.error(f"Encryption failed: {e}")
        raise ValueError(f"Encryption failed, refusing to store plaintext: {e}") from e


def decrypt_data(encrypted_data: Optional[str]) -> Optional[str]:
    """Decrypt sensitive string data."""
    if not encrypted_data:
        return encrypted_data
    try:
        return _cipher.decrypt(encrypted_data.encode()).decode()
    except InvalidToken:
        logger.warning("Decryption failed (value possibly stored before encryption was enabled)")
        return encrypted_data


def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


def generate_token() -> Tuple[str, str]:
    """
    One-time token for onboarding invites and password resets.
    Returns (raw, digest); only the digest is ever persisted.
    """
    raw = secrets.token_hex(20)
    return raw, hash_token(raw)
