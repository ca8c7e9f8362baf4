"""Admin credential check.

This is the only trust boundary in the app. Participants are identified by
an unverified device id and never pass through here.
"""
import logging

from passlib.context import CryptContext

from kupong import config

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

_plain_password_hash = None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def _configured_hash():
    global _plain_password_hash
    hashed = config.admin_password_hash()
    if hashed:
        return hashed
    plain = config.admin_password()
    if not plain:
        return None
    if _plain_password_hash is None or not verify_password(plain, _plain_password_hash):
        _plain_password_hash = hash_password(plain)
    return _plain_password_hash


def admin_enabled() -> bool:
    return bool(config.admin_password_hash() or config.admin_password())


def verify_admin(password: str) -> bool:
    hashed = _configured_hash()
    if not hashed:
        logger.warning("Admin login attempted but no admin credential is configured")
        return False
    if not password:
        return False
    try:
        return verify_password(password, hashed)
    except ValueError:
        logger.exception("Admin password hash is malformed")
        return False
