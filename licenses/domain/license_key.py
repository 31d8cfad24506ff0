"""
License key generation.

Keys have the form XXXX-XXXX-XXXX-XXXX (uppercase alphanumeric).
Uniqueness is enforced by the store, not here.
"""

import re
import secrets
import uuid
from enum import Enum

LICENSE_KEY_PATTERN = re.compile(r"^[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}$")

_GROUP_SIZE = 4
_KEY_LENGTH = 16


class KeyStrategy(Enum):
    """How random key material is produced."""

    SECURE = "secure"
    UUID = "uuid"


def _group(raw: str) -> str:
    raw = raw.upper()[:_KEY_LENGTH]
    return "-".join(raw[i : i + _GROUP_SIZE] for i in range(0, _KEY_LENGTH, _GROUP_SIZE))


def generate_secure_license_key() -> str:
    """Generate a key from 8 cryptographically random bytes, hex encoded."""
    return _group(secrets.token_hex(_KEY_LENGTH // 2))


def generate_uuid_license_key() -> str:
    """Generate a key from the first 16 hex chars of a random UUID."""
    return _group(uuid.uuid4().hex)


def validate_key_format(key: str) -> bool:
    """
    Check that a key matches XXXX-XXXX-XXXX-XXXX.

    Args:
        key: Candidate key string

    Returns:
        True if the format is valid
    """
    return bool(key) and LICENSE_KEY_PATTERN.match(key) is not None


class KeyGenerator:
    """Produces candidate license keys."""

    _generators = {
        KeyStrategy.SECURE: generate_secure_license_key,
        KeyStrategy.UUID: generate_uuid_license_key,
    }

    def __init__(self, strategy: KeyStrategy = KeyStrategy.SECURE):
        self.strategy = KeyStrategy(strategy)

    @classmethod
    def from_settings(cls, settings) -> "KeyGenerator":
        return cls(KeyStrategy(getattr(settings, "LICENSE_KEY_STRATEGY", "secure")))

    def generate(self) -> str:
        """
        Generate a single candidate key.

        Returns:
            License key string
        """
        return self._generators[self.strategy]()
