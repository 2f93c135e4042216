"""
Secret detection for .env values.

This module decides whether a value is stored as:
- a SecureString (sensitive key name, or a long token-looking value)
- a plain String (everything else)

Classification is a pure function of (key, value, force_all).
"""

import re


# Key fragments that mark a variable as sensitive (matched case-insensitively)
SECRET_KEY_PATTERNS = [
    'password',
    'secret',
    'key',
    'token',
    'auth',
    'credential',
    'pass',
    'pwd',
    'private',
    'cert',
    'ssl',
    'tls',
    'encrypt',
    'hash',
    'salt',
]

MIN_SECRET_VALUE_LENGTH = 20

TOKEN_RUN_PATTERN = re.compile(r'[A-Za-z0-9+/=]{20,}')
URL_PATTERN = re.compile(r'^https?://')
DIGITS_PATTERN = re.compile(r'^\d+$')


def key_is_sensitive(key: str) -> bool:
    """
    Check the variable name against the sensitive fragments.

    Args:
        key: Environment variable key

    Returns:
        True if any fragment appears in the key
    """
    key_lower = key.lower()
    return any(pattern in key_lower for pattern in SECRET_KEY_PATTERNS)


def value_looks_secret(value: str) -> bool:
    """
    Check whether a value looks like a token or encoded blob.

    A value qualifies when it is longer than 20 characters, contains a run
    of at least 20 base64 characters, and is neither a URL nor a number.

    Args:
        value: Value to check

    Returns:
        True if likely a secret
    """
    if len(value) <= MIN_SECRET_VALUE_LENGTH:
        return False

    return (
        TOKEN_RUN_PATTERN.search(value) is not None
        and URL_PATTERN.match(value) is None
        and DIGITS_PATTERN.match(value) is None
    )


def is_secret(key: str, value: str, force_all: bool = False) -> bool:
    """
    Determine if a variable should be stored encrypted.

    Args:
        key: Environment variable key
        value: Decoded value
        force_all: Treat every variable as secret

    Returns:
        True if the value should be a SecureString
    """
    if force_all:
        return True

    return key_is_sensitive(key) or value_looks_secret(value)

