"""
Tests for secret detection.
"""

import pytest
from awsenv.core.inference import (
    is_secret,
    key_is_sensitive,
    value_looks_secret,
)


class TestKeyPatterns:
    """Test detection by variable name."""

    @pytest.mark.parametrize("key", [
        "DB_PASSWORD",
        "API_SECRET",
        "GITHUB_TOKEN",
        "STRIPE_API_KEY",
        "OAUTH_CLIENT",
        "AWS_CREDENTIALS",
        "SMTP_PASS",
        "ROOT_PWD",
        "PRIVATE_KEY_PATH",
        "SSL_CERT",
        "TLS_MODE",
        "ENCRYPTION_MODE",
        "PASSWORD_HASH",
        "BCRYPT_SALT",
    ])
    def test_sensitive_keys(self, key):
        """Keys containing a sensitive fragment are secret."""
        assert key_is_sensitive(key)
        assert is_secret(key, "x")

    def test_case_insensitive(self):
        """Key matching ignores case."""
        assert key_is_sensitive("password")
        assert key_is_sensitive("Api_Token")

    def test_substring_match(self):
        """Fragments match anywhere in the key."""
        assert key_is_sensitive("MONKEY_COUNT")

    @pytest.mark.parametrize("key", ["NODE_ENV", "PORT", "DEBUG", "DATABASE_URL", "APP_NAME"])
    def test_plain_keys(self, key):
        """Ordinary names are not sensitive."""
        assert not key_is_sensitive(key)


class TestValueHeuristics:
    """Test detection by value shape."""

    def test_jwt_like_value(self):
        """Long base64 runs are secret."""
        assert value_looks_secret("eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9")
        assert is_secret("CONFIG_VAR", "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9")

    def test_short_string(self):
        """Short values are never secret by shape."""
        assert not value_looks_secret("short-string")

    def test_length_threshold(self):
        """The value must be longer than 20 characters."""
        assert not value_looks_secret("abcdefghijklmnopqrst")
        assert value_looks_secret("abcdefghijklmnopqrstu")

    def test_url(self):
        """URLs are not secret even when long."""
        assert not value_looks_secret("https://example.com/abcdefghijklmnopqrstuvwxyz")
        assert not value_looks_secret("http://abcdefghijklmnopqrstuvwxyz0123456789.example")

    def test_digits(self):
        """Pure numbers are not secret."""
        assert not value_looks_secret("1234567890")
        assert not value_looks_secret("1234567890123456789012345")

    def test_sentence(self):
        """Long values without a 20 character run are not secret."""
        assert not value_looks_secret("this is a long sentence with spaces")

    def test_run_inside_text(self):
        """A token embedded in other text is enough."""
        assert value_looks_secret("Bearer abcdefghijklmnopqrstuvwxyz012345")


class TestIsSecret:
    """Test the combined decision."""

    def test_plain_variable(self):
        """Ordinary key and value is plain."""
        assert not is_secret("NODE_ENV", "production")

    def test_force_all(self):
        """force_all makes everything secret."""
        assert is_secret("NODE_ENV", "production", force_all=True)
        assert is_secret("PORT", "", force_all=True)

    def test_deterministic(self):
        """Same inputs give the same answer."""
        results = {is_secret("CONFIG_VAR", "eyJhbGciOiJIUzI1NiJ9abcdef") for _ in range(5)}
        assert len(results) == 1
