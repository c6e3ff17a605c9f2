"""
Unit tests for the JWE token manager.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from conftest import secret_with_key
from manutara.modules.auth import (
    AuthInfo,
    TokenDecryptionError,
    TokenEncodingError,
    TokenEncryptionError,
    TokenExpiredError,
)
from manutara.modules.auth.jwe import JWETokenManager
from manutara.modules.sync.types import EventType, WatchEvent

TOKEN = "TEST TOKEN"


def test_generate_returns_compact_jwe(token_manager):
    """Test that a generated token is a five part compact JWE without plaintext."""
    token = token_manager.generate(AuthInfo(token=TOKEN))

    assert token
    assert len(token.split(".")) == 5
    assert TOKEN not in token


def test_decrypt_returns_original_auth_info(token_manager):
    """Test Generate/Decrypt round trip."""
    auth_info = AuthInfo(token=TOKEN, impersonate="jane", impersonate_groups=["devs"])

    token = token_manager.generate(auth_info)

    assert token_manager.decrypt(token) == auth_info


def test_tokens_are_not_reused(token_manager):
    """Test that the same descriptor encrypts to different tokens."""
    auth_info = AuthInfo(token=TOKEN)

    assert token_manager.generate(auth_info) != token_manager.generate(auth_info)


def test_refresh_within_ttl(token_manager, clock):
    """Test refresh just before expiry returns a token with a later issue time."""
    token = token_manager.generate(AuthInfo(token=TOKEN))

    clock.advance(899)
    refreshed = token_manager.refresh(token)

    assert token_manager.decrypt(refreshed) == AuthInfo(token=TOKEN)

    # The original token expires, the refreshed one is still valid
    clock.advance(899)
    with pytest.raises(TokenExpiredError):
        token_manager.decrypt(token)
    assert token_manager.decrypt(refreshed) == AuthInfo(token=TOKEN)


def test_refresh_after_ttl_fails(token_manager, clock):
    """Test an expired token can never be refreshed."""
    token = token_manager.generate(AuthInfo(token=TOKEN))

    clock.advance(901)

    with pytest.raises(TokenExpiredError) as exc_info:
        token_manager.refresh(token)
    assert exc_info.value.ttl == 900


def test_token_valid_exactly_at_ttl(token_manager, clock):
    """Test the validity window includes its upper bound."""
    token = token_manager.generate(AuthInfo(token=TOKEN))

    clock.advance(900)

    assert token_manager.decrypt(token) == AuthInfo(token=TOKEN)


def test_set_token_ttl_rescopes_issued_tokens(token_manager, clock):
    """Test that changing the TTL applies to tokens issued earlier."""
    token = token_manager.generate(AuthInfo(token=TOKEN))
    clock.advance(1000)

    with pytest.raises(TokenExpiredError):
        token_manager.decrypt(token)

    token_manager.set_token_ttl(timedelta(minutes=30))
    assert token_manager.token_ttl == 1800
    assert token_manager.decrypt(token) == AuthInfo(token=TOKEN)

    token_manager.set_token_ttl(60)
    with pytest.raises(TokenExpiredError):
        token_manager.refresh(token)


def test_zero_ttl_disables_expiry(token_manager, clock):
    """Test that a TTL of zero never expires tokens."""
    token_manager.set_token_ttl(0)
    token = token_manager.generate(AuthInfo(token=TOKEN))

    clock.advance(365 * 24 * 3600)

    assert token_manager.decrypt(token) == AuthInfo(token=TOKEN)


def test_negative_ttl_rejected(token_manager):
    """Test negative TTL values are refused."""
    with pytest.raises(ValueError):
        token_manager.set_token_ttl(-1)


@pytest.mark.parametrize("token", ["", "abc", "a.b.c.d.e", "not-a-token-at-all"])
def test_decrypt_malformed_token(token_manager, token):
    """Test malformed input raises TokenDecryptionError."""
    with pytest.raises(TokenDecryptionError):
        token_manager.decrypt(token)


def test_decrypt_tampered_token(token_manager):
    """Test that modifying the ciphertext is detected."""
    token = token_manager.generate(AuthInfo(token=TOKEN))
    parts = token.split(".")
    ciphertext = parts[3]
    parts[3] = ("A" if ciphertext[0] != "A" else "B") + ciphertext[1:]

    with pytest.raises(TokenDecryptionError):
        token_manager.decrypt(".".join(parts))


def test_decrypt_after_key_rotation_fails(token_manager, key_holder, other_rsa_pem):
    """Test tokens encrypted under a replaced key can no longer be decrypted."""
    token = token_manager.generate(AuthInfo(token=TOKEN))

    key_holder._on_secret_event(WatchEvent(EventType.ADDED, secret_with_key(other_rsa_pem)))

    with pytest.raises(TokenDecryptionError):
        token_manager.decrypt(token)
    # Tokens issued after the rotation work
    assert token_manager.decrypt(token_manager.generate(AuthInfo(token=TOKEN))) == AuthInfo(token=TOKEN)


def test_decrypt_with_foreign_key_holder_fails(token_manager, clock):
    """Test that another key holder's token manager cannot read the token."""
    from manutara.modules.auth.jwe import RSAKeyHolder

    token = token_manager.generate(AuthInfo(token=TOKEN))
    other = JWETokenManager(RSAKeyHolder(), clock=clock)

    with pytest.raises(TokenDecryptionError):
        other.decrypt(token)


def test_generate_encoding_failure(token_manager):
    """Test a descriptor that cannot be serialized raises TokenEncodingError."""
    with pytest.raises(TokenEncodingError):
        token_manager.generate(object())


def test_generate_encryption_failure(clock):
    """Test encrypter failures surface as TokenEncryptionError."""
    key_holder = MagicMock()
    key_holder.encrypter.return_value.encrypt.side_effect = RuntimeError("no entropy")
    manager = JWETokenManager(key_holder, clock=clock)

    with pytest.raises(TokenEncryptionError):
        manager.generate(AuthInfo(token=TOKEN))


def test_decrypt_uses_cached_private_pem(key_holder, clock):
    """Test decrypt reads the holder's PEM instead of re-serializing the key."""
    token = JWETokenManager(key_holder, clock=clock).generate(AuthInfo(token=TOKEN))
    holder = MagicMock(wraps=key_holder)
    manager = JWETokenManager(holder, clock=clock)

    assert manager.decrypt(token) == AuthInfo(token=TOKEN)
    holder.private_pem.assert_called_once_with()
    holder.key.assert_not_called()
