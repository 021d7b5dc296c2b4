"""TokenSessionProvider: JWT validation and session state."""

import asyncio

import pytest

from domain.exceptions import SessionInvalidError
from infrastructure.auth.session_provider import TokenSessionProvider


@pytest.fixture
def provider():
    return TokenSessionProvider(jwt_secret="test-secret")


def test_no_token_means_signed_out(provider):
    assert asyncio.run(provider.current_session()) is None


def test_sign_in_and_out(provider):
    token = provider.issue_token("alice")
    session = provider.sign_in(token)

    assert session.user_id == "alice"
    assert session.expires_at is not None
    current = asyncio.run(provider.current_session())
    assert current.user_id == "alice"
    assert current.access_token == token

    provider.sign_out()
    assert asyncio.run(provider.current_session()) is None


def test_expired_token_is_invalid_not_signed_out(provider):
    token = provider.issue_token("alice", expiry_hours=-1)
    expired = TokenSessionProvider(jwt_secret="test-secret", token=token)

    with pytest.raises(SessionInvalidError, match="expired"):
        asyncio.run(expired.current_session())


def test_token_signed_with_other_secret_is_rejected(provider):
    token = TokenSessionProvider(jwt_secret="other").issue_token("alice")

    with pytest.raises(SessionInvalidError):
        provider.sign_in(token)
    assert provider.token is None
