"""
NoteShare Backend — Identity Tests
====================================

What we test:
    ✅ Token verification: signature, expiry, audience, subject
    ✅ Principal display names
    ✅ AuthSession lifecycle and revocation on sign-out
"""

import time
from uuid import uuid4

import pytest
from jose import jwt

from noteshare.auth import AuthSession, IdentityProvider, Principal
from noteshare.exceptions import AuthenticationError

SECRET = "unit-test-secret"


class TestPrincipal:
    def test_display_name_prefers_username(self):
        p = Principal(id=uuid4(), email="carla@uni.example", username="carla_r")
        assert p.display_name == "carla_r"

    def test_display_name_falls_back_to_email(self):
        p = Principal(id=uuid4(), email="carla@uni.example")
        assert p.display_name == "carla"

    def test_display_name_falls_back_to_id(self):
        user_id = uuid4()
        assert Principal(id=user_id).display_name == str(user_id)[:8]


class TestIdentityProvider:
    def setup_method(self):
        self.provider = IdentityProvider(secret=SECRET, audience="authenticated")

    def test_valid_token(self, alice, make_token):
        principal = self.provider.verify(make_token(alice, secret=SECRET))

        assert principal.id == alice.id
        assert principal.email == "alice@uni.example"
        assert principal.username == "alice"

    def test_wrong_secret(self, alice, make_token):
        with pytest.raises(AuthenticationError):
            self.provider.verify(make_token(alice, secret="someone-else"))

    def test_expired(self, alice, make_token):
        with pytest.raises(AuthenticationError):
            self.provider.verify(make_token(alice, secret=SECRET, expires_in=-60))

    def test_wrong_audience(self, alice, make_token):
        with pytest.raises(AuthenticationError):
            self.provider.verify(make_token(alice, secret=SECRET, audience="service_role"))

    def test_subject_must_be_uuid(self):
        token = jwt.encode(
            {"sub": "not-a-uuid", "aud": "authenticated", "exp": int(time.time()) + 60},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            self.provider.verify(token)

    def test_unconfigured_secret_rejects_everything(self, alice, make_token):
        provider = IdentityProvider(secret="")
        with pytest.raises(AuthenticationError, match="not configured"):
            provider.verify(make_token(alice, secret=SECRET))

    def test_revoked_token(self, alice, make_token):
        token = make_token(alice, secret=SECRET)
        self.provider.revoke(token)
        with pytest.raises(AuthenticationError, match="Session has ended"):
            self.provider.verify(token)

    def test_revoking_expired_token_keeps_nothing(self, alice, make_token):
        self.provider.revoke(make_token(alice, secret=SECRET, expires_in=-60))
        assert self.provider._revoked == {}

    def test_expired_revocations_are_dropped(self, alice, bob, make_token):
        stale = make_token(alice, secret=SECRET)
        live = make_token(bob, secret=SECRET)
        self.provider.revoke(stale)
        self.provider.revoke(live)
        self.provider._revoked[self.provider._fingerprint(stale)] = time.time() - 1

        self.provider.verify(make_token(alice, secret=SECRET))

        assert list(self.provider._revoked) == [self.provider._fingerprint(live)]
        with pytest.raises(AuthenticationError, match="Session has ended"):
            self.provider.verify(live)


class TestAuthSession:
    def setup_method(self):
        self.provider = IdentityProvider(secret=SECRET, audience="authenticated")

    def test_lifecycle(self, bob, make_token):
        token = make_token(bob, secret=SECRET)
        session = AuthSession(self.provider)
        assert session.current_user() is None

        session.resolve(token)
        assert session.current_user().id == bob.id

        session.sign_out()
        assert session.current_user() is None
        with pytest.raises(AuthenticationError):
            AuthSession(self.provider).resolve(token)

    def test_sign_out_without_session(self):
        with pytest.raises(AuthenticationError):
            AuthSession(self.provider).sign_out()
