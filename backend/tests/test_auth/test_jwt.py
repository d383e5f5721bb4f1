"""Unit tests for access/refresh token issuing and verification."""

from datetime import timedelta

import pytest
from jose import JWTError, jwt

from app.auth.jwt import (
    ACCESS,
    REFRESH,
    create_access_token,
    create_refresh_token,
    create_token_pair,
    decode_token,
)


class TestTokenClaims:
    @pytest.mark.parametrize("factory, token_type", [(create_access_token, ACCESS), (create_refresh_token, REFRESH)])
    def test_type_and_subject(self, factory, token_type):
        payload = decode_token(factory({"sub": "user-abc"}))
        assert payload["type"] == token_type
        assert payload["sub"] == "user-abc"
        assert payload["exp"] > payload["iat"]

    def test_refresh_outlives_access(self):
        access = decode_token(create_access_token({"sub": "u"}))
        refresh = decode_token(create_refresh_token({"sub": "u"}))
        assert refresh["exp"] > access["exp"]

    def test_token_pair(self):
        pair = create_token_pair("user-42")
        assert pair["token_type"] == "bearer"
        assert decode_token(pair["access_token"])["type"] == ACCESS
        assert decode_token(pair["refresh_token"])["type"] == REFRESH


class TestDecodeToken:
    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "u"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(JWTError):
            decode_token(token)

    def test_foreign_signature_rejected(self):
        token = jwt.encode({"sub": "u", "type": ACCESS}, "some-other-secret", algorithm="HS256")
        with pytest.raises(JWTError):
            decode_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(JWTError):
            decode_token("not.a.jwt")
