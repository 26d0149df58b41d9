import jwt
import pytest

from file_manager_api.auth import InvalidTokenError, create_access_token, decode_access_token
from file_manager_api.config.settings import Settings
from tests.consts import TEST_SECRET_KEY, TEST_USER_EMAIL, TEST_USER_ID


def test_token_round_trip(settings: Settings):
    token = create_access_token(settings, TEST_USER_ID, email=TEST_USER_EMAIL, name="Test User")

    user = decode_access_token(settings, token)

    assert user.user_id == TEST_USER_ID
    assert user.email == TEST_USER_EMAIL
    assert user.name == "Test User"


def test_expired_token(settings: Settings):
    token = create_access_token(settings, TEST_USER_ID, expires_minutes=-1)

    with pytest.raises(InvalidTokenError):
        decode_access_token(settings, token)


def test_token_from_another_secret(settings: Settings):
    other = settings.model_copy(update={"auth_secret_key": "another-secret-that-is-long-enough"})
    token = create_access_token(other, TEST_USER_ID)

    with pytest.raises(InvalidTokenError):
        decode_access_token(settings, token)


def test_token_without_subject(settings: Settings):
    token = jwt.encode({"exp": 9999999999}, TEST_SECRET_KEY, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        decode_access_token(settings, token)


def test_audience_and_issuer_are_enforced(settings: Settings):
    strict = settings.model_copy(update={"auth_audience": "file-manager", "auth_issuer": "https://id.example.com"})

    assert decode_access_token(strict, create_access_token(strict, TEST_USER_ID)).user_id == TEST_USER_ID
    with pytest.raises(InvalidTokenError):
        decode_access_token(strict, create_access_token(settings, TEST_USER_ID))


def test_missing_secret_rejects_everything(settings: Settings):
    token = create_access_token(settings, TEST_USER_ID)
    unconfigured = settings.model_copy(update={"auth_secret_key": None})

    with pytest.raises(InvalidTokenError):
        decode_access_token(unconfigured, token)
    with pytest.raises(InvalidTokenError):
        create_access_token(unconfigured, TEST_USER_ID)


def test_garbage_token(settings: Settings):
    with pytest.raises(InvalidTokenError):
        decode_access_token(settings, "not-a-jwt")
