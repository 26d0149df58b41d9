"""FastAPI app fixtures with authentication wired to a test secret."""
import pytest
from fastapi.testclient import TestClient

from file_manager_api.auth import create_access_token
from file_manager_api.config.settings import Settings
from file_manager_api.main import create_app
from file_manager_api.s3.client import create_s3_client
from tests.consts import TEST_REGION, TEST_SECRET_KEY, TEST_USER_EMAIL, TEST_USER_ID


@pytest.fixture
def settings() -> Settings:
    return Settings(
        auth_secret_key=TEST_SECRET_KEY,
        s3_region=TEST_REGION,
        s3_endpoint_url=None,
        s3_allowed_buckets="",
        preview_max_bytes=1024,
    )


@pytest.fixture
def client(mocked_aws, settings: Settings) -> TestClient:
    app = create_app(settings=settings, s3_client=create_s3_client(settings))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def token(settings: Settings) -> str:
    return create_access_token(settings, TEST_USER_ID, email=TEST_USER_EMAIL)


@pytest.fixture
def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
