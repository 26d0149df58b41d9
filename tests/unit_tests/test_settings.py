import pytest
from pydantic import ValidationError

from file_manager_api.config.settings import Settings


def test_allowed_buckets_defaults_to_everything():
    settings = Settings(s3_allowed_buckets="")
    assert settings.allowed_buckets is None
    assert settings.is_bucket_allowed("anything")


def test_allowed_buckets_parses_a_comma_separated_list():
    settings = Settings(s3_allowed_buckets=" assets, backups ,,")
    assert settings.allowed_buckets == ["assets", "backups"]
    assert settings.is_bucket_allowed("backups")
    assert not settings.is_bucket_allowed("secrets")


def test_settings_read_the_environment(monkeypatch):
    monkeypatch.setenv("S3_ENDPOINT_URL", "http://localhost:9000")
    monkeypatch.setenv("S3_FORCE_PATH_STYLE", "true")
    monkeypatch.setenv("S3_ALLOWED_BUCKETS", "media")
    monkeypatch.setenv("AUTH_AUDIENCE", "")

    settings = Settings()

    assert settings.s3_endpoint_url == "http://localhost:9000"
    assert settings.s3_force_path_style is True
    assert settings.allowed_buckets == ["media"]
    assert settings.auth_audience is None


@pytest.mark.parametrize("mode", ["local-dev", "aws-mock", "aws-prod"])
def test_known_deployment_modes(mode):
    assert Settings(deployment_mode=mode).deployment_mode == mode


@pytest.mark.parametrize("mode", ["mainframe", "cloud", "local-mock"])
def test_unknown_deployment_mode_is_rejected(mode):
    with pytest.raises(ValidationError):
        Settings(deployment_mode=mode)


def test_presigned_url_expiry_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(presigned_url_expiry=0)


def test_environment_dict_leaves_out_secrets():
    env = Settings(auth_secret_key="shh", s3_secret_access_key="also-shh").get_environment_dict()
    assert "shh" not in env.values()
    assert "also-shh" not in env.values()
    assert env["S3_REGION"]
