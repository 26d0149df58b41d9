import pytest
from click.testing import CliRunner

from file_manager_api.auth import decode_access_token
from file_manager_api.cli import cli
from file_manager_api.config.settings import get_settings
from tests.consts import TEST_SECRET_KEY


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.setenv("S3_ALLOWED_BUCKETS", "assets,backups")
    get_settings.cache_clear()
    yield CliRunner()
    get_settings.cache_clear()


def test_issue_token(runner, monkeypatch):
    monkeypatch.setenv("AUTH_SECRET_KEY", TEST_SECRET_KEY)

    result = runner.invoke(cli, ["issue-token", "--sub", "alice", "--email", "alice@example.com"])

    assert result.exit_code == 0, result.output
    user = decode_access_token(get_settings(), result.output.strip())
    assert user.user_id == "alice"
    assert user.email == "alice@example.com"


def test_issue_token_without_a_secret(runner, monkeypatch):
    monkeypatch.delenv("AUTH_SECRET_KEY", raising=False)

    result = runner.invoke(cli, ["issue-token", "--sub", "alice"])

    assert result.exit_code != 0
    assert "AUTH_SECRET_KEY" in result.output


def test_show_config(runner):
    result = runner.invoke(cli, ["show-config"])

    assert result.exit_code == 0
    assert "S3_ALLOWED_BUCKETS: assets,backups" in result.output
    assert "AUTH_CONFIGURED" in result.output


def test_upload_requires_files(runner):
    result = runner.invoke(cli, ["upload", "--bucket", "assets", "--token", "tok"])
    assert result.exit_code != 0
