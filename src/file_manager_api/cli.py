# cli.py
import click
import logging
from file_manager_api.auth import InvalidTokenError, create_access_token
from file_manager_api.config.settings import get_settings
from file_manager_api.upload_client import UploadClient, UploadItem, UploadStatus
from file_manager_api.utils.logging import configure_logging

# Configure logging
logger = logging.getLogger(__name__)

@click.group()
def cli():
    """CLI commands for running and using the File Manager API"""
    configure_logging(get_settings().log_level)

@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    print("Current Configuration:")
    for name, value in settings.get_environment_dict().items():
        print(f"  {name}: {value or '-'}")
    print(f"  AUTH_CONFIGURED: {bool(settings.auth_secret_key)}")

@cli.command()
@click.option("--sub", required=True, help="User id to put in the token subject")
@click.option("--email", default=None, help="Email claim")
@click.option("--name", default=None, help="Display name claim")
@click.option("--expires-minutes", type=int, default=None, help="Token lifetime (defaults to settings)")
def issue_token(sub, email, name, expires_minutes):
    """Mint a bearer token for local development"""
    try:
        token = create_access_token(get_settings(), sub, email=email, name=name, expires_minutes=expires_minutes)
    except InvalidTokenError as e:
        raise click.ClickException(str(e))
    click.echo(token)

@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", type=int, default=8000, show_default=True)
@click.option("--reload", is_flag=True, help="Restart on code changes")
def serve(host, port, reload):
    """Run the API with uvicorn"""
    import uvicorn

    uvicorn.run("file_manager_api.main:create_app", factory=True, host=host, port=port, reload=reload)

@cli.command()
@click.option("--bucket", required=True, help="Destination bucket")
@click.option("--path", "current_path", default="", help="Destination folder inside the bucket")
@click.option("--base-url", default="http://localhost:8000", show_default=True, help="File Manager API URL")
@click.option("--token", envvar="FILE_MANAGER_TOKEN", required=True, help="Bearer token (or FILE_MANAGER_TOKEN)")
@click.option("--presigned", is_flag=True, help="Send files straight to the bucket with presigned URLs")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
def upload(bucket, current_path, base_url, token, presigned, files):
    """Upload FILES into a bucket folder, printing progress"""

    def _report(item: UploadItem):
        if item.status == UploadStatus.ERROR:
            click.echo(f"  {item.key}: error: {item.error}", err=True)
        else:
            click.echo(f"  {item.key}: {item.status.value} {item.progress}%")

    client = UploadClient(base_url, token, on_progress=_report)
    client.upload_files(bucket, current_path, files, presigned=presigned)

    failed = [item for item in client.uploads if item.status == UploadStatus.ERROR]
    click.echo(f"Uploaded {len(client.uploads) - len(failed)}/{len(client.uploads)} file(s)")
    if failed:
        raise SystemExit(1)

if __name__ == "__main__":
    cli()
