"""Process-wide logging setup shared by the API, the CLI and the Lambda handler."""
import logging
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level.upper(),
            format=LOG_FORMAT,
            stream=sys.stdout,
        )
    root.setLevel(level.upper())

    # boto's debug output drowns everything else
    for noisy in ("botocore", "boto3", "urllib3", "s3transfer"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
