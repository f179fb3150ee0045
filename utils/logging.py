import logging
import sys
from typing import Iterable, Optional

# Third-party loggers that are chatty at INFO/DEBUG
_NOISY_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3", "aiosmtplib", "sqlalchemy.engine")


def setup_logging(level: Optional[str] = "INFO", quiet: Iterable[str] = _NOISY_LOGGERS) -> None:
    """
    Configure application-wide logging once at startup.
    Service modules log through logging.getLogger(__name__); library loggers listed in
    `quiet` are held at WARNING unless the app itself runs at DEBUG.
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers to avoid duplicates in reloads
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(handler)

    if log_level > logging.DEBUG:
        for name in quiet:
            logging.getLogger(name).setLevel(logging.WARNING)
