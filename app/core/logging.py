"""
Application logging setup.

Stdout only; Gunicorn writes access/error logs alongside (see gunicorn.conf.py).
Modules log through `logging.getLogger(__name__)`.
"""
import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
