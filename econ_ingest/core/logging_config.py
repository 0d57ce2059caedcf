"""
Logging setup shared by the API server and the CLI.

Provider credentials travel in query strings, so any record that renders
a request URL (httpx logs one per request) is passed through
redact_secrets before it reaches a handler.
"""
import logging
from typing import Union

from econ_ingest.core.api_errors import redact_secrets

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that print full request URLs
HTTP_LOGGERS = ("httpx", "httpcore")


class RedactingFilter(logging.Filter):
    """Masks credentials in the rendered message of every record it sees."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        redacted = redact_secrets(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _attach(target: Union[logging.Logger, logging.Handler], log_filter: RedactingFilter) -> None:
    if not any(isinstance(f, RedactingFilter) for f in target.filters):
        target.addFilter(log_filter)


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Configure the root logger and keep request URLs out of INFO output.

    Safe to call more than once; the filter is only attached once per
    handler and logger.
    """
    logging.basicConfig(level=level, format=LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(level)

    log_filter = RedactingFilter()
    for handler in root.handlers:
        _attach(handler, log_filter)
    for name in HTTP_LOGGERS:
        http_logger = logging.getLogger(name)
        http_logger.setLevel(logging.WARNING)
        _attach(http_logger, log_filter)
