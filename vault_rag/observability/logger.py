"""
Logger configuration.

Every record carries the request's correlation ID and bound vault ID
(or "-" outside a request), so one chat turn can be followed from the
route through retrieval, generation and persistence.

Dependencies: logging (stdlib), vault_rag.observability.correlation
System role: Centralized logging configuration
"""

import logging
import sys

from vault_rag.observability.correlation import get_bound_vault, get_correlation_id

LOG_FORMAT = (
    "%(asctime)s - %(service)s - %(name)s - %(levelname)s - "
    "[%(correlation_id)s vault=%(vault_id)s] %(message)s"
)

# Client libraries that log every request at INFO.
QUIET_LOGGERS = ("httpx", "httpcore", "botocore", "urllib3", "sqlalchemy.engine", "celery.redirected")


class RequestContextFilter(logging.Filter):
    """Attach service name, correlation ID and vault ID to every record."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        record.correlation_id = get_correlation_id() or "-"
        record.vault_id = get_bound_vault() or "-"
        return True


def configure_logging(level: str = "INFO", service_name: str = "vault-rag") -> None:
    """
    Install one stdout handler on the root logger.

    Safe to call again (API startup and worker startup both call it);
    previous handlers are replaced rather than stacked.

    Args:
        level: Root log level name
        service_name: Value of the %(service)s field
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter(service_name))
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

    root_logger.setLevel(level.upper())
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
