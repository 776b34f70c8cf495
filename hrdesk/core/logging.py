"""JSON logging with the current request id attached to every record."""
import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Union

from pythonjsonlogger import jsonlogger

# Set by CorrelationIdMiddleware for the lifetime of one request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_NOISY_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "passlib": logging.ERROR,
    "multipart": logging.WARNING,
}


class RequestContextFormatter(jsonlogger.JsonFormatter):
    def __init__(self, *args, service: str = "hrdesk", environment: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service
        self.environment = environment

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("timestamp", datetime.fromtimestamp(record.created, timezone.utc).isoformat())
        log_record["level"] = record.levelname
        log_record["service"] = self.service
        if self.environment:
            log_record["env"] = self.environment

        req_id = request_id_var.get()
        if req_id:
            log_record["request_id"] = req_id


def setup_logging(level: Union[int, str] = logging.INFO, environment: str = "") -> None:
    root = logging.getLogger()
    root.setLevel(level)
    # The app module can be imported more than once under test
    if any(isinstance(h.formatter, RequestContextFormatter) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        RequestContextFormatter("%(timestamp) %(level) %(name) %(message)", environment=environment)
    )
    root.addHandler(handler)

    for name, noisy_level in _NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(noisy_level)
