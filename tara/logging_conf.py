import json
import logging
import sys
from datetime import datetime, timezone
from .telemetry import trace

# attributes every LogRecord has; anything else came in through `extra=`
_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "trace_id"}

# third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "google", "urllib3", "multipart")

class TraceIdFilter(logging.Filter):
    """Stamps each record with the id of the ask trace it was emitted under."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = trace.current_id()
        return True

class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        out = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if getattr(record, "trace_id", None):
            out["trace_id"] = record.trace_id
        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED and not k.startswith("_")}
        if extra:
            out["extra"] = extra
        if record.exc_info:
            out["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(out, ensure_ascii=False, default=str)

def setup_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(TraceIdFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))
