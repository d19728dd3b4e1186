import json
import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from compliance_api.config import settings

_EXTRA_KEYS = (
    "request_id",
    "method",
    "path",
    "status_code",
    "latency_ms",
    "client_ip",
    "outcome",
    "model",
    "rfq_size",
    "proposal_size",
    "rfq_encoded_length",
    "proposal_encoded_length",
)


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging() -> None:
    root = logging.getLogger()
    if root.handlers:
        return
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handler = logging.StreamHandler()
    if settings.log_json:
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
    root.setLevel(level)
    root.addHandler(handler)


_access_logger = logging.getLogger("compliance.access")

OUTCOME_REPORTED = "reported"
OUTCOME_REJECTED = "rejected"
OUTCOME_FAILED = "failed"


def record_check_outcome(request: Request, outcome: str) -> None:
    request.state.check_outcome = outcome


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One access-log line per request.

    Compliance checks also carry the outcome the route recorded with
    ``record_check_outcome`` so rejected uploads and remote failures can be
    told apart without reading the handler's own log lines.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:  # noqa: BLE001
            _access_logger.exception(
                "request_failed",
                extra=self._access_extra(request, request_id, start, status_code=500),
            )
            raise

        outcome = getattr(request.state, "check_outcome", None)
        message = "compliance_check_complete" if outcome else "request_complete"
        _access_logger.info(
            message,
            extra=self._access_extra(request, request_id, start, response.status_code, outcome),
        )
        response.headers["x-request-id"] = request_id
        return response

    @staticmethod
    def _access_extra(
        request: Request,
        request_id: str,
        start: float,
        status_code: int,
        outcome: str | None = None,
    ) -> dict:
        return {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "latency_ms": round((time.perf_counter() - start) * 1000.0, 2),
            "client_ip": request.client.host if request.client else None,
            "outcome": outcome,
        }
