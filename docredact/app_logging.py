from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, MutableMapping

# LogRecord attributes that are not user supplied ``extra`` context.
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
  def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
    payload: dict[str, Any] = {
      "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
      "level": record.levelname,
      "logger": record.name,
      "message": record.getMessage(),
    }
    if record.exc_info:
      payload["exc_info"] = self.formatException(record.exc_info)
    for key, value in record.__dict__.items():
      if key.startswith("_") or key in _RESERVED or key in payload:
        continue
      if isinstance(value, (str, int, float, bool)) or value is None:
        payload[key] = value
    return json.dumps(payload, ensure_ascii=False)


class JobLoggerAdapter(logging.LoggerAdapter):
  """Attach ``job_id`` (and any other fixed context) to every record."""

  def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
    extra = dict(self.extra or {})
    extra.update(kwargs.get("extra") or {})
    kwargs["extra"] = extra
    return msg, kwargs


def job_logger(logger: logging.Logger, job_id: str | None) -> logging.LoggerAdapter:
  return JobLoggerAdapter(logger, {"job_id": job_id} if job_id else {})


def _log_level() -> str:
  return os.getenv("LOG_LEVEL", "INFO").upper()


def _structured_default() -> bool:
  return os.getenv("LOG_FORMAT", "json").lower() != "plain"


def configure_logging(structured: bool | None = None) -> None:
  if structured is None:
    structured = _structured_default()

  root = logging.getLogger()
  for handler in list(root.handlers):  # reset existing handlers
    root.removeHandler(handler)

  root.setLevel(_log_level())
  stream_handler = logging.StreamHandler(sys.stdout)
  if structured:
    stream_handler.setFormatter(JsonFormatter())
  else:
    stream_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
  root.addHandler(stream_handler)

  # Third-party clients log every request at INFO.
  for name in ("uvicorn.access", "httpx", "azure", "urllib3"):
    logging.getLogger(name).setLevel(logging.WARNING)
  logging.getLogger("openai").setLevel(logging.INFO)
