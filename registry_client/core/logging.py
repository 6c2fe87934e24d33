"""Structured logging for the registry client.

Log events carry their data in ``extra``. Before a record is written:
- the current submission id is attached (see ``DocumentSubmitter.submit``);
- credential material (bearer token, challenge, signatures) is replaced with
  "[REDACTED]", including inside nested mappings such as request headers.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from registry_client.core.config import LogSettings, get_settings

_submission_id_var: ContextVar[str | None] = ContextVar("submission_id", default=None)

REDACTED = "[REDACTED]"

# Keys the client itself emits that hold credential material
SENSITIVE_KEYS_DEFAULT: frozenset[str] = frozenset(
    {
        "token",
        "authorization",
        "signature",
        "challenge",
        "signed_challenge",
    }
)

# Standard LogRecord attributes; everything else on a record came from ``extra``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def set_submission_id(submission_id: str | None) -> None:
    _submission_id_var.set(submission_id)


def get_submission_id() -> str | None:
    return _submission_id_var.get()


def clear_submission_id() -> None:
    _submission_id_var.set(None)


class Redactor:
    """Replace values stored under sensitive keys, case-insensitively."""

    def __init__(self, sensitive_keys: Iterable[str] | None = None) -> None:
        keys = SENSITIVE_KEYS_DEFAULT if sensitive_keys is None else sensitive_keys
        self.sensitive_keys = frozenset(key.lower() for key in keys)

    def is_sensitive(self, key: str) -> bool:
        return key.lower() in self.sensitive_keys

    def redact(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {
                k: REDACTED if self.is_sensitive(str(k)) else self.redact(v)
                for k, v in value.items()
            }
        if isinstance(value, (list, tuple)):
            return type(value)(self.redact(v) for v in value)
        return value

    def extras(self, record: LogRecord) -> dict[str, Any]:
        """Return the record's ``extra`` fields with sensitive values redacted."""

        return {
            key: REDACTED if self.is_sensitive(key) else self.redact(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }


class SubmissionIdFilter(logging.Filter):
    """Stamp the current submission id onto records that lack one."""

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        if getattr(record, "submission_id", None) is None:
            submission_id = get_submission_id()
            if submission_id:
                record.submission_id = submission_id
        return True


class SensitiveDataFilter(logging.Filter):
    """Redact sensitive extras in place so any formatter is safe to use."""

    def __init__(self, sensitive_keys: Iterable[str] | None = None) -> None:
        super().__init__()
        self.redactor = Redactor(sensitive_keys)

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        for key, value in self.redactor.extras(record).items():
            setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record: level, logger, event name and extras."""

    def __init__(
        self,
        *,
        sensitive_keys: Iterable[str] | None = None,
        ensure_ascii: bool = True,
    ) -> None:
        super().__init__()
        self.redactor = Redactor(sensitive_keys)
        self.ensure_ascii = ensure_ascii

    def format(self, record: LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            "thread": record.threadName,
        }
        submission_id = getattr(record, "submission_id", None) or get_submission_id()
        if submission_id:
            payload["submission_id"] = submission_id

        payload.update(self.redactor.extras(record))

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=self.ensure_ascii)


def configure_logging(log_settings: LogSettings | None = None) -> None:
    """Install a single redacting handler on the root logger.

    Args:
        log_settings: Optional log settings; loaded from the environment if omitted.
    """

    cfg = log_settings or get_settings().log
    level = getattr(logging, cfg.level.upper(), logging.INFO)

    handler: logging.Handler
    if cfg.output.lower() == "file":
        file_path = Path(cfg.file_path or "logs/registry_client.log")
        file_path.parent.mkdir(parents=True, exist_ok=True)
        if cfg.max_bytes:
            handler = RotatingFileHandler(
                file_path,
                maxBytes=cfg.max_bytes,
                backupCount=cfg.backup_count,
                encoding="utf-8",
            )
        else:
            handler = logging.FileHandler(file_path, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.addFilter(SubmissionIdFilter())
    handler.addFilter(SensitiveDataFilter())

    if cfg.format.lower() == "plain":
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
    else:
        handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # httpx logs every request at INFO, which duplicates our own events
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
