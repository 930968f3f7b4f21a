"""Structured logging with provider-token redaction.

Records are emitted as JSON strings. Context keys that look like credentials
are masked, and so is any ``token=`` query parameter embedded in a string,
since request URLs and aiohttp error messages carry the IEX token inline.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Mapping

from .errors import IEXError, record_error, sanitize_context

_TOKEN_PARAM = re.compile(r"(?i)([?&]token=)[^&#\s\"']*")
_REDACTED_PARAM = r"\1***"


def redact_url(text: str) -> str:
    """Mask the value of every ``token`` query parameter in ``text``."""

    return _TOKEN_PARAM.sub(_REDACTED_PARAM, text)


def _json_ready(value: Any) -> Any:
    if isinstance(value, str):
        return redact_url(value)
    if isinstance(value, (int, float, bool)) or value is None:
        return value
    if isinstance(value, Mapping):
        return {str(k): _json_ready(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_json_ready(v) for v in value]
    return redact_url(repr(value))


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that serialises records as redacted JSON strings."""

    def process(self, msg: Any, kwargs: Mapping[str, Any]):  # type: ignore[override]
        extra_context = kwargs.pop("context", None)
        context = dict(self.extra or {})
        if extra_context:
            context.update(extra_context)
        payload: dict[str, Any]
        if isinstance(msg, Mapping):
            payload = dict(msg)
        else:
            payload = {"message": str(msg)}
        sanitized_context = sanitize_context(context)
        if sanitized_context:
            payload.setdefault("context", {}).update(sanitized_context)
        payload.setdefault("logger", self.logger.name)
        payload.setdefault(
            "timestamp",
            datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        )
        payload = _json_ready(payload)
        kwargs.setdefault("extra", {})["structured"] = payload
        return json.dumps(payload), dict(kwargs)

    def bind(self, **context: Any) -> "StructuredLoggerAdapter":
        """Return an adapter whose records also carry ``context``."""

        merged = dict(self.extra or {})
        merged.update(sanitize_context(context))
        return StructuredLoggerAdapter(self.logger, merged)


def get_logger(name: str, **context: Any) -> StructuredLoggerAdapter:
    """Return a structured logger adapter bound to ``name``."""

    return StructuredLoggerAdapter(logging.getLogger(name), sanitize_context(context))


def log_exception(
    logger: logging.LoggerAdapter | logging.Logger,
    error: IEXError,
    *,
    event: str,
    context: Mapping[str, Any] | None = None,
) -> None:
    """Emit a structured error log and update error metrics."""

    combined_context: dict[str, Any] = {}
    if context:
        combined_context.update(context)
    combined_context.update(error.context)
    payload = {
        "event": event,
        "error": error.to_dict(),
    }
    if combined_context:
        payload["context"] = sanitize_context(combined_context)
    record_error(error)
    logger.error(payload)


__all__ = ["StructuredLoggerAdapter", "get_logger", "log_exception", "redact_url"]
