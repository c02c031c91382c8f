"""Logging configuration: console formatter with structured extras, optional Cloud Logging."""

from __future__ import annotations

import json
import logging
import os
import time
import traceback
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from logging.config import dictConfig
from typing import Any

from google.cloud import logging as gcp_logging
from opentelemetry import baggage, trace

CLOUD_HANDLER_NAME = "cloud_logging"

_GATEWAY_LOGGERS: tuple[str, ...] = (
    "glass_gateway.http",
    "glass_gateway.gateway",
    "glass_gateway.tokens",
    "glass_gateway.sessions",
    "glass_gateway.tools",
    "glass_gateway.hardware",
    "glass_gateway.runtime",
)


def _level(env_var: str, default: str) -> str:
    return os.getenv(env_var, default).upper()


def _should_emit_json_payload() -> bool:
    # Cloud Run and Kubernetes ingest JSON lines as structured payloads.
    return bool(os.getenv("K_SERVICE") or os.getenv("KUBERNETES_SERVICE_HOST"))


def _structured_payload(record: logging.LogRecord) -> dict[str, Any]:
    record_data = record.__dict__.get("data")
    payload: dict[str, Any] = {
        "message": record.getMessage(),
        "severity": record.levelname,
        "logger": record.name,
        "timestamp": (
            f"{time.strftime('%Y-%m-%dT%H:%M:%S', time.gmtime(record.created))}"
            f".{int(record.msecs):03d}Z"
        ),
    }
    if record.exc_info:
        payload["exception"] = "".join(traceback.format_exception(*record.exc_info)).rstrip("\n")
    if record_data:
        payload["data"] = sanitize_for_json(record_data)
    json_fields = record.__dict__.get("json_fields")
    if isinstance(json_fields, Mapping):
        for key, value in sanitize_for_json(json_fields).items():
            payload.setdefault(key, value)
    return payload


class ExtrasFormatter(logging.Formatter):
    """Append structured ``data`` payloads when present."""

    def format(self, record: logging.LogRecord) -> str:
        if _should_emit_json_payload():
            return json.dumps(_structured_payload(record), sort_keys=True, separators=(",", ":"))

        formatted = super().format(record)
        record_data = record.__dict__.get("data")
        if record_data:
            try:
                encoded = json.dumps(record_data, sort_keys=True, separators=(",", ":"))
            except TypeError:
                encoded = json.dumps(sanitize_for_json(record_data), sort_keys=True, separators=(",", ":"))
            return f"{formatted} | data={encoded}"
        return formatted


class CloudJsonSanitizer(logging.Filter):
    """Make ``data`` JSON-serializable and mirror it into ``json_fields`` for Cloud Logging."""

    def filter(self, record: logging.LogRecord) -> bool:
        record_dict = record.__dict__
        if "data" not in record_dict:
            return True
        sanitized = sanitize_for_json(record_dict["data"])
        record_dict["data"] = sanitized
        json_fields = record_dict.get("json_fields")
        fields = dict(json_fields) if isinstance(json_fields, Mapping) else {}
        fields.setdefault("data", sanitized)
        record_dict["json_fields"] = fields
        return True


class OtelContextLogFilter(logging.Filter):
    """Inject OpenTelemetry trace ids and baggage into ``json_fields``."""

    def __init__(self, *, gcp_project_id: str | None = None) -> None:
        super().__init__()
        self._gcp_project_id = gcp_project_id.strip() if gcp_project_id else None

    def filter(self, record: logging.LogRecord) -> bool:
        otel: dict[str, Any] = {}
        fields: dict[str, Any] = {}

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            trace_id = f"{span_context.trace_id:032x}"
            otel["trace_id"] = trace_id
            otel["span_id"] = f"{span_context.span_id:016x}"
            if self._gcp_project_id:
                fields["logging.googleapis.com/trace"] = f"projects/{self._gcp_project_id}/traces/{trace_id}"
                fields["logging.googleapis.com/spanId"] = otel["span_id"]

        baggage_values = baggage.get_all()
        if baggage_values:
            otel["baggage"] = {key: str(value) for key, value in baggage_values.items()}

        if not otel:
            return True

        existing = record.__dict__.get("json_fields")
        merged = dict(existing) if isinstance(existing, Mapping) else {}
        merged.update(fields)
        merged["otel"] = otel
        record.__dict__["json_fields"] = merged
        return True


def build_log_config(
    *,
    root_level_env: str = "LOG_LEVEL",
    root_default: str = "INFO",
    cloud_logging_enabled: bool = False,
    gcp_project: str | None = None,
    cloud_log_name: str = "glass-gateway",
    cloud_log_labels: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return a dictConfig-compatible logging configuration."""
    handler_names = ["console"]
    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
            "stream": "ext://sys.stdout",
            "filters": ["otel_context"],
        }
    }
    if cloud_logging_enabled:
        if not gcp_project:
            raise RuntimeError("GCP project required when cloud logging is enabled")
        handlers[CLOUD_HANDLER_NAME] = _cloud_logging_handler(gcp_project, cloud_log_name, cloud_log_labels)
        handler_names.append(CLOUD_HANDLER_NAME)

    loggers: dict[str, dict[str, Any]] = {
        "uvicorn": {"level": _level("UVICORN_LOG_LEVEL", "INFO"), "handlers": list(handler_names), "propagate": False},
        "uvicorn.error": {
            "level": _level("UVICORN_LOG_LEVEL", "INFO"),
            "handlers": list(handler_names),
            "propagate": False,
        },
        "uvicorn.access": {
            "level": _level("UVICORN_ACCESS_LOG_LEVEL", "WARNING"),
            "handlers": list(handler_names),
            "propagate": False,
        },
        "httpx": {"level": _level("HTTPX_LOG_LEVEL", "WARNING"), "handlers": list(handler_names), "propagate": False},
        "httpcore": {"level": _level("HTTPX_LOG_LEVEL", "WARNING"), "handlers": list(handler_names), "propagate": False},
    }
    for name in _GATEWAY_LOGGERS:
        loggers[name] = {"level": _level("GATEWAY_LOG_LEVEL", "INFO")}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": ExtrasFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            }
        },
        "filters": {
            "otel_context": {"()": OtelContextLogFilter, "gcp_project_id": gcp_project},
            "cloud_json_sanitizer": {"()": CloudJsonSanitizer},
        },
        "handlers": handlers,
        "root": {"level": _level(root_level_env, root_default), "handlers": list(handler_names)},
        "loggers": loggers,
    }


def _cloud_logging_handler(project: str, log_name: str, labels: Mapping[str, str] | None) -> dict[str, Any]:
    from google.cloud.logging_v2.resource import Resource

    client: gcp_logging.Client = gcp_logging.Client(project=project)  # type: ignore[no-untyped-call]
    return {
        "level": "INFO",
        "class": "google.cloud.logging_v2.handlers.handlers.CloudLoggingHandler",
        "client": client,
        "name": log_name,
        "resource": Resource("global", {"project_id": project}),
        "labels": dict(labels or {}),
        "formatter": "console",
        "filters": ["otel_context", "cloud_json_sanitizer"],
    }


def configure_logging(
    *,
    cloud_logging_enabled: bool = False,
    gcp_project: str | None = None,
    cloud_log_labels: Mapping[str, str] | None = None,
) -> None:
    dictConfig(
        build_log_config(
            cloud_logging_enabled=cloud_logging_enabled,
            gcp_project=gcp_project,
            cloud_log_labels=cloud_log_labels,
        )
    )


def init_logging() -> None:
    """Bootstrap console logging without cloud handlers."""
    configure_logging(cloud_logging_enabled=False)


def shutdown_logging() -> None:
    """Flush and close Cloud Logging handlers."""
    from google.cloud.logging_v2.handlers.handlers import CloudLoggingHandler

    seen: set[int] = set()
    loggers: list[logging.Logger] = [logging.getLogger()]
    loggers.extend(
        logger for logger in logging.Logger.manager.loggerDict.values() if isinstance(logger, logging.Logger)
    )
    for logger in loggers:
        for handler in logger.handlers:
            if id(handler) in seen or not isinstance(handler, CloudLoggingHandler):
                continue
            seen.add(id(handler))
            handler.flush()  # type: ignore[no-untyped-call]
            handler.close()  # type: ignore[no-untyped-call]


def sanitize_for_json(value: Any, depth: int = 10, max_items: int = 200) -> Any:
    """Return a JSON-serializable copy; fall back to ``str`` for unknown objects."""
    if depth <= 0:
        return "<depth_exceeded>"
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes len={len(value)}>"
    if is_dataclass(value) and not isinstance(value, type):
        return sanitize_for_json(asdict(value), depth - 1, max_items)
    if isinstance(value, Mapping):
        result: dict[str, Any] = {}
        for idx, (key, item) in enumerate(value.items()):
            if idx >= max_items:
                result["<truncated>"] = f"...{len(value) - idx} more"
                break
            result[str(key)] = sanitize_for_json(item, depth - 1, max_items)
        return result
    if isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
        out = [sanitize_for_json(item, depth - 1, max_items) for item in items[:max_items]]
        if len(items) > max_items:
            out.append(f"... {len(items) - max_items} more")
        return out
    return str(value)


__all__ = [
    "CloudJsonSanitizer",
    "ExtrasFormatter",
    "OtelContextLogFilter",
    "build_log_config",
    "configure_logging",
    "init_logging",
    "sanitize_for_json",
    "shutdown_logging",
]
