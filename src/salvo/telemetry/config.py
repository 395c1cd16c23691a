"""Telemetry configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(*names: str) -> bool | None:
    for name in names:
        value = os.getenv(name)
        if value is not None:
            return value.strip().lower() in _TRUTHY
    return None


def _signal_endpoint(base: str | None, signal: str) -> str | None:
    if not base:
        return None
    return f"{base.rstrip('/')}/v1/{signal}"


def _parse_resource_attributes(raw: str) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for part in raw.split(","):
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        attrs[key.strip()] = value.strip()
    return attrs


class TelemetryConfig(BaseModel):
    """Which exporters to enable and where they send data."""

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False
    otlp_traces_endpoint: str | None = None
    otlp_metrics_endpoint: str | None = None
    otlp_logs_endpoint: str | None = None
    service_name: str = "salvo"
    service_namespace: str = "naval-combat"
    resource_attributes: dict[str, str] = Field(default_factory=dict)

    @property
    def resource(self) -> dict[str, str]:
        """Resource attributes shared by every signal provider."""
        attributes = {
            "service.name": self.service_name,
            "service.namespace": self.service_namespace,
        }
        attributes.update(self.resource_attributes)
        return attributes

    @classmethod
    def from_env(cls, **overrides: Any) -> "TelemetryConfig":
        """Construct config from env vars (`SALVO_*` + `OTEL_*`)."""

        data: Dict[str, Any] = cls().model_dump()
        data.update(overrides)

        flag_sources = {
            "enable_tracing": ("SALVO_ENABLE_TRACING", "OTEL_TRACES_ENABLED"),
            "enable_metrics": ("SALVO_ENABLE_METRICS", "OTEL_METRICS_ENABLED"),
            "enable_logging": ("SALVO_ENABLE_LOGGING", "OTEL_LOGS_ENABLED"),
        }
        for field_name, env_names in flag_sources.items():
            flag = _env_flag(*env_names)
            if flag is not None:
                data[field_name] = flag

        base_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        for signal in ("traces", "metrics", "logs"):
            key = f"otlp_{signal}_endpoint"
            if data.get(key):
                continue
            explicit = os.getenv(f"OTEL_EXPORTER_OTLP_{signal.upper()}_ENDPOINT")
            data[key] = explicit or _signal_endpoint(base_endpoint, signal)

        service_name = os.getenv("OTEL_SERVICE_NAME")
        if service_name:
            data["service_name"] = service_name
        service_namespace = os.getenv("OTEL_SERVICE_NAMESPACE")
        if service_namespace:
            data["service_namespace"] = service_namespace

        resource_env = os.getenv("OTEL_RESOURCE_ATTRIBUTES")
        if resource_env:
            data["resource_attributes"] = {
                **data.get("resource_attributes", {}),
                **_parse_resource_attributes(resource_env),
            }

        # A configured endpoint implies the exporter should run.
        for signal in ("traces", "metrics", "logs"):
            if data.get(f"otlp_{signal}_endpoint"):
                flag_name = "enable_tracing" if signal == "traces" else f"enable_{signal}"
                data[flag_name] = True

        return cls(**data)


@lru_cache(maxsize=1)
def load_telemetry_config() -> TelemetryConfig:
    """Load and cache telemetry config from the environment."""

    return TelemetryConfig.from_env()


def init_tracing(config: TelemetryConfig) -> Any:
    from .tracer import init_tracing as _init_tracing

    return _init_tracing(config)


def init_metrics(config: TelemetryConfig) -> Any:
    from .metrics import init_metrics as _init_metrics

    return _init_metrics(config)


def init_logging(config: TelemetryConfig) -> Any:
    from .logger import init_logging as _init_logging

    return _init_logging(config)


def init_telemetry(config: TelemetryConfig | None = None) -> TelemetryConfig:
    """Initialise the requested telemetry subsystems."""

    resolved = config or load_telemetry_config()

    if resolved.enable_tracing:
        init_tracing(resolved)
    if resolved.enable_metrics:
        init_metrics(resolved)
    if resolved.enable_logging:
        init_logging(resolved)
    return resolved
