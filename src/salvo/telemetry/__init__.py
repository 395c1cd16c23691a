"""Public telemetry helpers for the salvo engine."""

from __future__ import annotations

from .config import TelemetryConfig, init_telemetry, load_telemetry_config
from .logger import get_logger, init_logging
from .metrics import counter, get_meter, init_metrics, record_engine_metric
from .tracer import get_tracer, init_tracing

__all__ = [
    "TelemetryConfig",
    "counter",
    "get_logger",
    "get_meter",
    "get_tracer",
    "init_logging",
    "init_metrics",
    "init_telemetry",
    "init_tracing",
    "load_telemetry_config",
    "record_engine_metric",
]
