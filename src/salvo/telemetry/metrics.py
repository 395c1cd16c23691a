"""Metrics helper utilities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

from opentelemetry import metrics as otel_metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.metrics import Counter, Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

if TYPE_CHECKING:  # pragma: no cover
    from .config import TelemetryConfig

_METER_PROVIDER: MeterProvider | None = None
_COUNTERS: dict[str, Counter] = {}

MetricAttributes = Mapping[str, str | bool | int | float]


def get_meter(name: str = "salvo") -> Meter:
    """Return a meter from the active provider (proxy until one is installed)."""
    return otel_metrics.get_meter(name)


def init_metrics(config: TelemetryConfig) -> MeterProvider:
    global _METER_PROVIDER

    readers = []
    if config.otlp_metrics_endpoint:
        exporter = OTLPMetricExporter(endpoint=config.otlp_metrics_endpoint, insecure=True)
        readers.append(PeriodicExportingMetricReader(exporter, export_interval_millis=5000))

    provider = MeterProvider(resource=Resource.create(config.resource), metric_readers=readers)
    otel_metrics.set_meter_provider(provider)
    _METER_PROVIDER = provider
    _COUNTERS.clear()
    return provider


def counter(name: str, description: str = "", unit: str = "1") -> Counter:
    """Return the shared counter called ``name``."""
    instrument = _COUNTERS.get(name)
    if instrument is None:
        instrument = get_meter().create_counter(name, unit=unit, description=description)
        _COUNTERS[name] = instrument
    return instrument


def record_engine_metric(name: str, value: float = 1, attrs: MetricAttributes | None = None) -> None:
    counter(name).add(value, attributes=attrs or {})
