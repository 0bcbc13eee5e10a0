"""Monitoring utilities for kinesis_reader."""

from kinesis_reader.monitoring.metrics import MetricRecord, MetricsCollector

__all__ = [
    "MetricRecord",
    "MetricsCollector",
]
