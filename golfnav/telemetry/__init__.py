"""Telemetry emitters for downstream consumers."""
