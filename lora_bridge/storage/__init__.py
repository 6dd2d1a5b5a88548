"""Storage layer - Persistencia de Points."""

from .influx_sink import InfluxSink

__all__ = ["InfluxSink"]
