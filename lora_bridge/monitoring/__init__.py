"""Monitoring - Estadísticas de procesamiento."""

from .stats import Stats

__all__ = ["Stats"]
