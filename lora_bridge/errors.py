"""Errores de configuración del puente."""

from __future__ import annotations


class ConfigError(Exception):
    """Configuración inválida detectada al arrancar (fatal)."""
