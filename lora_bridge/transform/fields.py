"""Normalización del payload decodificado a campos de la serie temporal.

El payload no tiene esquema: cada valor es un JSON arbitrario. La base de
datos sólo acepta escalares, así que:
- números  → float (también los enteros, para no alternar tipo de campo)
- str/bool → sin cambios
- objetos y arrays → texto JSON compacto
- null → se omite
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, Mapping

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant: {name}")


def loads_payload(data: bytes) -> Any:
    """json.loads estricto: rechaza NaN e Infinity."""
    return json.loads(data, parse_constant=_reject_constant)


def normalize_value(value: Any) -> Any:
    """Valor JSON → valor de campo.

    Raises:
        ValueError: número fuera del rango de float (1e400, enteros enormes)
    """
    if isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        try:
            value = float(value)
        except OverflowError as e:
            raise ValueError(f"number out of range: {e}") from e
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("number out of range")
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    return value


def normalize_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Aplana el mapping de nivel superior a valores escribibles.

    Raises:
        ValueError: algún número no representable
    """
    fields: Dict[str, Any] = {}
    for key, value in payload.items():
        if value is None:
            logger.debug("[TRANSFORM] Skipping null field %s", key)
            continue
        fields[key] = normalize_value(value)
    return fields
