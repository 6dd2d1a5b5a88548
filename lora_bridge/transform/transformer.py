"""Transformer: envelope LoRa crudo → Point.

Flujo:
  bytes MQTT
  → Envelope (JSON)
  → data (base64)
  → payload (JSON object)
  → Point (measurement, tags, fields, time)

Cualquier fallo descarta el mensaje: reintentar un mensaje malformado
nunca puede funcionar.
"""

from __future__ import annotations

import base64
import binascii
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import ValidationError

from ..domain.envelope import Envelope
from ..domain.point import Point
from .fields import loads_payload, normalize_fields
from .timestamps import parse_rfc3339_ns

logger = logging.getLogger(__name__)

STAGE_ENVELOPE = "envelope"
STAGE_BASE64 = "base64"
STAGE_PAYLOAD = "payload"


@dataclass
class TransformResult:
    """Resultado de la transformación."""

    ok: bool
    point: Optional[Point] = None
    stage: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def dropped(cls, stage: str, error: str) -> TransformResult:
        return cls(ok=False, stage=stage, error=error)


class MessageTransformer:
    """Decodifica envelopes y construye Points.

    Sin estado mutable: se puede usar desde varios hilos a la vez.

    Args:
        now_ns: reloj en nanosegundos (inyectable para tests)
    """

    def __init__(self, now_ns: Callable[[], int] = time.time_ns):
        self._now_ns = now_ns

    def transform(self, payload: bytes) -> TransformResult:
        # 1. Envelope
        try:
            envelope = Envelope.model_validate_json(payload)
        except ValidationError as e:
            return self._drop(STAGE_ENVELOPE, f"Failed to decode json: {e}")

        # 2. base64
        try:
            data = self._decode_base64(envelope.data)
        except (binascii.Error, ValueError) as e:
            return self._drop(STAGE_BASE64, f"Failed to decode base64: {e}")

        # 3. JSON del payload
        try:
            decoded = loads_payload(data)
        except ValueError as e:
            return self._drop(STAGE_PAYLOAD, f"Failed to decode json payload {data[:200]!r}: {e}")

        # 4. Sólo objetos JSON son campos válidos
        if not isinstance(decoded, dict):
            return self._drop(
                STAGE_PAYLOAD,
                f"Payload is not a JSON object (got {type(decoded).__name__})",
            )

        try:
            fields = normalize_fields(decoded)
        except ValueError as e:
            return self._drop(STAGE_PAYLOAD, f"Invalid payload value: {e}")

        time_ns = self._now_ns()

        rx = envelope.first_rx
        if rx is not None:
            fields["rssi"] = rx.rssi
            # Gateway might not set time if GPS time is unavailable
            if rx.time:
                try:
                    time_ns = parse_rfc3339_ns(rx.time)
                except ValueError as e:
                    logger.debug("[TRANSFORM] Ignoring rxInfo time: %s", e)

        point = Point.from_envelope_tags(
            measurement=envelope.application_name,
            app_id=envelope.application_id,
            dev_name=envelope.device_name,
            dev_eui=envelope.dev_eui,
            fields=fields,
            time_ns=time_ns,
        )
        return TransformResult(ok=True, point=point)

    @staticmethod
    def _decode_base64(value: str) -> bytes:
        # Alfabeto estándar con padding; CR/LF se ignoran
        cleaned = value.replace("\r", "").replace("\n", "")
        return base64.b64decode(cleaned, validate=True)

    @staticmethod
    def _drop(stage: str, error: str) -> TransformResult:
        logger.warning("[TRANSFORM] Dropping message (stage=%s): %s", stage, error)
        return TransformResult.dropped(stage, error)
