"""Point - Registro listo para la serie temporal."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

TAG_APP_ID = "app_id"
TAG_DEV_NAME = "dev_name"
TAG_DEV_EUI = "dev_eui"


@dataclass
class Point:
    """Punto de la serie temporal.

    measurement = applicationName del envelope, tags fijos
    (app_id, dev_name, dev_eui), fields = payload decodificado (+ rssi).
    """

    measurement: str
    tags: Dict[str, str]
    fields: Dict[str, Any] = field(default_factory=dict)
    time_ns: int = 0

    @classmethod
    def from_envelope_tags(
        cls,
        measurement: str,
        app_id: str,
        dev_name: str,
        dev_eui: str,
        fields: Dict[str, Any],
        time_ns: int,
    ) -> Point:
        return cls(
            measurement=measurement,
            tags={
                TAG_APP_ID: app_id,
                TAG_DEV_NAME: dev_name,
                TAG_DEV_EUI: dev_eui,
            },
            fields=fields,
            time_ns=time_ns,
        )

    @property
    def timestamp(self) -> datetime:
        """Timestamp como datetime UTC (precisión de microsegundos)."""
        return _EPOCH + timedelta(microseconds=self.time_ns // 1000)
