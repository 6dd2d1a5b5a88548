"""Sink InfluxDB: un Point por llamada.

Cada escritura abre su propio cliente, escribe un lote de un solo punto y
cierra. No hay pool, ni reintentos, ni buffer: un fallo es un punto perdido.

La base 1.x se direcciona por la API de compatibilidad de influxdb-client:
token "usuario:contraseña" y bucket = nombre de la base.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from influxdb_client import InfluxDBClient, WritePrecision
from influxdb_client import Point as InfluxPoint
from influxdb_client.client.write_api import SYNCHRONOUS

from ..domain.interfaces import IPointSink
from ..domain.point import Point

logger = logging.getLogger(__name__)

STAGE_CLIENT = "client"
STAGE_BATCH = "batch"
STAGE_POINT = "point"
STAGE_WRITE = "write"


def to_line_protocol(point: Point) -> str:
    """Serializa un Point a line protocol.

    Raises:
        ValueError: measurement vacío, sin campos o tipo de campo no soportado
    """
    if not point.measurement:
        raise ValueError("missing measurement")
    if not point.fields:
        raise ValueError("point has no fields")

    record = InfluxPoint(point.measurement)
    for key, value in point.tags.items():
        record.tag(key, value)
    for key, value in point.fields.items():
        record.field(key, value)
    record.time(point.time_ns, WritePrecision.NS)

    line = record.to_line_protocol()
    if not line:
        raise ValueError("point serialized to an empty line")
    return line


class InfluxSink(IPointSink):
    """Escribe Points en InfluxDB."""

    def __init__(
        self,
        url: str,
        database: str,
        username: str = "",
        password: str = "",
        timeout_ms: int = 10_000,
        client_factory: Callable[..., InfluxDBClient] = InfluxDBClient,
    ):
        self._url = url
        self._database = database
        self._token: Optional[str] = f"{username}:{password}" if username else None
        self._timeout_ms = timeout_ms
        self._client_factory = client_factory

    @classmethod
    def from_settings(cls, settings) -> InfluxSink:
        return cls(
            url=settings.influxdb_server,
            database=settings.influxdb_db,
            username=settings.influxdb_username,
            password=settings.influxdb_password,
            timeout_ms=settings.influxdb_timeout_ms,
        )

    def write(self, point: Point) -> bool:
        try:
            client = self._client_factory(
                url=self._url,
                token=self._token,
                org="-",
                timeout=self._timeout_ms,
            )
        except Exception as e:
            return self._fail(STAGE_CLIENT, "Failed to create influxdb client", e)

        try:
            try:
                write_api = client.write_api(write_options=SYNCHRONOUS)
            except Exception as e:
                return self._fail(STAGE_BATCH, "Failed to create batch points", e)

            try:
                line = to_line_protocol(point)
            except (ValueError, TypeError) as e:
                return self._fail(STAGE_POINT, "Failed to add point", e)

            try:
                write_api.write(
                    bucket=self._database,
                    record=line,
                    write_precision=WritePrecision.NS,
                )
            except Exception as e:
                return self._fail(STAGE_WRITE, "Failed to write batch", e)

            logger.debug("[INFLUX] Wrote %s to %s", point.measurement, self._database)
            return True
        finally:
            client.close()

    @staticmethod
    def _fail(stage: str, message: str, error: Exception) -> bool:
        logger.error("[INFLUX] %s (stage=%s): %s", message, stage, error)
        return False
