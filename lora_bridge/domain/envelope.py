"""Envelope de uplink LoRa tal como lo publica el LoRa server.

Formato esperado (topic application/{id}/node/{devEUI}/rx):
{
    "applicationID": "1",
    "applicationName": "sensors",
    "deviceName": "d1",
    "devEUI": "0102030405060708",
    "rxInfo": [{"time": "2023-01-01T00:00:00.5Z", "rssi": -42, ...}],
    "data": "eyJ0ZW1wIjoyMS41fQ=="
}
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RxInfo(BaseModel):
    """Recepción de un gateway. Sin GPS el gateway omite `time`."""

    model_config = ConfigDict(extra="ignore")

    time: Optional[str] = None
    rssi: int = 0


class Envelope(BaseModel):
    """Mensaje externo; las claves ausentes quedan vacías."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    application_id: str = Field(default="", alias="applicationID")
    application_name: str = Field(default="", alias="applicationName")
    device_name: str = Field(default="", alias="deviceName")
    dev_eui: str = Field(default="", alias="devEUI")
    rx_info: List[RxInfo] = Field(default_factory=list, alias="rxInfo")
    data: str = ""

    @field_validator("rx_info", mode="before")
    @classmethod
    def null_rx_info(cls, v: Any) -> Any:
        # "rxInfo": null equivale a lista vacía
        return [] if v is None else v

    @field_validator("data", mode="before")
    @classmethod
    def null_data(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def first_rx(self) -> Optional[RxInfo]:
        """Primer registro de recepción; el único que se consulta."""
        return self.rx_info[0] if self.rx_info else None
