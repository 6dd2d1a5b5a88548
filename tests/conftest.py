"""Fixtures compartidas."""

import base64
import json
from typing import Any, Dict, List, Optional

import pytest

FIXED_NOW_NS = 1_700_000_000_123_456_789

# 2023-01-01T00:00:00.5Z
EXAMPLE_TIME_NS = 1_672_531_200_500_000_000


def encode_payload(payload: Any) -> str:
    """base64 del JSON del payload de aplicación."""
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


def make_envelope(
    payload: Any = None,
    rx_info: Optional[List[Dict[str, Any]]] = None,
    data: Optional[str] = None,
    **overrides: Any,
) -> Dict[str, Any]:
    envelope = {
        "applicationID": "1",
        "applicationName": "sensors",
        "deviceName": "d1",
        "devEUI": "AA:BB",
        "rxInfo": [{"time": "2023-01-01T00:00:00.5Z", "rssi": -42}] if rx_info is None else rx_info,
        "data": data if data is not None else encode_payload({"temp": 21.5} if payload is None else payload),
    }
    envelope.update(overrides)
    return envelope


def to_bytes(envelope: Dict[str, Any]) -> bytes:
    return json.dumps(envelope).encode("utf-8")


@pytest.fixture
def fixed_clock():
    """Reloj fijo en nanosegundos."""
    return lambda: FIXED_NOW_NS


@pytest.fixture
def example_message() -> bytes:
    """Mensaje de ejemplo con el payload {"temp": 21.5}."""
    return (
        b'{"applicationID":"1","applicationName":"sensors","deviceName":"d1",'
        b'"devEUI":"AA:BB","rxInfo":[{"time":"2023-01-01T00:00:00.5Z","rssi":-42}],'
        b'"data":"eyJ0ZW1wIjoyMS41fQ=="}'
    )
