"""Parseo de la dirección del broker (MQTT_SERVER)."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from ..errors import ConfigError

PLAIN_SCHEMES = ("tcp", "mqtt")
TLS_SCHEMES = ("ssl", "tls", "mqtts")

DEFAULT_PORT = 1883
DEFAULT_TLS_PORT = 8883


@dataclass(frozen=True)
class BrokerAddress:
    host: str
    port: int
    tls: bool = False

    def __str__(self) -> str:
        scheme = "ssl" if self.tls else "tcp"
        return f"{scheme}://{self.host}:{self.port}"


def parse_broker_address(value: str) -> BrokerAddress:
    """Acepta "tcp://host:1883", "ssl://host", "host:1883" o "host".

    Raises:
        ConfigError: esquema desconocido, host vacío o puerto inválido
    """
    raw = value.strip()
    if not raw:
        raise ConfigError("MQTT_SERVER is empty")
    if "://" not in raw:
        raw = f"tcp://{raw}"

    parts = urlsplit(raw)
    scheme = parts.scheme.lower()
    if scheme not in PLAIN_SCHEMES + TLS_SCHEMES:
        raise ConfigError(f"Unsupported MQTT scheme {parts.scheme!r} in {value!r}")

    if not parts.hostname:
        raise ConfigError(f"Missing host in MQTT_SERVER {value!r}")

    tls = scheme in TLS_SCHEMES
    try:
        port = parts.port
    except ValueError as e:
        raise ConfigError(f"Invalid port in MQTT_SERVER {value!r}: {e}") from e

    if port is None:
        port = DEFAULT_TLS_PORT if tls else DEFAULT_PORT

    return BrokerAddress(host=parts.hostname, port=port, tls=tls)
