from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from lora_bridge.errors import ConfigError


def _default_env_file() -> str:
    # .env junto al proceso; las variables reales del entorno tienen prioridad.
    return str(Path.cwd() / ".env")


@dataclass(frozen=True)
class Settings:
    mqtt_server: str
    mqtt_username: str
    mqtt_password: str
    mqtt_ca_cert: str
    mqtt_client_id: str
    mqtt_keepalive: int

    influxdb_server: str
    influxdb_username: str
    influxdb_password: str
    influxdb_db: str
    influxdb_timeout_ms: int

    log_level: str


def _int_env(name: str, default: str) -> int:
    value = os.getenv(name, default)
    try:
        return int(value)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


def get_settings() -> Settings:
    """Lee la configuración.

    Raises:
        ConfigError: valores numéricos inválidos
    """
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("BRIDGE_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    mqtt_server = os.getenv("MQTT_SERVER", "tcp://localhost:1883")
    mqtt_username = os.getenv("MQTT_USERNAME", "")
    mqtt_password = os.getenv("MQTT_PASSWORD", "")
    # Vacío = sin TLS propio (o confianza del sistema si el esquema es ssl://)
    mqtt_ca_cert = os.getenv("MQTT_CA_CERT", "")
    mqtt_client_id = os.getenv("MQTT_CLIENT_ID", "lora-bridge")
    mqtt_keepalive = _int_env("MQTT_KEEPALIVE", "60")

    influxdb_server = os.getenv("INFLUXDB_SERVER", "http://localhost:8086")
    influxdb_username = os.getenv("INFLUXDB_USERNAME", "")
    influxdb_password = os.getenv("INFLUXDB_PASSWORD", "")
    influxdb_db = os.getenv("INFLUXDB_DB", "lora")
    influxdb_timeout_ms = _int_env("INFLUXDB_TIMEOUT_MS", "10000")

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    return Settings(
        mqtt_server=mqtt_server,
        mqtt_username=mqtt_username,
        mqtt_password=mqtt_password,
        mqtt_ca_cert=mqtt_ca_cert,
        mqtt_client_id=mqtt_client_id,
        mqtt_keepalive=mqtt_keepalive,
        influxdb_server=influxdb_server,
        influxdb_username=influxdb_username,
        influxdb_password=influxdb_password,
        influxdb_db=influxdb_db,
        influxdb_timeout_ms=influxdb_timeout_ms,
        log_level=log_level,
    )
