"""Punto de entrada: LoRa uplinks (MQTT) → InfluxDB.

Flujo:
  MQTT topic application/+/node/+/rx
  → MessageHandler
  → MessageTransformer (envelope → Point)
  → InfluxSink (una escritura por mensaje)
"""

from __future__ import annotations

import logging
import signal
import sys

from common.config import Settings, get_settings

from .errors import ConfigError
from .storage.influx_sink import InfluxSink
from .transport.broker_address import parse_broker_address
from .transport.message_handler import MessageHandler
from .transport.mqtt_client import MQTTClient
from .transport.supervisor import ConnectionSupervisor
from .transport.tls import build_tls_context

logger = logging.getLogger(__name__)


def build_supervisor(settings: Settings) -> ConnectionSupervisor:
    """Arma el pipeline completo.

    Raises:
        ConfigError: dirección del broker o certificado CA inválidos
    """
    address = parse_broker_address(settings.mqtt_server)
    tls_context = build_tls_context(address, settings.mqtt_ca_cert)

    handler = MessageHandler(InfluxSink.from_settings(settings))
    client = MQTTClient(
        address=address,
        username=settings.mqtt_username,
        password=settings.mqtt_password,
        client_id=settings.mqtt_client_id,
        keepalive=settings.mqtt_keepalive,
        tls_context=tls_context,
    )
    return ConnectionSupervisor(client, handler)


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    try:
        settings = get_settings()
        logging.getLogger().setLevel(getattr(logging, settings.log_level, logging.INFO))
        supervisor = build_supervisor(settings)
    except ConfigError as e:
        logger.error("[BRIDGE] %s", e)
        return 1

    def _handle_signal(signum, frame):
        logger.info("[BRIDGE] Received %s", signal.Signals(signum).name)
        supervisor.request_shutdown()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    logger.info(
        "[BRIDGE] Started: mqtt=%s influxdb=%s db=%s",
        settings.mqtt_server,
        settings.influxdb_server,
        settings.influxdb_db,
    )

    if supervisor.connect_forever():
        logger.info("[BRIDGE] Waiting for messages...")
        supervisor.wait_for_shutdown()

    logger.info("[BRIDGE] Stopping")
    supervisor.shutdown()
    logger.info("[BRIDGE] %s", supervisor.health_check())
    return 0


if __name__ == "__main__":
    sys.exit(main())
