"""Transport layer - Sesión MQTT y recepción de uplinks."""

from .broker_address import BrokerAddress, parse_broker_address
from .message_handler import MessageHandler
from .mqtt_client import MQTTClient
from .supervisor import ConnectionSupervisor, SupervisorState

__all__ = [
    "BrokerAddress",
    "parse_broker_address",
    "MessageHandler",
    "MQTTClient",
    "ConnectionSupervisor",
    "SupervisorState",
]
