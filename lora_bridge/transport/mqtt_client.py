"""Cliente MQTT para recepción de uplinks LoRa."""

from __future__ import annotations

import logging
import ssl
import threading
import time
from typing import Callable, Dict, Optional

import paho.mqtt.client as mqtt

from ..domain.interfaces import IBrokerConnector, IMessageConsumer
from .broker_address import BrokerAddress

logger = logging.getLogger(__name__)


class MQTTClient(IBrokerConnector):
    """Cliente MQTT ligero sobre paho-mqtt.

    Responsabilidades:
    - Conexión bloqueante (espera el CONNACK)
    - Reconexión automática vía el loop de paho
    - Suscripción y entrega de mensajes al consumidor
    - Avisar al Supervisor de conexiones y pérdidas
    """

    def __init__(
        self,
        address: BrokerAddress,
        username: Optional[str] = None,
        password: Optional[str] = None,
        client_id: str = "lora-bridge",
        keepalive: int = 60,
        tls_context: Optional[ssl.SSLContext] = None,
        connect_timeout: float = 10.0,
        client_factory: Callable[..., mqtt.Client] = mqtt.Client,
    ):
        self.address = address
        self.username = username
        self.password = password
        self.client_id = f"{client_id}-{int(time.time())}"
        self.keepalive = keepalive
        self.connect_timeout = connect_timeout

        self._tls_context = tls_context
        self._client_factory = client_factory
        self._client: Optional[mqtt.Client] = None
        self._connected = False
        self._closing = False
        self._connack = threading.Event()
        self._connack_ok = False
        self._pending_subscriptions: Dict[int, str] = {}

        self.on_connected: Optional[Callable[[], None]] = None
        self.on_connection_lost: Optional[Callable[[str], None]] = None

    def _ensure_client(self) -> mqtt.Client:
        if self._client is not None:
            return self._client

        client = self._client_factory(
            client_id=self.client_id,
            protocol=mqtt.MQTTv311,
            callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        )
        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect
        client.on_subscribe = self._on_subscribe

        if self.username:
            client.username_pw_set(self.username, self.password or None)

        if self._tls_context is not None:
            client.tls_set_context(self._tls_context)

        client.reconnect_delay_set(min_delay=1, max_delay=120)

        self._client = client
        return client

    def connect(self) -> bool:
        """Conecta al broker y espera el CONNACK."""
        client = self._ensure_client()
        self._closing = False
        self._connack.clear()
        self._connack_ok = False

        logger.info("[MQTT] Connecting to %s", self.address)
        try:
            client.connect(self.address.host, self.address.port, keepalive=self.keepalive)
        except (OSError, ValueError) as e:
            logger.error("[MQTT] Connection failed: %s", e)
            return False

        client.loop_start()

        if not self._connack.wait(self.connect_timeout):
            logger.error("[MQTT] Connection timeout after %.1fs", self.connect_timeout)
            client.loop_stop()
            return False

        if not self._connack_ok:
            # Sin esto el loop de paho seguiría reintentando por su cuenta
            client.loop_stop()
            return False

        return True

    def subscribe(self, topic: str, qos: int, consumer: IMessageConsumer) -> bool:
        """Suscribe y entrega cada mensaje del topic a consumer.handle()."""
        if self._client is None:
            logger.error("[MQTT] Cannot subscribe to %s: client not connected", topic)
            return False

        def _deliver(client, userdata, msg):
            consumer.handle(msg.topic, msg.payload)

        self._client.message_callback_add(topic, _deliver)
        result, mid = self._client.subscribe(topic, qos=qos)
        if result != mqtt.MQTT_ERR_SUCCESS:
            logger.error("[MQTT] Failed to subscribe to %s: %s", topic, mqtt.error_string(result))
            return False

        self._pending_subscriptions[mid] = topic
        return True

    def disconnect(self):
        """Desconecta del broker."""
        self._closing = True
        if self._client:
            try:
                self._client.loop_stop()
                self._client.disconnect()
            except (OSError, RuntimeError) as e:
                logger.warning("[MQTT] Disconnect error: %s", e)
        self._connected = False

    def _on_connect(self, client, userdata, flags, rc, properties=None):
        """Callback de conexión (inicial y tras cada reconexión)."""
        if rc == 0:
            self._connected = True
            self._connack_ok = True
            self._connack.set()
            logger.info("[MQTT] Connected to broker %s", self.address)
            if self.on_connected:
                self.on_connected()
        else:
            self._connected = False
            self._connack_ok = False
            self._connack.set()
            logger.error("[MQTT] Connection refused: rc=%s", rc)

    def _on_disconnect(self, client, userdata, flags, rc, properties=None):
        """Callback de desconexión."""
        self._connected = False
        if self._closing:
            logger.info("[MQTT] Disconnected")
            return
        logger.warning("[MQTT] Connection lost (rc=%s)", rc)
        if self.on_connection_lost:
            self.on_connection_lost(str(rc))

    def _on_subscribe(self, client, userdata, mid, reason_code_list, properties=None):
        """Callback de SUBACK."""
        topic = self._pending_subscriptions.pop(mid, "?")
        for reason in reason_code_list:
            if reason.is_failure:
                logger.error("[MQTT] Subscription to %s refused: %s", topic, reason)
            else:
                logger.info("[MQTT] Subscribed to %s (granted qos=%s)", topic, reason.value)

    @property
    def is_connected(self) -> bool:
        return self._connected
