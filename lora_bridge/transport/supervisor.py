"""Supervisor de la sesión con el broker.

Estados:
  DISCONNECTED → CONNECTING → CONNECTED → (pérdida) → CONNECTING → ...
  cualquiera → SHUTTING_DOWN (terminal)

La conexión inicial se reintenta para siempre cada 2 segundos: sin broker
el proceso no tiene nada útil que hacer. Las reconexiones posteriores las
hace el loop de paho; el Supervisor re-suscribe en cada conexión.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from ..domain.interfaces import IBrokerConnector, IMessageConsumer

logger = logging.getLogger(__name__)

RX_TOPIC = "application/+/node/+/rx"
RX_QOS = 2
RETRY_DELAY_SECONDS = 2.0


class SupervisorState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    SHUTTING_DOWN = "shutting_down"


class ConnectionSupervisor:
    """Mantiene una única sesión lógica con el broker.

    Args:
        connector: sesión MQTT (MQTTClient o un fake en tests)
        consumer: receptor de los mensajes del topic
        sleep: espera entre reintentos; por defecto espera sobre el evento
            de parada, así que request_shutdown() la interrumpe
    """

    def __init__(
        self,
        connector: IBrokerConnector,
        consumer: IMessageConsumer,
        topic: str = RX_TOPIC,
        qos: int = RX_QOS,
        retry_delay: float = RETRY_DELAY_SECONDS,
        sleep: Optional[Callable[[float], object]] = None,
    ):
        self._connector = connector
        self._consumer = consumer
        self._topic = topic
        self._qos = qos
        self._retry_delay = retry_delay

        self._stop = threading.Event()
        self._sleep = sleep or self._stop.wait
        self._lock = threading.Lock()
        self._state = SupervisorState.DISCONNECTED

        self._connect_attempts = 0
        self._connections = 0

        connector.on_connected = self._on_connected
        connector.on_connection_lost = self._on_connection_lost

    def _set_state(self, state: SupervisorState) -> bool:
        with self._lock:
            if self._state is SupervisorState.SHUTTING_DOWN:
                return False
            if self._state is not state:
                logger.debug("[SUPERVISOR] %s → %s", self._state.value, state.value)
            self._state = state
            return True

    def connect_forever(self) -> bool:
        """Bloquea hasta conectar.

        Returns:
            True si conectó, False si se pidió parar antes
        """
        self._set_state(SupervisorState.CONNECTING)

        while not self._stop.is_set():
            self._connect_attempts += 1
            if self._connector.connect():
                self._set_state(SupervisorState.CONNECTED)
                return True

            logger.warning(
                "[SUPERVISOR] Failed to connect to mqtt server (attempt %d), will retry in %.0fs",
                self._connect_attempts,
                self._retry_delay,
            )
            self._sleep(self._retry_delay)

        return False

    def _on_connected(self):
        """Hook de conexión: (re)suscribe siempre."""
        if not self._set_state(SupervisorState.CONNECTED):
            return

        self._connections += 1
        if self._connections > 1:
            logger.info("[SUPERVISOR] Reconnected to mqtt server (reconnects=%d)", self.reconnect_count)
        else:
            logger.info("[SUPERVISOR] Connected to mqtt server")

        if not self._connector.subscribe(self._topic, self._qos, self._consumer):
            # Sin reintento propio: la próxima reconexión vuelve a suscribir
            logger.error("[SUPERVISOR] Failed to subscribe to %s", self._topic)

    def _on_connection_lost(self, reason: str):
        if not self._set_state(SupervisorState.CONNECTING):
            return
        logger.warning("[SUPERVISOR] Lost connection to mqtt server (%s), will try to reconnect", reason)

    def request_shutdown(self):
        """Marca la parada. Seguro desde un signal handler."""
        self._stop.set()

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        return self._stop.wait(timeout)

    def shutdown(self):
        """Cierra la sesión sin drenar mensajes en vuelo."""
        with self._lock:
            self._state = SupervisorState.SHUTTING_DOWN
        self._stop.set()
        self._connector.disconnect()

    @property
    def state(self) -> SupervisorState:
        return self._state

    @property
    def reconnect_count(self) -> int:
        return max(self._connections - 1, 0)

    def health_check(self) -> dict:
        """Health check para monitoreo."""
        connected = self._connector.is_connected
        health = {
            "healthy": self._state is SupervisorState.CONNECTED and connected,
            "state": self._state.value,
            "connected": connected,
            "topic": self._topic,
            "connect_attempts": self._connect_attempts,
            "reconnect_count": self.reconnect_count,
        }
        stats = getattr(self._consumer, "stats", None)
        if stats is not None:
            health.update(stats.to_dict())
        return health
