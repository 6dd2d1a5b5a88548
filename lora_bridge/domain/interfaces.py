"""Interfaces abstractas del puente.

Desacoplan el pipeline (transform + sink) de la librería MQTT concreta y
del cliente de la base de series temporales.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

from .point import Point


class IMessageConsumer(ABC):
    """Consumidor de mensajes entregados por el broker.

    Implementations:
    - MessageHandler: Transformer → Sink
    """

    @abstractmethod
    def handle(self, topic: str, payload: bytes) -> None:
        """Procesa un mensaje crudo. Nunca debe propagar excepciones."""
        pass


class IBrokerConnector(ABC):
    """Sesión con el broker que controla el Supervisor.

    Implementations:
    - MQTTClient: paho-mqtt
    """

    on_connected: Optional[Callable[[], None]] = None
    on_connection_lost: Optional[Callable[[str], None]] = None

    @abstractmethod
    def connect(self) -> bool:
        """Bloquea hasta conectar (True) o fallar (False)."""
        pass

    @abstractmethod
    def subscribe(self, topic: str, qos: int, consumer: IMessageConsumer) -> bool:
        """Suscribe el consumidor al topic filter."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        pass


class IPointSink(ABC):
    """Destino de los Points.

    Implementations:
    - InfluxSink: una escritura HTTP por Point
    - NullSink: No-op for testing
    """

    @abstractmethod
    def write(self, point: Point) -> bool:
        """Persiste un Point.

        Returns:
            True si se escribió, False si falló (ya registrado en el log)
        """
        pass


class NullSink(IPointSink):
    """No-op sink for testing or dry runs."""

    def write(self, point: Point) -> bool:
        return True
