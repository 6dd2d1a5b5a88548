"""Handler de mensajes MQTT."""

from __future__ import annotations

import logging
from typing import Optional

from ..domain.interfaces import IMessageConsumer, IPointSink
from ..monitoring.stats import Stats
from ..transform.transformer import MessageTransformer

logger = logging.getLogger(__name__)

STATS_LOG_EVERY = 100


class MessageHandler(IMessageConsumer):
    """Maneja uplinks y los envía a la base de series temporales.

    Responsabilidades:
    - Transformación envelope → Point
    - Escritura síncrona en el sink
    - Tracking de estadísticas

    Corre en el hilo de red de paho: una escritura lenta frena la
    recepción, no hay cola intermedia.
    """

    def __init__(
        self,
        sink: IPointSink,
        transformer: Optional[MessageTransformer] = None,
    ):
        self._sink = sink
        self._transformer = transformer or MessageTransformer()
        self._stats = Stats()

    def handle(self, topic: str, payload: bytes):
        """Procesa un mensaje MQTT."""
        self._stats.record_received()

        try:
            result = self._transformer.transform(payload)
            if not result.ok:
                self._stats.increment("dropped")
                logger.debug("[HANDLER] Dropped message on %s at stage %s", topic, result.stage)
                return

            if not self._sink.write(result.point):
                self._stats.increment("failed")
                return

            processed = self._stats.increment("processed")
            if processed % STATS_LOG_EVERY == 0:
                logger.info("[HANDLER] %s", self._stats)

        except Exception as e:
            logger.exception("[HANDLER] Error handling message on %s: %s", topic, e)
            self._stats.increment("failed")

    @property
    def stats(self) -> Stats:
        return self._stats
