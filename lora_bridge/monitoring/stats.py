"""Estadísticas de procesamiento."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class Stats:
    """Estadísticas de procesamiento de mensajes.

    dropped = descartados por el transformer (malformados)
    failed  = Point válido que no se pudo escribir
    """

    received: int = 0
    processed: int = 0
    dropped: int = 0
    failed: int = 0
    last_message_at: float = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def __str__(self) -> str:
        return (
            f"Stats: received={self.received} processed={self.processed} "
            f"dropped={self.dropped} failed={self.failed}"
        )

    def record_received(self):
        with self._lock:
            self.received += 1
            self.last_message_at = time.time()

    def increment(self, counter: str) -> int:
        """Incrementa processed/dropped/failed y devuelve el nuevo valor."""
        with self._lock:
            value = getattr(self, counter) + 1
            setattr(self, counter, value)
            return value

    def to_dict(self) -> dict:
        """Convierte a diccionario."""
        return {
            "received": self.received,
            "processed": self.processed,
            "dropped": self.dropped,
            "failed": self.failed,
            "last_message_at": self.last_message_at,
            "started_at": self.started_at.isoformat(),
            "success_rate": self._success_rate(),
        }

    def _success_rate(self) -> float:
        """Calcula tasa de éxito de escritura."""
        total = self.processed + self.failed
        if total == 0:
            return 1.0
        return self.processed / total
