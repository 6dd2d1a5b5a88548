"""Domain layer - Modelos y contratos."""

from .envelope import Envelope, RxInfo
from .interfaces import IBrokerConnector, IMessageConsumer, IPointSink, NullSink
from .point import Point

__all__ = [
    "Envelope",
    "RxInfo",
    "Point",
    "IBrokerConnector",
    "IMessageConsumer",
    "IPointSink",
    "NullSink",
]
