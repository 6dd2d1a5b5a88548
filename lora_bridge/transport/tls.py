"""Contexto TLS para la conexión al broker."""

from __future__ import annotations

import logging
import ssl
from typing import Optional

from ..errors import ConfigError
from .broker_address import BrokerAddress

logger = logging.getLogger(__name__)


def load_ca_context(ca_file: str) -> ssl.SSLContext:
    """Contexto que sólo confía en el bundle PEM indicado.

    Raises:
        ConfigError: fichero ilegible o sin certificados válidos
    """
    try:
        return ssl.create_default_context(cafile=ca_file)
    except (OSError, ssl.SSLError) as e:
        raise ConfigError(f"Failed to load mqtt CA certificate {ca_file}: {e}") from e


def build_tls_context(address: BrokerAddress, ca_file: str = "") -> Optional[ssl.SSLContext]:
    """Decide el TLS de la sesión.

    - ca_file   → confianza = sólo ese bundle (se valida aunque no se use)
    - ssl://... sin ca_file → confianza del sistema
    - tcp://... → sin TLS
    """
    context = load_ca_context(ca_file) if ca_file else None

    if not address.tls:
        if context is not None:
            logger.warning("[MQTT] MQTT_CA_CERT is set but %s is not a TLS address, ignoring it", address)
        return None

    return context or ssl.create_default_context()
