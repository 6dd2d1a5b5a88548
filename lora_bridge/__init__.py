"""lora_bridge - Puente LoRa uplinks (MQTT) → InfluxDB.

Estructura:
- transport/   → Cliente MQTT, supervisor de conexión, handler de mensajes
- domain/      → Envelope, Point e interfaces
- transform/   → Decodificación envelope → Point
- storage/     → Escritura a InfluxDB
- monitoring/  → Estadísticas
"""

__version__ = "1.0.0"
