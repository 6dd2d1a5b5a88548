"""Parseo de timestamps RFC 3339 con precisión de nanosegundos.

datetime sólo guarda microsegundos, así que la fracción se acumula aparte
y el resultado es un entero de nanosegundos desde epoch (UTC).
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_RFC3339_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d+))?"
    r"(Z|[+-]\d{2}:\d{2})$"
)


def parse_rfc3339_ns(value: str) -> int:
    """Convierte "2023-01-01T00:00:00.5Z" a nanosegundos desde epoch.

    Raises:
        ValueError: formato o rango inválido
    """
    match = _RFC3339_RE.match(value)
    if match is None:
        raise ValueError(f"not an RFC 3339 timestamp: {value!r}")

    year, month, day, hour, minute, second = (int(g) for g in match.group(1, 2, 3, 4, 5, 6))
    fraction = match.group(7) or ""
    offset = match.group(8)

    if offset == "Z":
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        tz = timezone(sign * timedelta(hours=int(offset[1:3]), minutes=int(offset[4:6])))

    dt = datetime(year, month, day, hour, minute, second, tzinfo=tz)
    seconds = (dt - _EPOCH) // timedelta(seconds=1)
    # Más de 9 dígitos: se trunca a nanosegundos
    nanos = int(fraction[:9].ljust(9, "0")) if fraction else 0
    return seconds * 1_000_000_000 + nanos
