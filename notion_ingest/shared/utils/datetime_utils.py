"""
Utilidades para manejo de fechas y horas de la API de Notion.

Se mantienen libres de I/O para poder testearlas fácilmente.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utc_now() -> datetime:
    """Retorna la hora actual en UTC, como datetime aware."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normaliza datetime a UTC (aware).

    Notion devuelve ISO8601 con zona en timestamps, pero las propiedades de
    tipo fecha pueden venir sin hora; normalizamos para comparar/almacenar.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def coerce_notion_datetime(value: Any) -> Any:
    """
    Coerción de valores tipo fecha de Notion a datetime UTC.

    - "2024-01-01" -> 2024-01-01T00:00:00+00:00
    - "2024-01-01T10:15:00.000Z" -> datetime aware en UTC
    - date -> medianoche UTC

    Cualquier otro valor se devuelve tal cual para que pydantic lo rechace
    con un error de validación normal.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        raw = value.strip()
        if _DATE_ONLY_RE.match(raw):
            return coerce_notion_datetime(date.fromisoformat(raw))
        try:
            return ensure_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
        except ValueError:
            return value
    return value
