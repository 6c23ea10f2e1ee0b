from datetime import datetime, timezone
from typing import Tuple
from zoneinfo import ZoneInfo

from app.core.config import settings


def business_tz() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def to_utc(value: datetime) -> datetime:
    """Normaliza para UTC. Horários sem offset são interpretados no fuso do negócio."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=business_tz())
    return value.astimezone(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Valores lidos do banco: SQLite devolve datetime sem tzinfo, mas o que gravamos é sempre UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local(value: datetime) -> datetime:
    return as_utc(value).astimezone(business_tz())


def month_bounds(value: datetime) -> Tuple[datetime, datetime]:
    """[início, fim) do mês civil (fuso do negócio) que contém value, em UTC."""
    local = to_local(value)
    start = local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def format_date_br(value: datetime) -> str:
    return to_local(value).strftime("%d/%m/%Y")


def format_time_br(value: datetime) -> str:
    return to_local(value).strftime("%H:%M")
