"""
Horloge et calendrier de l'académie.

Toutes les bornes de journée et tous les jours de la semaine sont calculés dans
le fuseau horaire de l'académie (configuration globale, jamais le fuseau du serveur).
Les instants sont stockés et comparés en UTC.
"""

import calendar
import enum
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from academy.config import settings

# Noms anglais figés : le format d'affichage ne doit pas dépendre de la locale du serveur
_DAY_ABBR = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


class Weekday(str, enum.Enum):
    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"


# Ordre de date.weekday() : lundi = 0
_WEEKDAYS_FROM_MONDAY = [
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
]


@lru_cache(maxsize=1)
def get_academy_timezone() -> ZoneInfo:
    """Fuseau de l'académie, résolu une seule fois pour tout le processus."""
    return ZoneInfo(settings.ACADEMY_TIMEZONE)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Ramène un instant en UTC. Une valeur naïve (relue depuis SQLite) est considérée UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_date(instant: datetime, tz: ZoneInfo) -> date:
    """Date calendaire locale de l'instant donné."""
    return as_utc(instant).astimezone(tz).date()


def day_start(day: date, tz: ZoneInfo) -> datetime:
    """Instant UTC correspondant à minuit local du jour donné."""
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)


def normalize_day(instant: datetime, tz: ZoneInfo) -> datetime:
    """
    Jour local normalisé : instant UTC de minuit local du jour de `instant`.
    Clé de partition « une présence par élève et par jour ».
    """
    return day_start(local_date(instant, tz), tz)


def weekday_of_date(day: date) -> Weekday:
    return _WEEKDAYS_FROM_MONDAY[day.weekday()]


def weekday_of(instant: datetime, tz: ZoneInfo) -> Weekday:
    """Jour de la semaine local de l'instant, comparé aux plannings des groupes."""
    return weekday_of_date(local_date(instant, tz))


def format_display(instant: datetime, tz: ZoneInfo) -> str:
    """
    Horodatage lisible pour les reçus et les journaux, ex. « Mon, Oct 19, 2026, 09:15:02 AM EEST ».
    Jamais utilisé pour une comparaison.
    """
    local = as_utc(instant).astimezone(tz)
    return "{day}, {month} {dd:02d}, {year}, {clock} {tzname}".format(
        day=_DAY_ABBR[local.weekday()],
        month=_MONTH_ABBR[local.month - 1],
        dd=local.day,
        year=local.year,
        clock=local.strftime("%I:%M:%S") + (" AM" if local.hour < 12 else " PM"),
        tzname=local.tzname(),
    )


def month_days(year: int, month: int) -> List[date]:
    """Toutes les dates du mois, du 1er au dernier jour inclus."""
    _, last_day = calendar.monthrange(year, month)
    return [date(year, month, d) for d in range(1, last_day + 1)]


def month_bounds(year: int, month: int, tz: ZoneInfo) -> Tuple[datetime, datetime]:
    """Bornes UTC [début, fin) du mois local : minuit du 1er et minuit du 1er du mois suivant."""
    first = date(year, month, 1)
    _, last_day = calendar.monthrange(year, month)
    next_first = date(year, month, last_day) + timedelta(days=1)
    return day_start(first, tz), day_start(next_first, tz)


def resolve_timezone(tz: Optional[ZoneInfo]) -> ZoneInfo:
    return tz or get_academy_timezone()
