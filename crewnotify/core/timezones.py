"""
Country -> timezone lookup for local-time gating of digest notifications.

One timezone per country (the most populous one); multi-timezone countries are
approximated. Callers depend on the TimezoneResolver protocol so a full
country/region table can replace CountryTimezoneTable without touching call sites.
"""
import logging
from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Europe/London"

COUNTRY_TIMEZONES: dict[str, str] = {
    "US": "America/New_York",
    "GB": "Europe/London",
    "CA": "America/Toronto",
    "AU": "Australia/Sydney",
    "NZ": "Pacific/Auckland",
    "IN": "Asia/Kolkata",
    "JP": "Asia/Tokyo",
    "CN": "Asia/Shanghai",
    "RU": "Europe/Moscow",
    "DE": "Europe/Berlin",
    "FR": "Europe/Paris",
    "ES": "Europe/Madrid",
    "IT": "Europe/Rome",
    "BR": "America/Sao_Paulo",
    "MX": "America/Mexico_City",
}


class TimezoneResolver(Protocol):
    def timezone_for(self, country_code: str | None) -> ZoneInfo:
        """Timezone for an ISO-3166 alpha-2 code; never raises."""
        ...


class CountryTimezoneTable:
    """Static table lookup with a default for unknown or missing countries."""

    def __init__(
        self,
        table: dict[str, str] | None = None,
        default: str = DEFAULT_TIMEZONE,
    ) -> None:
        self._table = {k.upper(): v for k, v in (table or COUNTRY_TIMEZONES).items()}
        self._default = ZoneInfo(default)

    def timezone_for(self, country_code: str | None) -> ZoneInfo:
        if not country_code:
            return self._default
        name = self._table.get(country_code.strip().upper())
        if not name:
            return self._default
        try:
            return ZoneInfo(name)
        except ZoneInfoNotFoundError:
            logger.warning("Timezone %s for country %s not available; using default", name, country_code)
            return self._default


def local_hour(now: datetime, country_code: str | None, resolver: TimezoneResolver) -> int:
    """Hour of day (0-23) at `now` in the user's country timezone."""
    return now.astimezone(resolver.timezone_for(country_code)).hour
