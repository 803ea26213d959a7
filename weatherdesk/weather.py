"""Village forecast retrieval, grouping, caching and HTML rendering."""

from __future__ import annotations

import logging
import os
import posixpath  # noqa: F401  (kept for symmetry with path handling elsewhere)
import re
import time
from datetime import datetime, timedelta
from typing import Callable, Iterable, Mapping, Optional, Sequence

import requests

from weatherdesk.cache import ExpiringCache
from weatherdesk.models import ForecastEntry, WeatherItem, parse_forecast_response

logger = logging.getLogger(__name__)

FORECAST_URL = (
    "https://apihub.kma.go.kr/api/typ02/openApi/VilageFcstInfoService_2.0/getVilageFcst"
)
GRID_X = 77
GRID_Y = 131
REQUEST_TIMEOUT = 10
FUTURE_DAYS = 2
FORECAST_HOURS = (2, 5, 8, 11, 14, 17, 20, 23)
UNKNOWN = "알 수 없음"

_BASE_TIMES = (
    (5, "0200"),
    (8, "0500"),
    (11, "0800"),
    (14, "1100"),
    (17, "1400"),
    (20, "1700"),
    (23, "2000"),
)

_SKY_ICONS = {"1": "🌤", "3": "🌥", "4": "☁"}
_PTY_ICONS = {
    "0": "none",
    "1": "🌧",
    "2": "🌧(비/눈)",
    "3": "🌨",
    "4": "🌧(소나기)",
}

_INTEGER = re.compile(r"[+-]?[0-9]+")


class WeatherError(Exception):
    """The forecast could not be fetched or decoded."""


def base_date_time(now: datetime) -> tuple[str, str]:
    """Return the date and time of the latest published forecast run."""
    shifted = now - timedelta(minutes=10)
    hour = shifted.hour
    if hour < 2:
        return (shifted - timedelta(days=1)).strftime("%Y%m%d"), "2300"
    for limit, base_time in _BASE_TIMES:
        if hour < limit:
            return shifted.strftime("%Y%m%d"), base_time
    return shifted.strftime("%Y%m%d"), "2300"


def parse_category(category: str, value: str) -> str:
    """Translate sky and precipitation codes to icons; pass other values through."""
    if category == "SKY":
        return _SKY_ICONS.get(value, UNKNOWN)
    if category == "PTY":
        return _PTY_ICONS.get(value, UNKNOWN)
    return value


def group_forecast(entries: Iterable[ForecastEntry]) -> list[WeatherItem]:
    """Merge per-category entries into one item per date and hour."""
    grouped: dict[tuple[str, str], WeatherItem] = {}
    for entry in entries:
        key = (entry.date, entry.time)
        item = grouped.get(key)
        if item is None:
            item = grouped[key] = WeatherItem(date=entry.date, time=entry.time)
        if entry.category == "SKY":
            item.sky = parse_category("SKY", entry.value)
        elif entry.category == "PTY":
            item.pty = parse_category("PTY", entry.value)
        elif entry.category == "TMP":
            item.tmp = entry.value + "℃"
        elif entry.category == "POP":
            item.pop = entry.value + "%"
        elif entry.category == "REH":
            item.humidity = entry.value + "%"
    return list(grouped.values())


def format_time(time_str: str) -> str:
    """Render an ``HHMM`` time as the hour followed by 시."""
    if len(time_str) < 2:
        raise ValueError(f"time {time_str!r} is too short")
    return f"{time_str[:2]}시"


def _parse_int(text: str) -> Optional[int]:
    if _INTEGER.fullmatch(text):
        return int(text)
    return None


def temp_class(temp: str) -> str:
    """Pick the CSS class for a temperature such as ``18℃``."""
    value = _parse_int(temp.removesuffix("℃"))
    if value is None or value <= 10:
        return "temp-cold"
    if value <= 20:
        return "temp-cool"
    if value <= 30:
        return "temp-warm"
    return "temp-hot"


def next_forecast_time(now: datetime) -> datetime:
    """Return ten minutes past the next forecast publication hour."""
    for hour in FORECAST_HOURS:
        if now.hour < hour:
            return now.replace(hour=hour, minute=10, second=0, microsecond=0)
    tomorrow = now + timedelta(days=1)
    return tomorrow.replace(hour=2, minute=10, second=0, microsecond=0)


def fetch_forecast(
    session: requests.Session, api_key: str, now: datetime
) -> list[ForecastEntry]:
    """Download the village forecast for the configured grid point."""
    started = time.perf_counter()
    base_date, base_time = base_date_time(now)
    url = (
        f"{FORECAST_URL}?pageNo=1&numOfRows=900&dataType=JSON"
        f"&base_date={base_date}&base_time={base_time}"
        f"&nx={GRID_X}&ny={GRID_Y}&authKey={api_key}"
    )
    try:
        response = session.get(url, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise WeatherError(f"HTTP request failed: {exc}") from exc

    if response.status_code != 200:
        raise WeatherError(f"API response failed: status code {response.status_code}")

    try:
        entries = parse_forecast_response(response.json())
    except ValueError as exc:
        logger.warning("JSON parsing failed. Response body: %s", response.text)
        raise WeatherError(f"JSON parsing failed: {exc}") from exc

    if not entries:
        raise WeatherError("API response is empty")

    logger.info("weather request took %.3fs", time.perf_counter() - started)
    return entries


def _display_icon(item: WeatherItem) -> str:
    return item.sky if item.pty == "none" else item.pty


def render_today(items: Iterable[WeatherItem]) -> str:
    """Render today's forecast items as an HTML grid."""
    parts = ['<div class="weather-grid">']
    for item in items:
        parts.append(
            f"""
            <div class="weather">
                <p class="sky-status">{_display_icon(item)}</p>
                <p class="temp {temp_class(item.tmp)}">{item.tmp}</p>
                <p class="rain-chance">강수확률: {item.pop}</p>
                <p class="humidity">습도: {item.humidity}</p>
                <p class="time">{format_time(item.time)}</p>
            </div>"""
        )
    parts.append("</div>")
    return "".join(parts)


def _is_even_hour(time_str: str) -> bool:
    hour = _parse_int(time_str[:2])
    return (hour or 0) % 2 == 0


def render_future(
    dates: Sequence[str], grouped: Mapping[str, Sequence[WeatherItem]]
) -> str:
    """Render one block per date, showing every even hour."""
    parts = []
    for date in dates:
        items = sorted(grouped.get(date, ()), key=lambda item: item.time)
        parts.append(
            f"""<div class="date-group">
            <h3 class="date-title">{date[4:6]}월 {date[6:8]}일</h3>
            <div class="weather-grid">"""
        )
        for item in items:
            if not _is_even_hour(item.time):
                continue
            parts.append(
                f"""
                    <div class="weather">
                        <p class="sky-status">{_display_icon(item)}</p>
                        <p class="temp {temp_class(item.tmp)}">{item.tmp}</p>
                        <p class="rain-chance">강수: {item.pop}</p>
                        <p class="time">{format_time(item.time)}</p>
                    </div>"""
            )
        parts.append("</div></div>")
    return "".join(parts)


def today_html(items: Iterable[WeatherItem], today: str) -> str:
    """Render the items dated ``today`` in time order."""
    todays = sorted((item for item in items if item.date == today), key=lambda i: i.time)
    return render_today(todays)


def future_html(items: Iterable[WeatherItem], today: str) -> str:
    """Render the first days after ``today``."""
    grouped: dict[str, list[WeatherItem]] = {}
    for item in items:
        if item.date != today:
            grouped.setdefault(item.date, []).append(item)
    dates = sorted(grouped)[:FUTURE_DAYS]
    return render_future(dates, grouped)


class WeatherService:
    """Serves the forecast, refetching it after each publication time."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._session = session if session is not None else requests.Session()
        self._clock = clock
        self._cache: ExpiringCache[list[WeatherItem]] = ExpiringCache(clock)

    def forecast(self) -> list[WeatherItem]:
        """Return the cached forecast, fetching a fresh one once it expires."""
        cached = self._cache.get()
        if cached is not None:
            logger.info("using cached weather data (expires at %s)", self._cache.expires_at())
            return list(cached)

        try:
            entries = fetch_forecast(
                self._session, os.environ.get("API_KEY", ""), self._clock()
            )
        except WeatherError as exc:
            logger.warning("fetching weather failed: %s", exc)
            raise

        items = group_forecast(entries)
        expiry = next_forecast_time(self._clock())
        self._cache.set(list(items), expiry)
        logger.info("stored fresh weather data (expires at %s)", expiry)
        return items