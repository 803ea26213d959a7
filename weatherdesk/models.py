"""Data shapes for the news search and village forecast APIs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


def _number(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer, got {type(value).__name__}")
    return value


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"field {key!r} must be an object, got {type(value).__name__}")
    return value


def _records(data: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be a list, got {type(value).__name__}")
    for entry in value:
        if not isinstance(entry, Mapping):
            raise ValueError(f"entries of {key!r} must be objects")
    return value


@dataclass(frozen=True)
class NewsItem:
    """A single article returned by the news search API."""

    title: str = ""
    original_link: str = ""
    link: str = ""
    description: str = ""
    pub_date: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NewsItem":
        if not isinstance(data, Mapping):
            raise ValueError("news item must be an object")
        return cls(
            title=_text(data, "title"),
            original_link=_text(data, "originallink"),
            link=_text(data, "link"),
            description=_text(data, "description"),
            pub_date=_text(data, "pubDate"),
        )


@dataclass(frozen=True)
class NaverNewsResponse:
    """The whole body of a news search response."""

    last_build_date: str = ""
    total: int = 0
    start: int = 0
    display: int = 0
    items: list[NewsItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NaverNewsResponse":
        if not isinstance(data, Mapping):
            raise ValueError("news response must be an object")
        return cls(
            last_build_date=_text(data, "lastBuildDate"),
            total=_number(data, "total"),
            start=_number(data, "start"),
            display=_number(data, "display"),
            items=[NewsItem.from_dict(entry) for entry in _records(data, "items")],
        )


@dataclass(frozen=True)
class ForecastEntry:
    """One category value of the forecast for a given date and hour."""

    date: str
    time: str
    category: str
    value: str


@dataclass
class WeatherItem:
    """The forecast for one date and hour, with all categories merged."""

    date: str
    time: str
    sky: str = ""
    pty: str = ""
    tmp: str = ""
    pop: str = ""
    humidity: str = ""


def parse_forecast_response(data: Mapping[str, Any]) -> list[ForecastEntry]:
    """Extract the forecast entries from a decoded village forecast response."""
    if not isinstance(data, Mapping):
        raise ValueError("forecast response must be an object")
    body = _section(_section(data, "response"), "body")
    records = _records(_section(body, "items"), "item")
    return [
        ForecastEntry(
            date=_text(record, "fcstDate"),
            time=_text(record, "fcstTime"),
            category=_text(record, "category"),
            value=_text(record, "fcstValue"),
        )
        for record in records
    ]