"""Top news headlines from the news search API, deduplicated and cached."""

from __future__ import annotations

import logging
import os
import re
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional
from urllib.parse import quote_plus

import requests

from weatherdesk.cache import ExpiringCache
from weatherdesk.models import NaverNewsResponse, NewsItem

logger = logging.getLogger(__name__)

NEWS_QUERY = "뉴스"
NEWS_URL = "https://openapi.naver.com/v1/search/news.json"
NEWS_LIMIT = 5
CACHE_LIFETIME = timedelta(minutes=30)
REQUEST_TIMEOUT = 10

_TITLE_PREFIX = re.compile(r"^\[.*?\]|\(.*?\)")

_HTML_REPLACEMENTS = (
    ("<b>", ""),
    ("</b>", ""),
    ("&quot;", '"'),
    ("&lt;", "<"),
    ("&gt;", ">"),
)


class NewsError(Exception):
    """The news could not be fetched or decoded."""


def clean_html_tags(text: str) -> str:
    """Strip the bold markup and the few entities the search API emits."""
    for old, new in _HTML_REPLACEMENTS:
        text = text.replace(old, new)
    return text


def _title_key(title: str) -> str:
    return _TITLE_PREFIX.sub("", clean_html_tags(title)).strip()


def filter_unique_articles(items: Iterable[NewsItem], max_items: int) -> list[NewsItem]:
    """Keep articles whose normalised titles are new, stopping at ``max_items``."""
    if max_items < 0:
        raise ValueError("max_items must not be negative")
    seen: set[str] = set()
    unique: list[NewsItem] = []
    for item in items:
        key = _title_key(item.title)
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
        if len(unique) >= max_items:
            break
    return unique


def fetch_news(session: requests.Session, client_id: str, client_secret: str) -> list[NewsItem]:
    """Query the news search API and return up to five distinct articles."""
    if not client_id or not client_secret:
        raise NewsError("news API client id or secret is not configured")

    url = f"{NEWS_URL}?query={quote_plus(NEWS_QUERY)}&display=20&sort=sim"
    headers = {
        "X-Naver-Client-Id": client_id,
        "X-Naver-Client-Secret": client_secret,
    }
    try:
        response = session.get(url, headers=headers, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise NewsError(f"news API request failed: {exc}") from exc

    if response.status_code != 200:
        raise NewsError(f"news API status code: {response.status_code}")

    try:
        parsed = NaverNewsResponse.from_dict(response.json())
    except ValueError as exc:
        raise NewsError(f"news API JSON could not be parsed: {exc}") from exc

    return filter_unique_articles(parsed.items, NEWS_LIMIT)


def render_news(articles: Iterable[NewsItem]) -> str:
    """Render the articles as an HTML fragment."""
    blocks = [
        f"""<div class="news-item">
                <h4><a href="{item.link}" target="_blank">{clean_html_tags(item.title)}</a></h4>
                <p>{clean_html_tags(item.description)}</p>
            </div>"""
        for item in articles
    ]
    if not blocks:
        return "<p>가져온 뉴스가 없습니다.</p>"
    return "".join(blocks)


class NewsService:
    """Serves the top articles, refetching them at most every thirty minutes."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._session = session if session is not None else requests.Session()
        self._clock = clock
        self._cache: ExpiringCache[list[NewsItem]] = ExpiringCache(clock)

    def articles(self) -> list[NewsItem]:
        """Return the cached articles, fetching fresh ones once the cache expires."""
        cached = self._cache.get()
        if cached is not None:
            logger.info("using cached news data")
            return list(cached)

        try:
            result = fetch_news(
                self._session,
                os.environ.get("NAVER_CLIENT_ID", ""),
                os.environ.get("NAVER_CLIENT_SECRET", ""),
            )
        except NewsError as exc:
            logger.warning("fetching news failed: %s", exc)
            raise

        expiry = self._clock() + CACHE_LIFETIME
        self._cache.set(list(result), expiry)
        logger.info("stored fresh news data (expires at %s)", expiry)
        return result