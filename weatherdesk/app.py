"""The web application: forecast and news fragments plus static files."""

from __future__ import annotations

import argparse
import logging
import os
import posixpath
from datetime import datetime
from typing import Optional, Sequence

from dotenv import load_dotenv
from flask import Flask, Response, request, send_from_directory

from weatherdesk.news import NewsError, NewsService, render_news
from weatherdesk.weather import WeatherError, WeatherService, future_html, today_html

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080
ALLOWED_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
ALLOWED_HEADERS = (
    "Content-Type, Authorization, hx-request, hx-trigger, hx-current-url, hx-target, hx-delete"
)
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ALLOWED_METHODS,
    "Access-Control-Allow-Headers": ALLOWED_HEADERS,
    "Access-Control-Allow-Credentials": "true",
}

WEATHER_UNAVAILABLE = "날씨 정보를 가져올 수 없습니다."
NEWS_UNAVAILABLE = "뉴스 정보를 가져올 수 없습니다."


def _html(body: str) -> Response:
    return Response(body, status=200, content_type="text/html")


def _server_error(message: str) -> Response:
    response = Response(
        message + "\n", status=500, content_type="text/plain; charset=utf-8"
    )
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


def _today() -> str:
    return datetime.now().strftime("%Y%m%d")


def create_app(
    weather_service: Optional[WeatherService] = None,
    news_service: Optional[NewsService] = None,
    static_dir: str = "public",
) -> Flask:
    """Build the application around the given services and static directory."""
    weather = weather_service if weather_service is not None else WeatherService()
    news = news_service if news_service is not None else NewsService()
    root = os.path.abspath(static_dir)

    app = Flask(__name__, static_folder=None)

    @app.before_request
    def _preflight() -> Optional[Response]:
        if request.method == "OPTIONS":
            return Response(status=200)
        return None

    @app.after_request
    def _cors(response: Response) -> Response:
        response.headers.update(CORS_HEADERS)
        return response

    @app.get("/getTodayWeather")
    def get_today_weather() -> Response:
        try:
            items = weather.forecast()
        except WeatherError:
            return _server_error(WEATHER_UNAVAILABLE)
        return _html(today_html(items, _today()))

    @app.get("/getFutureWeather")
    def get_future_weather() -> Response:
        try:
            items = weather.forecast()
        except WeatherError:
            return _server_error(WEATHER_UNAVAILABLE)
        return _html(future_html(items, _today()))

    @app.get("/getTopNews")
    def get_top_news() -> Response:
        try:
            articles = news.articles()
        except NewsError:
            return _server_error(NEWS_UNAVAILABLE)
        return _html(render_news(articles))

    @app.get("/", defaults={"path": ""})
    @app.get("/<path:path>")
    def static_files(path: str) -> Response:
        if not path or os.path.isdir(os.path.join(root, path)):
            path = posixpath.join(path, "index.html")
        return send_from_directory(root, path)

    return app


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the web server."""
    parser = argparse.ArgumentParser(
        prog="weatherdesk", description="Serve the weather and news dashboard."
    )
    parser.add_argument("--host", default="0.0.0.0", help="interface to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    parser.add_argument("--static-dir", default="public", help="directory of static files")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    if not load_dotenv(".env"):
        logger.warning("could not load .env file")

    app = create_app(static_dir=args.static_dir)
    print(f"Server is running on http://localhost:{args.port}")
    app.run(host=args.host, port=args.port)
    return 0