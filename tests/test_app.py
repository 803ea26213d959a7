from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from flask import Flask

from weatherdesk.app import create_app, main
from weatherdesk.models import NewsItem, WeatherItem
from weatherdesk.news import NewsError, render_news
from weatherdesk.weather import WeatherError, future_html, today_html


class StubWeather:
    def __init__(self, items=(), error=None):
        self.items = list(items)
        self.error = error

    def forecast(self):
        if self.error is not None:
            raise self.error
        return list(self.items)


class StubNews:
    def __init__(self, articles=(), error=None):
        self.articles_list = list(articles)
        self.error = error

    def articles(self):
        if self.error is not None:
            raise self.error
        return list(self.articles_list)


def _day(offset):
    return (datetime.now() + timedelta(days=offset)).strftime("%Y%m%d")


def _items():
    today = _day(0)
    return [
        WeatherItem(today, "0900", "🌤", "none", "15℃", "20%", "50%"),
        WeatherItem(today, "0600", "🌥", "none", "12℃", "10%", "60%"),
        WeatherItem(_day(1), "1200", "☁", "🌧", "18℃", "70%", "80%"),
        WeatherItem(_day(2), "1200", "🌤", "none", "21℃", "0%", "40%"),
    ]


@pytest.fixture
def client(tmp_path):
    (tmp_path / "index.html").write_text("<html>home</html>", encoding="utf-8")
    (tmp_path / "style.css").write_text("body {}", encoding="utf-8")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "index.html").write_text("docs page", encoding="utf-8")
    articles = [NewsItem(title="<b>Headline</b>", link="https://example.com/a", description="Body")]
    app = create_app(StubWeather(_items()), StubNews(articles), str(tmp_path))
    return app.test_client()


def test_today_weather(client):
    response = client.get("/getTodayWeather")
    assert response.status_code == 200
    assert response.headers["Content-Type"].startswith("text/html")
    body = response.get_data(as_text=True)
    assert body == today_html(_items(), _day(0))
    assert body.index("06시") < body.index("09시")


def test_future_weather(client):
    response = client.get("/getFutureWeather")
    assert response.status_code == 200
    body = response.get_data(as_text=True)
    assert body == future_html(_items(), _day(0))
    assert body.count('class="date-group"') == 2


def test_weather_failure_is_server_error(tmp_path):
    app = create_app(StubWeather(error=WeatherError("down")), StubNews(), str(tmp_path))
    response = app.test_client().get("/getTodayWeather")
    assert response.status_code == 500
    assert response.get_data(as_text=True) == "날씨 정보를 가져올 수 없습니다.\n"


def test_top_news(client):
    response = client.get("/getTopNews")
    assert response.status_code == 200
    body = response.get_data(as_text=True)
    assert "<b>" not in body
    assert 'href="https://example.com/a"' in body
    assert "Headline" in body


def test_top_news_empty(tmp_path):
    app = create_app(StubWeather(), StubNews(), str(tmp_path))
    response = app.test_client().get("/getTopNews")
    assert response.get_data(as_text=True) == render_news([])


def test_news_failure_is_server_error(tmp_path):
    app = create_app(StubWeather(), StubNews(error=NewsError("down")), str(tmp_path))
    response = app.test_client().get("/getTopNews")
    assert response.status_code == 500
    assert response.get_data(as_text=True) == "뉴스 정보를 가져올 수 없습니다.\n"


def test_cors_headers_on_every_response(client):
    response = client.get("/getTopNews")
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET, POST, PUT, DELETE, OPTIONS"
    assert response.headers["Access-Control-Allow-Credentials"] == "true"
    assert "hx-request" in response.headers["Access-Control-Allow-Headers"]


def test_preflight_answers_immediately(client):
    response = client.open("/getTodayWeather", method="OPTIONS")
    assert response.status_code == 200
    assert response.get_data() == b""
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_static_root_serves_index(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == "<html>home</html>"


def test_static_file_and_directory(client):
    assert client.get("/style.css").get_data(as_text=True) == "body {}"
    assert client.get("/docs/").get_data(as_text=True) == "docs page"


def test_static_missing_file(client):
    assert client.get("/missing.js").status_code == 404


def test_main_runs_server(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    with patch.object(Flask, "run") as run:
        assert main(["--port", "9000"]) == 0
    run.assert_called_once()
    assert run.call_args.kwargs["port"] == 9000
    assert "http://localhost:9000" in capsys.readouterr().out