# weatherdesk

weatherdesk is a small web server for a personal dashboard. It serves:

- today's hourly forecast from the Korea Meteorological Administration's village forecast API, for one fixed grid point (nx=77, ny=131)
- the next two days of that forecast
- up to five top news headlines from the Naver news search API, with duplicate stories removed

Each result comes back as an HTML fragment, so a page can drop it straight into place, for example with htmx. Any other path is served as a file from a static directory.

## Installation

```
pip install .
```

## Configuration

The server reads its credentials from the environment each time it fetches fresh data. When started with the `weatherdesk` command it first loads a `.env` file from the working directory if there is one (a warning is logged if there is not).

```
API_KEY=placeholder
NAVER_CLIENT_ID=placeholder
NAVER_CLIENT_SECRET=placeholder
```

- `API_KEY` is the authentication key for the forecast API.
- `NAVER_CLIENT_ID` and `NAVER_CLIENT_SECRET` are the credentials for the news search API. If either is missing, the news route answers with an error.

## Running

```
weatherdesk
```

Options:

| Option          | Default   | Meaning                        |
|-----------------|-----------|--------------------------------|
| `--host`        | `0.0.0.0` | interface to listen on         |
| `--port`        | `8080`    | port to listen on              |
| `--static-dir`  | `public`  | directory of static files      |

The command runs Flask's built-in server and answers these routes:

| Route               | Returns                                                            |
|---------------------|--------------------------------------------------------------------|
| `/getTodayWeather`  | today's forecast, sorted by hour                                   |
| `/getFutureWeather` | the next two days, grouped by date, showing every even hour        |
| `/getTopNews`       | up to five headlines, each with a link and a summary               |
| anything else       | a file from the static directory; `/` and directories give `index.html` |

If the forecast or the news cannot be fetched, the route answers with status 500 and a short plain-text message.

Every response carries permissive CORS headers. `OPTIONS` preflight requests are answered straight away with status 200.

## Caching

Forecast data is kept until ten minutes past the next forecast release hour (02, 05, 08, 11, 14, 17, 20 or 23 o'clock). News is kept for 30 minutes. A failed fetch is not cached.

## Using it as a library

```python
import requests
from weatherdesk.app import create_app
from weatherdesk.news import NewsService
from weatherdesk.weather import WeatherService

session = requests.Session()
app = create_app(WeatherService(session), NewsService(session), "public")
```

Both services also take a `clock` callable returning the current `datetime`, which decides cache expiry. The building blocks are available on their own:

- `weatherdesk.weather`: `fetch_forecast`, `group_forecast`, `parse_category`, `base_date_time`, `next_forecast_time`, `today_html`, `future_html`, `render_today`, `render_future`
- `weatherdesk.news`: `fetch_news`, `filter_unique_articles`, `clean_html_tags`, `render_news`
- `weatherdesk.models`: the `NewsItem`, `NaverNewsResponse`, `ForecastEntry` and `WeatherItem` data classes and `parse_forecast_response`
- `weatherdesk.cache`: `ExpiringCache`, a thread-safe single-value cache with an absolute expiry time

`create_app` does not load `.env`; set the environment yourself when embedding the application.

## What it does not do

The grid point of the forecast and the news search query are fixed in the code. The page that shows the fragments is not included: put your own `index.html` and assets in the static directory.

## Tests

```
pip install .[test]
pytest
```