"""Open-Meteo forecast fetching and normalization into a compact WeatherForecast."""

import logging
import math
from datetime import datetime

import httpx

from astrospots.config import get_settings
from astrospots.models import WeatherDataPoint, WeatherForecast

logger = logging.getLogger(__name__)

HOURLY_FIELDS = (
    "temperature_2m",
    "cloud_cover",
    "visibility",
    "relative_humidity_2m",
    "precipitation_probability",
)
FORECAST_DAYS = 3
SAMPLE_STEP = 2  # keep every second hourly sample
MAX_POINTS = 16


class WeatherFetchError(Exception):
    """Forecast fetch or normalization failure for one spot."""


def _number(value: object, field: str, index: int) -> float:
    if value is None or isinstance(value, bool):
        raise WeatherFetchError(f"{field}[{index}] is missing")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise WeatherFetchError(f"{field}[{index}] is not numeric: {value!r}") from e
    if math.isnan(number):
        raise WeatherFetchError(f"{field}[{index}] is not numeric: {value!r}")
    return number


def _percent(value: float) -> int:
    return int(round(min(100.0, max(0.0, value))))


def format_time_label(raw: str) -> str:
    """Turn an Open-Meteo ISO timestamp into a short weekday + hour label ("Mon 08 PM")."""
    try:
        dt = datetime.fromisoformat(raw)
    except (TypeError, ValueError) as e:
        raise WeatherFetchError(f"Unparseable timestamp: {raw!r}") from e
    return dt.strftime("%a %I %p")


def normalize_hourly(hourly: dict, spot_id: str) -> WeatherForecast:
    """Downsample Open-Meteo's parallel hourly arrays into a WeatherForecast.

    Every second raw sample is kept (indices 0, 2, 4, ...) and the result is
    capped at 16 points. Missing precipitation probability becomes 0;
    percentages are clamped to 0..100.

    Args:
        hourly: The ``hourly`` object of an Open-Meteo response.
        spot_id: Spot the forecast belongs to.

    Returns:
        Normalized forecast, ascending by time.

    Raises:
        WeatherFetchError: If the arrays are missing, misaligned, or non-numeric.
    """
    if not isinstance(hourly, dict):
        raise WeatherFetchError("Response has no hourly block")
    times = hourly.get("time")
    if not isinstance(times, list):
        raise WeatherFetchError("Response has no hourly time axis")

    columns: dict[str, list] = {}
    for name in HOURLY_FIELDS:
        column = hourly.get(name)
        if name == "precipitation_probability" and column is None:
            column = [None] * len(times)
        if not isinstance(column, list) or len(column) < len(times):
            raise WeatherFetchError(f"hourly.{name} does not match the time axis")
        columns[name] = column

    points: list[WeatherDataPoint] = []
    for i in range(0, len(times), SAMPLE_STEP):
        precip = columns["precipitation_probability"][i]
        points.append(
            WeatherDataPoint(
                time=format_time_label(times[i]),
                temperature=_number(columns["temperature_2m"][i], "temperature_2m", i),
                cloud_cover=_percent(_number(columns["cloud_cover"][i], "cloud_cover", i)),
                visibility=max(0.0, _number(columns["visibility"][i], "visibility", i)),
                humidity=_percent(
                    _number(columns["relative_humidity_2m"][i], "relative_humidity_2m", i)
                ),
                precipitation_prob=(
                    0
                    if precip is None
                    else _percent(_number(precip, "precipitation_probability", i))
                ),
            )
        )
        if len(points) >= MAX_POINTS:
            break

    return WeatherForecast(spot_id=spot_id, hourly=tuple(points))


async def fetch_forecast(
    lat: float,
    lng: float,
    spot_id: str,
    client: httpx.AsyncClient | None = None,
) -> WeatherForecast:
    """Fetch a fresh 3-day hourly forecast for a coordinate and normalize it.

    Args:
        lat: Latitude (decimal degrees).
        lng: Longitude (decimal degrees).
        spot_id: Spot the forecast is fetched for.
        client: Optional shared async client. A short-lived one is used otherwise.

    Returns:
        WeatherForecast with at most 16 points at a 2-hour cadence.

    Raises:
        WeatherFetchError: On transport failure, non-success status, or a malformed body.
    """
    params = {
        "latitude": lat,
        "longitude": lng,
        "hourly": ",".join(HOURLY_FIELDS),
        "forecast_days": FORECAST_DAYS,
    }
    url = get_settings().open_meteo_url

    try:
        if client is None:
            async with httpx.AsyncClient() as own_client:
                resp = await own_client.get(url, params=params)
        else:
            resp = await client.get(url, params=params)
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("weather fetch failed for spot=%s: %s", spot_id, e)
        raise WeatherFetchError("Failed to fetch weather data.") from e
    except ValueError as e:
        logger.warning("weather response for spot=%s is not JSON: %s", spot_id, e)
        raise WeatherFetchError("Weather service returned an unreadable response.") from e

    if not isinstance(data, dict):
        raise WeatherFetchError("Unexpected Open-Meteo response shape")

    try:
        forecast = normalize_hourly(data.get("hourly"), spot_id)
    except WeatherFetchError as e:
        logger.warning("weather response for spot=%s is malformed: %s", spot_id, e)
        raise

    logger.debug("normalized %d forecast points for spot=%s", len(forecast.hourly), spot_id)
    return forecast
