import datetime

import pytest

from astrospots.config import get_settings
from astrospots.models import Coordinates, Spot, WeatherDataPoint, WeatherForecast

_ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_MODEL",
    "DISCOVERY_MAX_TOKENS",
    "OPEN_METEO_URL",
    "DEFAULT_REGION",
    "DEFAULT_RADIUS_KM",
    "FALLBACK_RADIUS_KM",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    """Isolate every test from the developer's environment and .env file."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_point(cloud=0, precip=0, humidity=50, time="Mon 08 PM", temperature=10.0, visibility=20000.0):
    return WeatherDataPoint(
        time=time,
        cloud_cover=cloud,
        visibility=visibility,
        temperature=temperature,
        humidity=humidity,
        precipitation_prob=precip,
    )


def make_forecast(*points, spot_id="spot-1"):
    return WeatherForecast(spot_id=spot_id, hourly=tuple(points))


def make_spot(spot_id="spot-1", bortle=3, lat=51.1, lng=10.2, name="Rhön"):
    return Spot(
        id=spot_id,
        name=name,
        region="Hesse",
        bortle_class=bortle,
        coordinates=Coordinates(lat=lat, lng=lng),
        description="Dark sky reserve",
        best_features=("Milky Way core", "Low horizon"),
    )


def make_hourly(length, start=datetime.datetime(2025, 11, 24, 0, 0)):
    """Open-Meteo style hourly block where cloud_cover equals the raw index."""
    times = [(start + datetime.timedelta(hours=i)).strftime("%Y-%m-%dT%H:%M") for i in range(length)]
    return {
        "time": times,
        "temperature_2m": [5.0 + i * 0.1 for i in range(length)],
        "cloud_cover": list(range(length)),
        "visibility": [24140.0] * length,
        "relative_humidity_2m": [70] * length,
        "precipitation_probability": [0] * length,
    }


@pytest.fixture
def spot():
    return make_spot()


@pytest.fixture
def hourly_72():
    """Three forecast days as returned for forecast_days=3."""
    return make_hourly(72)
