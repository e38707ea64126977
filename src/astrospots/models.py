"""Data model definitions: explicit boundaries between discovery, weather, analysis, and UI layers."""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Coordinates:
    """Geographic position of a spot."""

    lat: float  # Latitude (decimal degrees)
    lng: float  # Longitude (decimal degrees)


@dataclass(frozen=True)
class Spot:
    """A candidate astrophotography location suggested by the discovery service.

    ``bortle_class`` is passed through as reported; values outside 1..9 are a
    data-quality issue for the UI to render defensively, not a parse failure.
    """

    id: str
    name: str
    region: str
    bortle_class: int  # 1 (darkest) to 9 (inner city)
    coordinates: Coordinates
    description: str
    best_features: tuple[str, ...] = ()


@dataclass(frozen=True)
class WeatherDataPoint:
    """One normalized forecast sample."""

    time: str  # Display label ("Mon 08 PM"), not for machine comparison
    cloud_cover: int  # 0-100 %
    visibility: float  # Meters, >= 0
    temperature: float  # Celsius
    humidity: int  # 0-100 % relative humidity
    precipitation_prob: int  # 0-100 %


@dataclass(frozen=True)
class WeatherForecast:
    """Normalized short-term outlook for a single spot, ascending by time."""

    spot_id: str
    hourly: tuple[WeatherDataPoint, ...]


@dataclass(frozen=True)
class AnalysisResult:
    """Best observation window and suitability flags derived from a forecast."""

    best_point: WeatherDataPoint
    is_good_conditions: bool
    is_humid: bool


class LoadingState(Enum):
    """Progress of a remote fetch as shown in the UI."""

    IDLE = "IDLE"
    LOADING = "LOADING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


@dataclass(frozen=True)
class SpotWeather:
    """Per-spot weather slot held by the UI: Idle, Loading, Success(forecast) or Failed(error)."""

    state: LoadingState = LoadingState.IDLE
    forecast: WeatherForecast | None = None
    error: Exception | None = field(default=None, compare=False)
