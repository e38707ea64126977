"""Best observation window selection for a normalized forecast."""

from astrospots.models import AnalysisResult, WeatherDataPoint, WeatherForecast

PRECIP_WEIGHT = 2  # rain hurts observing twice as much as cloud
CLEAR_CLOUD_LIMIT = 20
CLEAR_PRECIP_LIMIT = 10
HUMID_LIMIT = 85


class EmptyForecastError(ValueError):
    """analyze() was called on a forecast without any points."""


def score(point: WeatherDataPoint) -> int:
    """Composite unsuitability score; lower is better."""
    return point.cloud_cover + PRECIP_WEIGHT * point.precipitation_prob


def analyze(forecast: WeatherForecast) -> AnalysisResult:
    """Pick the best forecast point and derive suitability flags.

    The earliest point wins when scores tie.

    Raises:
        EmptyForecastError: If the forecast has no points.
    """
    if not forecast.hourly:
        raise EmptyForecastError(f"Forecast for spot {forecast.spot_id!r} has no points")

    best = forecast.hourly[0]
    best_score = score(best)
    for point in forecast.hourly[1:]:
        s = score(point)
        if s < best_score:
            best, best_score = point, s

    return AnalysisResult(
        best_point=best,
        is_good_conditions=best.cloud_cover < CLEAR_CLOUD_LIMIT
        and best.precipitation_prob < CLEAR_PRECIP_LIMIT,
        is_humid=best.humidity > HUMID_LIMIT,
    )
