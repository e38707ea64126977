"""UI-side state and helpers: per-spot weather slots, Bortle filtering, input parsing."""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Iterable

from astrospots.models import Coordinates, LoadingState, Spot, SpotWeather, WeatherForecast
from astrospots.weather import WeatherFetchError, fetch_forecast

logger = logging.getLogger(__name__)

DARK_SITE_MAX_BORTLE = 4

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

FetchForecast = Callable[[float, float, str], Awaitable[WeatherForecast]]


def parse_radius(text: object, fallback: int) -> int:
    """Parse the leading integer of a typed radius ("250km" -> 250, "12.5" -> 12).

    ``fallback`` is substituted for non-numeric or non-positive input.
    """
    match = _LEADING_INT.match(str(text))
    if match is None:
        return fallback
    radius = int(match.group(1))
    return radius if radius > 0 else fallback


def filter_spots(spots: Iterable[Spot], max_bortle: int) -> list[Spot]:
    """Keep spots at or below ``max_bortle``, preserving order."""
    return [s for s in spots if s.bortle_class <= max_bortle]


def is_dark_site(spot: Spot) -> bool:
    return spot.bortle_class <= DARK_SITE_MAX_BORTLE


def maps_url(coordinates: Coordinates) -> str:
    """Google Maps search link for a coordinate pair."""
    return f"https://www.google.com/maps/search/?api=1&query={coordinates.lat},{coordinates.lng}"


class WeatherBoard:
    """Mapping of spot id to its weather slot.

    Each load writes only its own key, so concurrent loads for different
    spots need no coordination and one failure leaves other slots untouched.
    """

    def __init__(self, fetch: FetchForecast = fetch_forecast) -> None:
        self._fetch = fetch
        self._slots: dict[str, SpotWeather] = {}

    def state(self, spot_id: str) -> SpotWeather:
        return self._slots.get(spot_id, SpotWeather())

    def forecast(self, spot_id: str) -> WeatherForecast | None:
        return self.state(spot_id).forecast

    def clear(self) -> None:
        """Forget every slot; called when a new search replaces the spot list."""
        self._slots.clear()

    async def load(self, spot: Spot) -> SpotWeather:
        self._slots[spot.id] = SpotWeather(state=LoadingState.LOADING)
        try:
            forecast = await self._fetch(spot.coordinates.lat, spot.coordinates.lng, spot.id)
        except WeatherFetchError as e:
            logger.warning("weather unavailable for %s (%s): %s", spot.name, spot.id, e)
            slot = SpotWeather(state=LoadingState.ERROR, error=e)
        except BaseException as e:
            self._slots[spot.id] = SpotWeather(state=LoadingState.ERROR, error=e)
            raise
        else:
            slot = SpotWeather(state=LoadingState.SUCCESS, forecast=forecast)
        self._slots[spot.id] = slot
        return slot

    async def load_many(self, spots: Iterable[Spot]) -> list[SpotWeather]:
        return list(await asyncio.gather(*(self.load(s) for s in spots)))
