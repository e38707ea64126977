"""Simple two-language (en/de) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "en": "AstroSpot Finder",
        "de": "AstroSpot Finder",
    },
    "label_region": {
        "en": "Region, city or country",
        "de": "Region, Stadt oder Land",
    },
    "label_radius": {
        "en": "Radius (km)",
        "de": "Radius (km)",
    },
    "btn_search": {
        "en": "✦ Find Spots",
        "de": "✦ Orte suchen",
    },
    "btn_analyze": {
        "en": "Analyze Weather",
        "de": "Wetter analysieren",
    },
    "btn_show_all": {
        "en": "Show All Spots",
        "de": "Alle Orte zeigen",
    },
    "loading_spots": {
        "en": "Scanning satellite data for dark skies...",
        "de": "Satellitendaten nach dunklen Himmeln durchsuchen...",
    },
    "loading_weather": {
        "en": "Loading...",
        "de": "Lädt...",
    },
    "error_spots_title": {
        "en": "Signal Lost",
        "de": "Signal verloren",
    },
    "error_spots": {
        "en": "Could not retrieve astronomical data. Please check your connection or try a different region.",
        "de": "Astronomische Daten konnten nicht abgerufen werden. Bitte Verbindung prüfen oder eine andere Region versuchen.",
    },
    "error_weather": {
        "en": "Weather data unavailable for this spot.",
        "de": "Für diesen Ort sind keine Wetterdaten verfügbar.",
    },
    "results_heading": {
        "en": "Locations near {region}",
        "de": "Orte in der Nähe von {region}",
    },
    "results_summary": {
        "en": "Radius: {radius}km • Found {found} locations • Showing {shown}",
        "de": "Radius: {radius}km • {found} Orte gefunden • {shown} angezeigt",
    },
    "label_max_bortle": {
        "en": "Max Bortle Class",
        "de": "Max. Bortle-Klasse",
    },
    "no_spots": {
        "en": "No specific dark sky spots found for this query. Try increasing the radius or checking the spelling.",
        "de": "Keine passenden Dunkelorte gefunden. Radius vergrößern oder Schreibweise prüfen.",
    },
    "no_spots_filtered": {
        "en": "No spots match your current light pollution filter (Bortle ≤ {max_bortle}).",
        "de": "Keine Orte passen zum aktuellen Lichtverschmutzungsfilter (Bortle ≤ {max_bortle}).",
    },
    "map_link": {
        "en": "Map",
        "de": "Karte",
    },
    "chart_title": {
        "en": "48h Sky Forecast",
        "de": "48h Himmelsprognose",
    },
    "verdict_good": {
        "en": "CLEAR SKIES AHEAD",
        "de": "KLARER HIMMEL IN SICHT",
    },
    "verdict_poor": {
        "en": "POOR VISIBILITY",
        "de": "SCHLECHTE SICHT",
    },
    "dew_warning": {
        "en": "⚠️ High Dew Risk",
        "de": "⚠️ Hohe Taugefahr",
    },
    "best_window": {
        "en": "Best potential: {time}",
        "de": "Bestes Zeitfenster: {time}",
    },
    "stat_temp": {"en": "Temp", "de": "Temp."},
    "stat_cloud": {"en": "Cloud", "de": "Wolken"},
    "stat_humid": {"en": "Humid", "de": "Feuchte"},
    "stat_rain": {"en": "Rain", "de": "Regen"},
    "series_rain": {"en": "Rain Prob %", "de": "Regenwahrsch. %"},
    "series_cloud": {"en": "Cloud Cover %", "de": "Bewölkung %"},
    "series_humidity": {"en": "Humidity %", "de": "Luftfeuchte %"},
    "series_best": {"en": "Best window", "de": "Bestes Fenster"},
    "footer": {
        "en": "Data powered by Claude & Open-Meteo. Light pollution estimates are approximate (Bortle Scale).",
        "de": "Daten von Claude & Open-Meteo. Lichtverschmutzung ist geschätzt (Bortle-Skala).",
    },
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key
