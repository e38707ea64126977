"""AstroSpot Finder: Streamlit app for dark-sky spots and their short-term weather."""

import asyncio
import html
import logging

import streamlit as st
from dotenv import load_dotenv
from streamlit_js_eval import streamlit_js_eval

load_dotenv()

from astrospots.analysis import analyze  # noqa: E402
from astrospots.config import get_settings  # noqa: E402
from astrospots.discovery import DiscoveryError, find_spots  # noqa: E402
from astrospots.i18n import t  # noqa: E402
from astrospots.models import LoadingState, Spot  # noqa: E402
from astrospots.renderers.plotly_chart import render_forecast_chart  # noqa: E402
from astrospots.session import (  # noqa: E402
    WeatherBoard,
    filter_spots,
    is_dark_site,
    maps_url,
    parse_radius,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

settings = get_settings()

# --- Language detection (browser-first via streamlit-js-eval) ---
# On the first run the JS call returns None; the rerun it triggers fills it in.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "de" if _browser_lang.lower().startswith("de") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(
    page_title=t("page_title", _lang),
    page_icon="✦",
    layout="wide",
)

# --- Session state initialization ---
if "spots" not in st.session_state:
    st.session_state.spots = []
if "spot_state" not in st.session_state:
    st.session_state.spot_state = LoadingState.IDLE
if "board" not in st.session_state:
    st.session_state.board = WeatherBoard()
if "search_region" not in st.session_state:
    st.session_state.search_region = settings.default_region
if "search_radius" not in st.session_state:
    st.session_state.search_radius = settings.default_radius_km
if "max_bortle" not in st.session_state:
    st.session_state.max_bortle = 9

st.markdown(
    """
    <style>
    html, body, [data-testid="stAppViewContainer"], [data-testid="stMain"] {
        background-color: #0b1020 !important;
        color: #e2e8f0;
    }
    [data-testid="stHeader"], [data-testid="stToolbar"] { display: none !important; }
    .spot-region {
        display: inline-block; padding: 0.15rem 0.7rem; border-radius: 999px;
        font-size: 0.75rem; background: #1f253d; color: #7ec8e3;
    }
    .bortle-badge {
        float: right; width: 2.5rem; height: 2.5rem; border-radius: 0.5rem;
        display: flex; align-items: center; justify-content: center;
        font-family: monospace; font-weight: 700; font-size: 1.1rem;
    }
    .bortle-good { background: rgba(34,197,94,0.1); color: #4ade80; border: 1px solid rgba(34,197,94,0.3); }
    .bortle-fair { background: rgba(234,179,8,0.1); color: #facc15; border: 1px solid rgba(234,179,8,0.3); }
    .feature-chip {
        display: inline-block; margin: 0 0.3rem 0.3rem 0; padding: 0.1rem 0.5rem;
        border-radius: 0.4rem; font-size: 0.75rem; border: 1px solid #1f253d; color: #cbd5e1;
    }
    .verdict { font-size: 0.75rem; padding: 0.15rem 0.6rem; border-radius: 999px; }
    .verdict-good { background: rgba(20,83,45,0.3); border: 1px solid #22c55e; color: #4ade80; }
    .verdict-poor { background: rgba(127,29,29,0.3); border: 1px solid #ef4444; color: #f87171; }
    </style>
    """,
    unsafe_allow_html=True,
)


def _run_search(region: str, radius: int) -> None:
    """Replace the current result set with a fresh discovery search."""
    st.session_state.search_region = region
    st.session_state.search_radius = radius
    st.session_state.spots = []
    st.session_state.board.clear()
    st.session_state.spot_state = LoadingState.LOADING

    with st.spinner(t("loading_spots", _lang)):
        try:
            st.session_state.spots = asyncio.run(find_spots(region, radius))
            st.session_state.spot_state = LoadingState.SUCCESS
        except (DiscoveryError, ValueError):
            logger.exception("spot search failed for %r", region)
            st.session_state.spot_state = LoadingState.ERROR


def _render_weather(spot: Spot) -> None:
    slot = st.session_state.board.state(spot.id)
    if slot.state is LoadingState.ERROR:
        st.caption(t("error_weather", _lang))
    if slot.forecast is None or not slot.forecast.hourly:
        return

    result = analyze(slot.forecast)
    best = result.best_point
    verdict_key, verdict_cls = (
        ("verdict_good", "verdict-good") if result.is_good_conditions else ("verdict_poor", "verdict-poor")
    )
    st.markdown(
        f"**{t('chart_title', _lang)}** &nbsp; "
        f"<span class='verdict {verdict_cls}'>{t(verdict_key, _lang)}</span>",
        unsafe_allow_html=True,
    )
    st.plotly_chart(
        render_forecast_chart(slot.forecast, result, lang=_lang),
        use_container_width=True,
        config={"displayModeBar": False},
        key=f"chart_{spot.id}",
    )
    c1, c2, c3, c4 = st.columns(4)
    c1.metric(t("stat_temp", _lang), f"{best.temperature:.1f}°C")
    c2.metric(t("stat_cloud", _lang), f"{best.cloud_cover}%")
    c3.metric(t("stat_humid", _lang), f"{best.humidity}%")
    c4.metric(t("stat_rain", _lang), f"{best.precipitation_prob}%")
    st.caption(t("best_window", _lang).format(time=best.time))
    if result.is_humid:
        st.caption(t("dew_warning", _lang))


def _render_spot(spot: Spot) -> None:
    badge_cls = "bortle-good" if is_dark_site(spot) else "bortle-fair"
    features = "".join(
        f"<span class='feature-chip'>★ {html.escape(f)}</span>" for f in spot.best_features[:3]
    )
    with st.container(border=True):
        st.markdown(
            f"<div class='bortle-badge {badge_cls}'>{spot.bortle_class}</div>"
            f"<span class='spot-region'>{html.escape(spot.region)}</span>"
            f"<h4>{html.escape(spot.name)}</h4>"
            f"<p style='color:#94a3b8;font-size:0.9rem'>{html.escape(spot.description)}</p>"
            f"<div>{features}</div>",
            unsafe_allow_html=True,
        )
        link_col, button_col = st.columns(2)
        with link_col:
            st.link_button(f"📍 {t('map_link', _lang)}", maps_url(spot.coordinates))
        slot = st.session_state.board.state(spot.id)
        if slot.forecast is None:
            with button_col:
                if st.button(
                    t("btn_analyze", _lang),
                    key=f"analyze_{spot.id}",
                    disabled=slot.state is LoadingState.LOADING,
                ):
                    with st.spinner(t("loading_weather", _lang)):
                        asyncio.run(st.session_state.board.load(spot))
                    st.rerun()
        _render_weather(spot)


# --- Search bar ---
col1, col2, col3 = st.columns([4, 1.5, 1.5])
with col1:
    region_input = st.text_input(t("label_region", _lang), value=st.session_state.search_region)
with col2:
    radius_input = st.text_input(t("label_radius", _lang), value=str(st.session_state.search_radius))
with col3:
    st.markdown("<div style='height:1.9rem'></div>", unsafe_allow_html=True)
    submitted = st.button(t("btn_search", _lang), key="search_btn", use_container_width=True)

# --- Initial load / form submission ---
if st.session_state.spot_state is LoadingState.IDLE:
    _run_search(settings.default_region, settings.default_radius_km)
elif submitted and region_input.strip():
    _run_search(region_input.strip(), parse_radius(radius_input, settings.fallback_radius_km))

# --- Results ---
if st.session_state.spot_state is LoadingState.ERROR:
    st.error(f"**{t('error_spots_title', _lang)}**: {t('error_spots', _lang)}")

if st.session_state.spot_state is LoadingState.SUCCESS:
    spots: list[Spot] = st.session_state.spots
    head_col, filter_col = st.columns([3, 2])
    with filter_col:
        max_bortle = st.slider(t("label_max_bortle", _lang), 1, 9, key="max_bortle")
    visible = filter_spots(spots, max_bortle)
    with head_col:
        st.subheader(
            "✦ " + t("results_heading", _lang).format(region=st.session_state.search_region)
        )
        st.caption(
            t("results_summary", _lang).format(
                radius=st.session_state.search_radius, found=len(spots), shown=len(visible)
            )
        )

    grid = st.columns(3)
    for i, spot in enumerate(visible):
        with grid[i % 3]:
            _render_spot(spot)

    if not spots:
        st.info(t("no_spots", _lang))
    elif not visible:
        st.info(t("no_spots_filtered", _lang).format(max_bortle=max_bortle))

        def _show_all() -> None:
            st.session_state.max_bortle = 9

        st.button(t("btn_show_all", _lang), key="show_all_btn", on_click=_show_all)

st.caption(t("footer", _lang))
