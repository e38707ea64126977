"""Plotly forecast chart renderer.

Precipitation probability as bars, cloud cover as a filled area, humidity as a
thin line, and the selected observation window as a highlighted marker.
"""

import plotly.graph_objects as go

from astrospots.i18n import t
from astrospots.models import AnalysisResult, WeatherForecast

_BG = "#0b1020"
_GRID = "#1f253d"
_AXIS = "#64748b"
_RAIN_COLOR = "#4f46e5"
_CLOUD_COLOR = "#38bdf8"
_HUMIDITY_COLOR = "#10b981"
_BEST_COLOR = "#facc15"


def render_forecast_chart(
    forecast: WeatherForecast,
    result: AnalysisResult | None = None,
    lang: str = "en",
) -> go.Figure:
    """Render a WeatherForecast as a Plotly composed chart.

    Args:
        forecast: Normalized forecast for one spot.
        result: Optional analysis of the same forecast; its best point is marked.
        lang: Language code for series labels.

    Returns:
        Plotly Figure object.
    """
    times = [p.time for p in forecast.hourly]

    rain_trace = go.Bar(
        x=times,
        y=[p.precipitation_prob for p in forecast.hourly],
        name=t("series_rain", lang),
        marker=dict(color=_RAIN_COLOR),
        opacity=0.6,
    )
    cloud_trace = go.Scatter(
        x=times,
        y=[p.cloud_cover for p in forecast.hourly],
        name=t("series_cloud", lang),
        mode="lines",
        line=dict(color=_CLOUD_COLOR, shape="spline"),
        fill="tozeroy",
        fillcolor="rgba(56, 189, 248, 0.2)",
    )
    humidity_trace = go.Scatter(
        x=times,
        y=[p.humidity for p in forecast.hourly],
        name=t("series_humidity", lang),
        mode="lines",
        line=dict(color=_HUMIDITY_COLOR, width=1, dash="dot"),
    )
    traces = [rain_trace, cloud_trace, humidity_trace]

    if result is not None:
        best = result.best_point
        traces.append(
            go.Scatter(
                x=[best.time],
                y=[best.cloud_cover],
                name=t("series_best", lang),
                mode="markers",
                marker=dict(color=_BEST_COLOR, size=12, symbol="star"),
            )
        )

    fig = go.Figure(data=traces)
    fig.update_layout(
        height=280,
        margin=dict(l=30, r=10, t=10, b=30),
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        font=dict(color=_AXIS, size=10),
        legend=dict(orientation="h", y=-0.25),
        bargap=0.4,
    )
    fig.update_xaxes(showgrid=False, categoryorder="array", categoryarray=times)
    fig.update_yaxes(range=[0, 100], gridcolor=_GRID, title_text="%")
    return fig
