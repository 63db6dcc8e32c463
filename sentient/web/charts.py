"""
Chart Renderers - Server-side SVG/HTML for the dashboard
========================================================

No JS charting library: the trend line is inline SVG and the word cloud
is a flex-wrapped list of sized spans.
"""

from html import escape
from typing import Sequence

from ..domain import SentimentDataPoint, SentimentType, WordCloudItem

# Trend chart geometry (SVG user units)
CHART_WIDTH = 560
CHART_HEIGHT = 256
PAD_LEFT = 40
PAD_RIGHT = 20
PAD_TOP = 12
PAD_BOTTOM = 36

Y_TICKS = (1.0, 0.5, 0.0, -0.5, -1.0)

WORD_MIN_REM = 0.8
WORD_MAX_REM = 2.0

WORD_CLASSES = {
    SentimentType.POSITIVE: "word positive",
    SentimentType.NEGATIVE: "word negative",
    SentimentType.NEUTRAL: "word neutral",
}


def _x(position: int, count: int) -> float:
    span = CHART_WIDTH - PAD_LEFT - PAD_RIGHT
    if count <= 1:
        return PAD_LEFT + span / 2
    return PAD_LEFT + span * position / (count - 1)


def _y(score: float) -> float:
    # Fixed [-1, 1] domain; out-of-range points would already have been rejected
    span = CHART_HEIGHT - PAD_TOP - PAD_BOTTOM
    return PAD_TOP + span * (1 - (score + 1) / 2)


def render_trend_chart(points: Sequence[SentimentDataPoint]) -> str:
    """Render the sentiment trend as an inline SVG line chart."""
    if not points:
        return '<div class="empty-state">No trend data returned.</div>'

    count = len(points)
    grid = []
    for tick in Y_TICKS:
        y = _y(tick)
        grid.append(
            f'<line x1="{PAD_LEFT}" y1="{y:.1f}" x2="{CHART_WIDTH - PAD_RIGHT}" y2="{y:.1f}" class="grid"/>'
            f'<text x="{PAD_LEFT - 8}" y="{y + 4:.1f}" class="axis" text-anchor="end">{tick:g}</text>'
        )

    coords = [(_x(i, count), _y(p.sentiment_score)) for i, p in enumerate(points)]
    polyline = " ".join(f"{x:.1f},{y:.1f}" for x, y in coords)

    dots = []
    labels = []
    for (x, y), point in zip(coords, points):
        dots.append(
            f'<circle cx="{x:.1f}" cy="{y:.1f}" r="4" class="dot">'
            f"<title>{escape(point.label)}: {point.sentiment_score:g}</title></circle>"
        )
        labels.append(
            f'<text x="{x:.1f}" y="{CHART_HEIGHT - PAD_BOTTOM + 18}" class="axis" '
            f'text-anchor="middle">{escape(point.label)}</text>'
        )

    return (
        f'<svg class="trend-chart" viewBox="0 0 {CHART_WIDTH} {CHART_HEIGHT}" '
        f'preserveAspectRatio="none" role="img" aria-label="Sentiment Score">'
        f'{"".join(grid)}'
        f'<polyline points="{polyline}" class="line"/>'
        f'{"".join(dots)}{"".join(labels)}'
        f"</svg>"
    )


def word_size(value: int, min_value: int, max_value: int) -> float:
    """Font size in rem: linear between WORD_MIN_REM and WORD_MAX_REM."""
    if max_value == min_value:
        return 1.0
    ratio = (value - min_value) / (max_value - min_value)
    return WORD_MIN_REM + ratio * (WORD_MAX_REM - WORD_MIN_REM)


def render_word_cloud(items: Sequence[WordCloudItem]) -> str:
    """Render keywords as pills sized by frequency and coloured by sentiment."""
    if not items:
        return '<div class="empty-state">No keywords returned.</div>'

    values = [item.value for item in items]
    low, high = min(values), max(values)

    spans = "".join(
        f'<span class="{WORD_CLASSES[item.sentiment]}" '
        f'style="font-size: {word_size(item.value, low, high):.2f}rem" '
        f'title="{item.value} occurrences">{escape(item.text)}</span>'
        for item in items
    )
    return f'<div class="word-cloud">{spans}</div>'
