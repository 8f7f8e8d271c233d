"""Tests for chart rendering (real Pillow output)."""

import io

from PIL import Image

from research_agent.artifacts.charts import (
    CHART_HEIGHT,
    CHART_WIDTH,
    HYPE_STAGE_MARKERS,
    MARKER_COLOR,
    render_hype_cycle_chart,
    render_vendor_landscape_chart,
)
from research_agent.artifacts.hype_cycle import DEFAULT_STAGE, HypeCycleStage

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _open(payload: bytes) -> Image.Image:
    return Image.open(io.BytesIO(payload)).convert("RGB")


def _hex_to_rgb(color: str) -> tuple[int, int, int]:
    color = color.lstrip("#")
    return tuple(int(color[i:i + 2], 16) for i in (0, 2, 4))


def test_hype_cycle_chart_is_png_of_fixed_size():
    payload = render_hype_cycle_chart("Serverless Computing", HypeCycleStage.SLOPE_OF_ENLIGHTENMENT)
    assert payload.startswith(PNG_SIGNATURE)
    assert _open(payload).size == (CHART_WIDTH, CHART_HEIGHT)


def test_hype_cycle_marker_is_placed_at_stage():
    stage = HypeCycleStage.PEAK_OF_INFLATED_EXPECTATIONS
    image = _open(render_hype_cycle_chart("Edge AI", stage))
    assert image.getpixel(HYPE_STAGE_MARKERS[stage]) == _hex_to_rgb(MARKER_COLOR)


def test_hype_cycle_without_stage_uses_default_position():
    image = _open(render_hype_cycle_chart("Edge AI", None))
    assert image.getpixel(HYPE_STAGE_MARKERS[DEFAULT_STAGE]) == _hex_to_rgb(MARKER_COLOR)


def test_vendor_landscape_chart_is_png_of_fixed_size():
    payload = render_vendor_landscape_chart("Serverless Computing")
    assert payload.startswith(PNG_SIGNATURE)
    assert _open(payload).size == (CHART_WIDTH, CHART_HEIGHT)
