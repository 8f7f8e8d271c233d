"""Chart rendering for research artifacts (Pillow).

Two fixed-layout 800x600 PNG charts:
- Hype cycle: five-stage curve with one marker for the researched topic
- Vendor landscape: four-quadrant map with illustrative vendor placements

Vendor placements are NOT derived from the vendor analysis text. They are a
fixed, labelled illustration of the quadrant model; the analysis itself
carries the actual vendor assessment.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from research_agent.artifacts.hype_cycle import DEFAULT_STAGE, HypeCycleStage

logger = logging.getLogger(__name__)

CHART_WIDTH = 800
CHART_HEIGHT = 600

BACKGROUND = "#ffffff"
CURVE_COLOR = "#667eea"
LABEL_COLOR = "#333333"
MARKER_COLOR = "#e74c3c"
GRID_COLOR = "#cbd5e1"
MUTED_COLOR = "#64748b"


def _font(size: int) -> ImageFont.ImageFont:
    return ImageFont.load_default(size=size)


def _to_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def _centered_text(draw: ImageDraw.ImageDraw, y: float, text: str, font, fill: str) -> None:
    width = draw.textlength(text, font=font)
    draw.text(((CHART_WIDTH - width) / 2, y), text, font=font, fill=fill)


# --- Hype cycle ---

_H = CHART_HEIGHT

# Curve vertices: start, peak, trough, slope, plateau
HYPE_CURVE_POINTS = [
    (100, _H - 100),
    (200, _H - 400),
    (400, _H - 150),
    (600, _H - 300),
    (700, _H - 280),
]

# (x, y) of each stage's label
HYPE_STAGE_LABELS = {
    HypeCycleStage.INNOVATION_TRIGGER: (50, _H - 50),
    HypeCycleStage.PEAK_OF_INFLATED_EXPECTATIONS: (150, _H - 450),
    HypeCycleStage.TROUGH_OF_DISILLUSIONMENT: (350, _H - 100),
    HypeCycleStage.SLOPE_OF_ENLIGHTENMENT: (550, _H - 250),
    HypeCycleStage.PLATEAU_OF_PRODUCTIVITY: (650, _H - 230),
}

# Where the marker sits on the curve for each stage
HYPE_STAGE_MARKERS = {
    HypeCycleStage.INNOVATION_TRIGGER: (150, _H - 250),
    HypeCycleStage.PEAK_OF_INFLATED_EXPECTATIONS: (200, _H - 400),
    HypeCycleStage.TROUGH_OF_DISILLUSIONMENT: (400, _H - 150),
    HypeCycleStage.SLOPE_OF_ENLIGHTENMENT: (500, _H - 225),
    HypeCycleStage.PLATEAU_OF_PRODUCTIVITY: (700, _H - 280),
}

MARKER_RADIUS = 8


def render_hype_cycle_chart(topic: str, stage: Optional[HypeCycleStage]) -> bytes:
    """Render the hype cycle with the topic placed at `stage`.

    A None stage places the marker at DEFAULT_STAGE and marks it estimated.
    """
    estimated = stage is None
    effective_stage = stage or DEFAULT_STAGE

    image = Image.new("RGB", (CHART_WIDTH, CHART_HEIGHT), BACKGROUND)
    draw = ImageDraw.Draw(image)

    _centered_text(draw, 20, f"Hype Cycle: {topic}", _font(20), LABEL_COLOR)

    draw.line(HYPE_CURVE_POINTS, fill=CURVE_COLOR, width=3, joint="curve")

    label_font = _font(14)
    for label_stage, (x, y) in HYPE_STAGE_LABELS.items():
        draw.text((x, y), label_stage.value, font=label_font, fill=LABEL_COLOR)

    mx, my = HYPE_STAGE_MARKERS[effective_stage]
    draw.ellipse(
        (mx - MARKER_RADIUS, my - MARKER_RADIUS, mx + MARKER_RADIUS, my + MARKER_RADIUS),
        fill=MARKER_COLOR,
    )
    marker_label = f"{topic} (estimated)" if estimated else topic
    draw.text((mx + 20, my - 10), marker_label, font=_font(16), fill=MARKER_COLOR)

    logger.info(
        f"Rendered hype cycle chart for '{topic}': stage={effective_stage.value}"
        + (" (default)" if estimated else "")
    )
    return _to_png(image)


# --- Vendor landscape ---

@dataclass(frozen=True)
class VendorPlacement:
    name: str
    vision: float  # 0..1, x axis
    execution: float  # 0..1, y axis


ILLUSTRATIVE_VENDORS = (
    VendorPlacement("Established Leader", 0.78, 0.82),
    VendorPlacement("Platform Challenger", 0.30, 0.70),
    VendorPlacement("Emerging Visionary", 0.72, 0.32),
    VendorPlacement("Niche Specialist", 0.22, 0.24),
)

QUADRANT_LABELS = (
    ("Challengers", 0.25, 0.95),
    ("Leaders", 0.75, 0.95),
    ("Niche Players", 0.25, 0.05),
    ("Visionaries", 0.75, 0.05),
)

PLOT_LEFT = 100
PLOT_RIGHT = 740
PLOT_TOP = 80
PLOT_BOTTOM = 520


def _plot_xy(vision: float, execution: float) -> tuple[float, float]:
    x = PLOT_LEFT + vision * (PLOT_RIGHT - PLOT_LEFT)
    y = PLOT_BOTTOM - execution * (PLOT_BOTTOM - PLOT_TOP)
    return x, y


def render_vendor_landscape_chart(
    topic: str,
    vendors: tuple[VendorPlacement, ...] = ILLUSTRATIVE_VENDORS,
) -> bytes:
    """Render the four-quadrant vendor landscape for `topic`."""
    image = Image.new("RGB", (CHART_WIDTH, CHART_HEIGHT), BACKGROUND)
    draw = ImageDraw.Draw(image)

    _centered_text(draw, 20, f"Vendor Landscape: {topic}", _font(20), LABEL_COLOR)

    draw.rectangle((PLOT_LEFT, PLOT_TOP, PLOT_RIGHT, PLOT_BOTTOM), outline=LABEL_COLOR, width=2)
    mid_x = (PLOT_LEFT + PLOT_RIGHT) / 2
    mid_y = (PLOT_TOP + PLOT_BOTTOM) / 2
    draw.line((mid_x, PLOT_TOP, mid_x, PLOT_BOTTOM), fill=GRID_COLOR, width=1)
    draw.line((PLOT_LEFT, mid_y, PLOT_RIGHT, mid_y), fill=GRID_COLOR, width=1)

    quadrant_font = _font(14)
    for label, qx, qy in QUADRANT_LABELS:
        x, y = _plot_xy(qx, qy)
        width = draw.textlength(label, font=quadrant_font)
        draw.text((x - width / 2, y - 8), label, font=quadrant_font, fill=MUTED_COLOR)

    vendor_font = _font(13)
    for vendor in vendors:
        x, y = _plot_xy(vendor.vision, vendor.execution)
        draw.ellipse((x - 7, y - 7, x + 7, y + 7), fill=CURVE_COLOR)
        draw.text((x + 12, y - 8), vendor.name, font=vendor_font, fill=LABEL_COLOR)

    axis_font = _font(14)
    _centered_text(draw, PLOT_BOTTOM + 15, "Completeness of Vision", axis_font, LABEL_COLOR)
    draw.text((10, PLOT_TOP - 30), "Ability to Execute", font=axis_font, fill=LABEL_COLOR)
    _centered_text(
        draw,
        CHART_HEIGHT - 35,
        "Illustrative placements. See the vendor analysis for the assessment.",
        _font(12),
        MUTED_COLOR,
    )

    logger.info(f"Rendered vendor landscape chart for '{topic}': {len(vendors)} vendors")
    return _to_png(image)
