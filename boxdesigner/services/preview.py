"""Box preview rendering.

The isometric SVG renderer needs nothing beyond the standard library and is
always available. ``PreviewRenderer`` probes once for an enhanced (3D)
renderer, caches the answer for the life of the process and otherwise
renders SVG.
"""

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional

from boxdesigner.services.catalog import LIDDED_STYLES

logger = logging.getLogger(__name__)

_COS30 = math.cos(math.radians(30))
VIEW_WIDTH = 420
VIEW_HEIGHT = 300
_PAD = 10


@dataclass(frozen=True)
class RenderedPreview:
    content: str
    media_type: str
    filename: str
    renderer: str = "svg"


def _iso(x: float, y: float, z: float) -> tuple[float, float]:
    X = (x - z) * _COS30
    Y = y + (x + z) * 0.5
    return X, -Y


def render_iso_svg(length: Decimal, width: Decimal, height: Decimal, style_id: str = "ttm") -> str:
    """Isometric drawing of an L×W×H box as an SVG document."""
    L, W, H = float(length), float(width), float(height)
    corners = {
        "a": (0, 0, 0), "b": (L, 0, 0), "c": (L, H, 0), "d": (0, H, 0),
        "e": (0, 0, W), "f": (L, 0, W), "g": (L, H, W), "h": (0, H, W),
    }
    pts = {k: _iso(*v) for k, v in corners.items()}
    xs = [p[0] for p in pts.values()]
    ys = [p[1] for p in pts.values()]
    min_x, max_x, min_y, max_y = min(xs), max(xs), min(ys), max(ys)

    scale = min(
        (VIEW_WIDTH - 2 * _PAD) / max(1e-6, max_x - min_x),
        (VIEW_HEIGHT - 2 * _PAD) / max(1e-6, max_y - min_y),
    )
    tx = -min_x * scale + _PAD
    ty = -min_y * scale + _PAD

    def P(k: str) -> str:
        x, y = pts[k]
        return f"{x * scale + tx:.2f},{y * scale + ty:.2f}"

    def seq(keys: str) -> str:
        return " ".join(P(k) for k in keys)

    top, side, front = seq("dcgh"), seq("adhe"), seq("abcd")
    lid = ""
    if style_id in LIDDED_STYLES:
        lid = f'    <polygon points="{top}" fill="rgba(137,120,217,0.12)" stroke="none" />\n'

    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {VIEW_WIDTH} {VIEW_HEIGHT}" '
        f'width="100%" height="100%" role="img" aria-label="Isometric box preview">\n'
        f'  <defs><filter id="shadow" x="-20%" y="-20%" width="140%" height="140%">'
        f'<feDropShadow dx="0" dy="2" stdDeviation="2" flood-opacity="0.15" /></filter></defs>\n'
        f'  <g filter="url(#shadow)">\n'
        f'    <polygon points="{side}" fill="#DCD7F2" stroke="#A8A3C8" stroke-width="1" />\n'
        f'    <polygon points="{front}" fill="#EEEAFB" stroke="#B7B2D3" stroke-width="1" />\n'
        f'    <polygon points="{top}" fill="#E9E7F7" stroke="#B7B2D3" stroke-width="1" />\n'
        f'{lid}'
        f'  </g>\n'
        f'  <polyline points="{seq("abcda")}" fill="none" stroke="#8E88B5" stroke-width="1.2" />\n'
        f'  <polyline points="{seq("aehd")}" fill="none" stroke="#8E88B5" stroke-width="1.2" />\n'
        f'  <polyline points="{seq("bfgc")}" fill="none" stroke="#8E88B5" stroke-width="1.2" />\n'
        f'</svg>\n'
    )


class PreviewRenderer:
    """Probe once per process for the enhanced renderer; render SVG."""

    def __init__(self, probe: Optional[Callable[[], bool]] = None):
        self._probe = probe or (lambda: False)
        self._enhanced: Optional[bool] = None

    @property
    def enhanced_available(self) -> bool:
        if self._enhanced is None:
            try:
                self._enhanced = bool(self._probe())
            except Exception as e:
                logger.warning(f"Enhanced preview probe failed, using SVG: {e}")
                self._enhanced = False
        return self._enhanced

    def render(self, length: Decimal, width: Decimal, height: Decimal, style_id: str = "ttm") -> RenderedPreview:
        # The enhanced renderer lives client-side; the server always draws SVG
        svg = '<?xml version="1.0" encoding="UTF-8"?>\n' + render_iso_svg(length, width, height, style_id)
        return RenderedPreview(
            content=svg, media_type="image/svg+xml", filename="box-preview.svg", renderer="svg"
        )


preview_renderer = PreviewRenderer()
