# common/report_canvas.py
"""
Render target for the match report snapshot.

`ReportCanvas` lays the report out as a matplotlib figure (header, score,
result badge, scorers, attendees and a photo grid) and exposes its photos as
`ImageRef` slots so `common.snapshot.SnapshotExporter` can swap their sources.

Only inlined `data:` sources are readable pixels. A slot still pointing at a
remote URL counts as tainted and is drawn as an empty placeholder tile, so
the export degrades to a missing picture instead of failing.
"""

from __future__ import annotations
import logging
import math
from io import BytesIO
from typing import Dict, List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import FancyBboxPatch, Rectangle
from PIL import Image

from common.constants import TEAM_NAME
from common.snapshot import ImageRef, decode_data_uri
from models.match_model import MatchRecord

logger = logging.getLogger(__name__)

BASE_DPI     = 100
PHOTO_COLS   = 3
OUTCOME_COLORS = {"win": "#059669", "draw": "#71717a", "loss": "#dc2626"}
OUTCOME_LABELS = {"win": "VICTORY", "draw": "DRAW", "loss": "DEFEAT"}

# Vertical layout knobs (figure fractions of the header block)
HEADER_POS = {
    "team_y":    0.95,
    "meta_y":    0.90,
    "score_y":   0.80,
    "badge_y":   0.71,
    "scorers_y": 0.64,
    "players_y": 0.60,
}


def _decode(src: str) -> Optional[np.ndarray]:
    if not src or not src.startswith("data:"):
        return None
    try:
        _, data = decode_data_uri(src)
        with Image.open(BytesIO(data)) as im:
            return np.asarray(im.convert("RGB"))
    except (OSError, ValueError, Image.DecompressionBombError):
        logger.warning("could not decode inlined image", exc_info=True)
        return None


class ReportCanvas:
    def __init__(self, match: MatchRecord, team_name: str = TEAM_NAME):
        self.match = match
        self.team_name = team_name
        self._images = [ImageRef(u, alt=f"photo {i + 1}") for i, u in enumerate(match.image_urls)]
        self._pixels: Dict[int, Optional[np.ndarray]] = {}

    def images(self) -> List[ImageRef]:
        return list(self._images)

    def repaint(self) -> None:
        """Decode the current sources; rasterize only sees what was decoded here."""
        self._pixels = {i: _decode(ref.src) for i, ref in enumerate(self._images)}

    # ----- drawing -----
    def _draw_header(self, fig: plt.Figure, top: float, height: float) -> None:
        m = self.match
        y = lambda frac: top - (1.0 - frac) * height
        color = OUTCOME_COLORS[m.outcome]

        fig.text(0.5, y(HEADER_POS["team_y"]), f"{self.team_name}  vs  {m.opponent}",
                 ha="center", va="center", fontsize=15, fontweight="bold")
        fig.text(0.5, y(HEADER_POS["meta_y"]), f"{m.date}  •  {m.stadium}",
                 ha="center", va="center", fontsize=10, color="#52525b")
        fig.text(0.5, y(HEADER_POS["score_y"]), f"{m.our_score} : {m.opponent_score}",
                 ha="center", va="center", fontsize=40, fontweight="bold", color="#18181b")
        fig.text(0.5, y(HEADER_POS["badge_y"]), OUTCOME_LABELS[m.outcome],
                 ha="center", va="center", fontsize=11, fontweight="bold", color="white",
                 bbox=dict(boxstyle="round,pad=0.4", facecolor=color, edgecolor=color))

        scorers = ", ".join(f"{s.name} ({s.goals})" if s.goals > 1 else s.name for s in m.scorers)
        fig.text(0.5, y(HEADER_POS["scorers_y"]), f"Scorers: {scorers or '—'}",
                 ha="center", va="center", fontsize=10, wrap=True)
        if m.player_count is not None:
            fig.text(0.5, y(HEADER_POS["players_y"]), f"Players: {m.player_count}",
                     ha="center", va="center", fontsize=9, color="#52525b")

    def _draw_photo(self, ax: plt.Axes, idx: int) -> None:
        px = self._pixels.get(idx)
        ax.set_axis_off()
        if px is None:
            ax.add_patch(Rectangle((0, 0), 1, 1, facecolor="#f4f4f5", edgecolor="#d4d4d8"))
            ax.text(0.5, 0.5, "image unavailable", ha="center", va="center", fontsize=7, color="#a1a1aa")
            ax.set_xlim(0, 1)
            ax.set_ylim(0, 1)
            return
        ax.imshow(px)

    def figure(self, background: str) -> plt.Figure:
        n = len(self._images)
        rows = math.ceil(n / PHOTO_COLS)
        header_in, photo_in = 4.2, 2.0
        height_in = header_in + rows * photo_in + 0.4
        fig = plt.figure(figsize=(7.0, height_in), facecolor=background)

        header_frac = header_in / height_in
        fig.add_artist(FancyBboxPatch((0.02, 1 - header_frac), 0.96, header_frac - 0.01,
                                      boxstyle="round,pad=0.005", transform=fig.transFigure,
                                      facecolor="white", edgecolor="#e4e4e7"))
        self._draw_header(fig, top=1.0, height=header_frac)

        cell_h = photo_in / height_in
        cell_w = 0.96 / PHOTO_COLS
        for i in range(n):
            r, c = divmod(i, PHOTO_COLS)
            bottom = 1 - header_frac - (r + 1) * cell_h
            ax = fig.add_axes([0.02 + c * cell_w + 0.005, bottom + 0.005, cell_w - 0.01, cell_h - 0.01])
            self._draw_photo(ax, i)
        return fig

    def rasterize(self, scale: int, background: str) -> Image.Image:
        fig = self.figure(background)
        try:
            buf = BytesIO()
            fig.savefig(buf, format="png", dpi=BASE_DPI * scale, facecolor=background)
        finally:
            plt.close(fig)
        buf.seek(0)
        with Image.open(buf) as im:
            return im.convert("RGB")
