"""
plot_utils.py
-------------
Chart data and small (<200 KB) base64 PNG plots for the dashboard:
- mock predicted/actual demand points for the forecast card
- predicted vs actual line chart

The chart points are generated locally and are not derived from the
forecast text. Single-axis matplotlib only.
"""
from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import List, Optional
import io, base64, math

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from PIL import Image

BASE_DEMAND = 2800
SEASONAL_SWING = 200
PREDICTED_NOISE = 100
ACTUAL_NOISE = 150


@dataclass(frozen=True)
class ChartPoint:
    date: str
    predicted: int
    actual: int

    def to_dict(self):
        return asdict(self)


def mock_forecast_data(start: Optional[date] = None, days: int = 7, rng=None) -> List[ChartPoint]:
    start = start or date.today()
    rng = rng or np.random.default_rng()
    points = []
    for i in range(days):
        d = start + timedelta(days=i)
        base = BASE_DEMAND + math.sin(i / 2) * SEASONAL_SWING
        points.append(ChartPoint(
            date=f"{d:%b} {d.day}",
            predicted=int(round(base + (rng.random() - 0.5) * PREDICTED_NOISE)),
            actual=int(round(base + (rng.random() - 0.5) * ACTUAL_NOISE)),
        ))
    return points


def _png_b64_from_fig(fig, max_kb: int = 200) -> str:
    buf = io.BytesIO()
    fig.tight_layout()
    fig.savefig(buf, format="png", dpi=120, bbox_inches="tight")
    plt.close(fig)
    # compress if too big
    data = buf.getvalue()
    if len(data) > max_kb * 1024:
        im = Image.open(io.BytesIO(data)).convert("RGB")
        w, h = im.size
        scale = min(1.0, (max_kb * 1024) / len(data)) ** 0.5  # heuristic
        new = im.resize((max(200, int(w * scale)), max(120, int(h * scale))), Image.BILINEAR)
        out = io.BytesIO()
        new.save(out, format="PNG", optimize=True)
        data = out.getvalue()
    return base64.b64encode(data).decode("ascii")


def plot_forecast_chart(points: List[ChartPoint], unit: str = "MW") -> str:
    labels = [p.date for p in points]
    x = np.arange(len(points))
    predicted = np.array([p.predicted for p in points], dtype=float)
    actual = np.array([p.actual for p in points], dtype=float)

    fig, ax = plt.subplots(figsize=(7, 3.2))
    ax.plot(x, predicted, marker="o", linewidth=2, label="Predicted")
    ax.plot(x, actual, marker="o", linewidth=2, label="Actual")
    ax.grid(True, linestyle="--", alpha=0.4)
    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    if len(points):
        lo = min(predicted.min(), actual.min())
        hi = max(predicted.max(), actual.max())
        ax.set_ylim(lo - 100, hi + 100)
    ax.set_ylabel(unit)
    ax.set_title("Predicted vs. actual demand")
    ax.legend()
    return _png_b64_from_fig(fig)
