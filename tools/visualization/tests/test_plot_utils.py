import base64
from datetime import date

import numpy as np

from tools.visualization.plot_utils import BASE_DEMAND, mock_forecast_data, plot_forecast_chart


def test_mock_forecast_data_has_seven_numeric_points():
    points = mock_forecast_data(start=date(2024, 1, 30), rng=np.random.default_rng(7))
    assert len(points) == 7
    assert [p.date for p in points[:3]] == ["Jan 30", "Jan 31", "Feb 1"]
    for p in points:
        assert isinstance(p.predicted, int) and isinstance(p.actual, int)
        # base swing is +-200, noise at most +-75
        assert abs(p.predicted - BASE_DEMAND) <= 260
        assert abs(p.actual - BASE_DEMAND) <= 280


def test_mock_forecast_data_is_reproducible_with_seeded_rng():
    a = mock_forecast_data(start=date(2024, 5, 1), rng=np.random.default_rng(1))
    b = mock_forecast_data(start=date(2024, 5, 1), rng=np.random.default_rng(1))
    assert a == b


def test_plot_forecast_chart_returns_png():
    points = mock_forecast_data(rng=np.random.default_rng(3))
    png = base64.b64decode(plot_forecast_chart(points))
    assert png[:8] == b"\x89PNG\r\n\x1a\n"
