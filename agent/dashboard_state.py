# agent/dashboard_state.py
"""
Single state container for the dashboard page.

The UI owns one DashboardState (in st.session_state) and changes it only
through the transitions below:

    import_data  -> DataImported   (always allowed, clears everything downstream)
    train        -> ModelsTrained  (needs imported data and >= 1 model)
    forecast     -> ForecastGenerated (needs training results)

Each transition returns a Notice for the UI to show. Failed calls leave the
state as it was.

Train and forecast are split into begin_* / finish_* halves. begin_* hands
out a sequence token; finish_* applies a result only if its token is still
the latest one for that kind. Importing new data invalidates every
outstanding token, so a late reply for old data is dropped.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from agent.actions import ActionResult, generate_forecast_action, train_models_action
from agent.schemas import GenerateDemandForecastsOutput, ModelEvaluationResults
from tools.visualization.plot_utils import ChartPoint, mock_forecast_data

logger = logging.getLogger(__name__)

FORECAST_DATA_SUMMARY = "Using previously imported data."
FORECAST_EXTERNAL_FACTORS = "Weather, holidays, and economic indicators."
FORECAST_HORIZON = "Daily for the next 7 days"

KPI_METRICS = ("MAE", "RMSE")
KPI_LIMIT = 4

TRAIN = "train"
FORECAST = "forecast"


class Stage(enum.Enum):
    NO_DATA = "NoData"
    DATA_IMPORTED = "DataImported"
    MODELS_TRAINED = "ModelsTrained"
    FORECAST_GENERATED = "ForecastGenerated"


@dataclass(frozen=True)
class Notice:
    title: str
    description: str
    variant: str = "default"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


def _error(title: str, description: Optional[str]) -> Notice:
    return Notice(title, description or "An unknown error occurred.", "destructive")


@dataclass(frozen=True)
class KPI:
    title: str
    value: str


def format_metric(metrics: Dict[str, float], name: str) -> str:
    value = metrics.get(name)
    return "N/A" if value is None else f"{value:.2f}"


@dataclass
class DashboardState:
    historical_data: str = ""
    training_results: Optional[ModelEvaluationResults] = None
    forecast_output: Optional[GenerateDemandForecastsOutput] = None
    chart_data: List[ChartPoint] = field(default_factory=list)
    is_training: bool = False
    is_forecasting: bool = False
    _latest: Dict[str, int] = field(default_factory=lambda: {TRAIN: 0, FORECAST: 0}, repr=False)

    # ---------- derived ----------
    @property
    def stage(self) -> Stage:
        if self.forecast_output is not None:
            return Stage.FORECAST_GENERATED
        if self.training_results is not None:
            return Stage.MODELS_TRAINED
        if self.historical_data.strip():
            return Stage.DATA_IMPORTED
        return Stage.NO_DATA

    @property
    def can_train(self) -> bool:
        return self.stage is not Stage.NO_DATA

    @property
    def can_forecast(self) -> bool:
        return self.training_results is not None

    @property
    def trained_models(self) -> List[str]:
        if self.training_results is None:
            return []
        return [r.model_name for r in self.training_results.results]

    def kpis(self, limit: int = KPI_LIMIT) -> List[KPI]:
        if self.training_results is None:
            return []
        cards = [
            KPI(f"{r.model_name} {m}", format_metric(r.evaluation_metrics, m))
            for r in self.training_results.results
            for m in KPI_METRICS
        ]
        return cards[:limit]

    def evaluation_rows(self) -> List[Dict[str, str]]:
        if self.training_results is None:
            return []
        return [
            {"Model": r.model_name, **{m: format_metric(r.evaluation_metrics, m) for m in KPI_METRICS}}
            for r in self.training_results.results
        ]

    # ---------- import ----------
    def import_data(self, data: str) -> Notice:
        self.historical_data = data or ""
        self.training_results = None
        self.forecast_output = None
        self.chart_data = []
        self.is_training = False
        self.is_forecasting = False
        for kind in self._latest:
            self._latest[kind] += 1
        if not self.historical_data.strip():
            return _error("No Data", "Paste some CSV data before importing.")
        return Notice("Data Imported", "You can now train your models.")

    # ---------- train ----------
    def _issue(self, kind: str) -> int:
        self._latest[kind] += 1
        return self._latest[kind]

    def _is_current(self, kind: str, token: int) -> bool:
        if token != self._latest[kind]:
            logger.info("Discarding stale %s response (token %d, latest %d)", kind, token, self._latest[kind])
            return False
        return True

    def begin_training(self) -> int:
        self.is_training = True
        return self._issue(TRAIN)

    def finish_training(self, token: int, result: ActionResult) -> Optional[Notice]:
        if not self._is_current(TRAIN, token):
            return None
        self.is_training = False
        if result.success and result.data is not None:
            self.training_results = result.data
            self.forecast_output = None
            self.chart_data = []
            return Notice("Model Training Complete", "Models have been trained and evaluated successfully.")
        return _error("Training Failed", result.error)

    def train(self, models: List[str],
              action: Callable[[dict], ActionResult] = train_models_action) -> Notice:
        if not self.can_train:
            return _error("Error", "Please import historical data first.")
        if not models:
            return _error("Error", "Select at least one model to train.")
        token = self.begin_training()
        result = action({"historicalData": self.historical_data, "modelsToTrain": list(models)})
        return self.finish_training(token, result) or Notice("Training Superseded", "A newer request replaced this one.")

    # ---------- forecast ----------
    def forecast_request(self, model_type: str) -> dict:
        return {
            "modelType": model_type,
            "historicalDataSummary": FORECAST_DATA_SUMMARY,
            "externalFactors": FORECAST_EXTERNAL_FACTORS,
            "forecastHorizon": FORECAST_HORIZON,
        }

    def begin_forecast(self) -> int:
        self.is_forecasting = True
        return self._issue(FORECAST)

    def finish_forecast(self, token: int, result: ActionResult,
                        chart_factory: Callable[[], List[ChartPoint]] = mock_forecast_data) -> Optional[Notice]:
        if not self._is_current(FORECAST, token):
            return None
        self.is_forecasting = False
        if result.success and result.data is not None:
            self.forecast_output = result.data
            self.chart_data = chart_factory()
            return Notice("Forecast Generated", "New demand forecast is ready.")
        return _error("Forecast Failed", result.error)

    def forecast(self, model_type: str,
                 action: Callable[[dict], ActionResult] = generate_forecast_action,
                 chart_factory: Callable[[], List[ChartPoint]] = mock_forecast_data) -> Notice:
        if not self.can_forecast:
            return _error("Error", "Please train a model first.")
        if not model_type:
            return _error("Error", "Select a trained model first.")
        token = self.begin_forecast()
        result = action(self.forecast_request(model_type))
        return (self.finish_forecast(token, result, chart_factory)
                or Notice("Forecast Superseded", "A newer request replaced this one."))
