# agent/schemas.py
"""
Request/response shapes for the three generative operations.

Attribute names are snake_case; the wire names (what the UI sends and what
the model is asked to reply with) are the camelCase aliases. Both are
accepted on input.
"""
from typing import Annotated, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SUPPORTED_MODELS = [
    "Linear Regression",
    "ARIMA",
    "Random Forest",
    "XGBoost",
    "LightGBM",
    "LSTM",
    "GRU",
    "TCN",
    "CNN+LSTM",
]

SupportedModel = Literal[
    "Linear Regression",
    "ARIMA",
    "Random Forest",
    "XGBoost",
    "LightGBM",
    "LSTM",
    "GRU",
    "TCN",
    "CNN+LSTM",
]


class _Shape(BaseModel):
    # "model_" prefixed fields are part of the wire format
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class _Input(_Shape):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=(), strict=True)


# ---------- Suggestion ----------

class SuggestExternalDataSourcesInput(_Input):
    city: str = Field(description="The city for which electricity demand is being forecasted.")
    historical_data_description: str = Field(
        alias="historicalDataDescription",
        description="A description of the historical electricity demand data already available, "
                    "including its time range and any known issues.",
    )
    forecast_accuracy_data: Optional[str] = Field(
        default=None,
        alias="forecastAccuracyData",
        description="Report on forecast accuracy including an overview of what data has been tried, "
                    "and any improvements to forecast accuracy realized.",
    )


class SuggestExternalDataSourcesOutput(_Shape):
    suggested_data_sources: str = Field(
        alias="suggestedDataSources",
        description="A list of suggested external data sources that could improve the accuracy of "
                    "electricity demand forecasts, including a description of the data and how it could be used.",
    )
    report: str = Field(
        description="A report discussing the usefulness of data that has been tried, and suggesting "
                    "which sources appear promising, and which were unhelpful.",
    )


# ---------- Pseudo-training ----------

class TrainAndEvaluateModelsInput(_Input):
    historical_data: str = Field(
        alias="historicalData",
        description="Historical electricity demand data, along with relevant external variables "
                    "(temperature, humidity, holidays, etc.) in CSV format.",
    )
    models_to_train: List[SupportedModel] = Field(
        alias="modelsToTrain",
        description="List of machine learning models to train and evaluate.",
    )


MetricValue = Annotated[float, Field(allow_inf_nan=False)]


class ModelEvaluation(_Shape):
    model_name: str = Field(alias="modelName")
    evaluation_metrics: Dict[str, MetricValue] = Field(
        alias="evaluationMetrics",
        description="Evaluation metrics like MAE, RMSE, etc.",
    )
    comments: Optional[str] = None

    @field_validator("evaluation_metrics", mode="before")
    @classmethod
    def _no_bool_metrics(cls, value):
        # lax float parsing would read true/false as 1.0/0.0
        if isinstance(value, dict):
            bad = [k for k, v in value.items() if isinstance(v, bool)]
            if bad:
                raise ValueError(f"metric values must be numbers: {', '.join(map(str, bad))}")
        return value

    @field_validator("comments", mode="before")
    @classmethod
    def _comments_not_null(cls, value):
        # comments may be omitted, but an explicit null is not a string
        if value is None:
            raise ValueError("comments must be a string when present")
        return value


class ModelEvaluationResults(_Shape):
    results: List[ModelEvaluation]


# ---------- Forecast ----------

class GenerateDemandForecastsInput(_Input):
    model_type: str = Field(
        alias="modelType",
        description="The type of machine learning model to use for forecasting "
                    "(e.g., Linear Regression, Random Forest, LSTM).",
    )
    historical_data_summary: str = Field(
        alias="historicalDataSummary",
        description="A summary of the historical electricity demand data and external variables "
                    "used for training the model.",
    )
    external_factors: str = Field(
        alias="externalFactors",
        description="Description of external factors that will be used to improve demand forecasts.",
    )
    forecast_horizon: str = Field(
        alias="forecastHorizon",
        description="The forecast horizon (e.g., hourly, daily) for generating electricity demand forecasts.",
    )


class GenerateDemandForecastsOutput(_Shape):
    forecast: str = Field(description="The generated electricity demand forecast.")
    model_explanation: str = Field(
        alias="modelExplanation",
        description="Explanation of which external factors influenced the forecast.",
    )


def output_schema(model_cls) -> dict:
    """JSON schema (wire names) handed to the generative service as the reply shape."""
    return model_cls.model_json_schema(by_alias=True)
