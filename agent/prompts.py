# agent/prompts.py
"""
Instruction text for the three operations.

Each builder takes an already-validated input model and returns the prompt
sent to the generative service. The reply shape itself travels separately
(see agent.schemas.output_schema).
"""
from agent.schemas import (
    GenerateDemandForecastsInput,
    SuggestExternalDataSourcesInput,
    TrainAndEvaluateModelsInput,
)

EXPERT_PREAMBLE = "You are an expert in electricity demand forecasting."

TRAINING_REPLY_EXAMPLE = """{
  "results": [
    {
      "modelName": "Linear Regression",
      "evaluationMetrics": {
        "MAE": 123.45,
        "RMSE": 67.89
      },
      "comments": "Linear regression performed adequately on this dataset."
    },
    {
      "modelName": "Random Forest",
      "evaluationMetrics": {
        "MAE": 98.76,
        "RMSE": 54.32
      },
      "comments": "Random forest showed improved performance compared to linear regression."
    }
  ]
}"""


def build_suggestion_prompt(inp: SuggestExternalDataSourcesInput) -> str:
    lines = [
        f"{EXPERT_PREAMBLE} Your goal is to suggest external data sources that can improve the accuracy "
        "of electricity demand forecasts for a given city, and to create a report discussing the "
        "usefulness of data that has been tried.",
        "",
        f"The city for which electricity demand is being forecasted is: {inp.city}",
        f"Here is a description of the historical electricity demand data already available: "
        f"{inp.historical_data_description}",
    ]
    if inp.forecast_accuracy_data and inp.forecast_accuracy_data.strip():
        lines += [
            "",
            "Here is an overview of what data has been tried, and any improvements to forecast accuracy realized:",
            inp.forecast_accuracy_data.strip(),
        ]
    lines += [
        "",
        "Based on this information, suggest external data sources that could improve the accuracy of "
        "electricity demand forecasts, and create a report discussing the usefulness of data that has "
        "been tried, and suggesting which sources appear promising, and which were unhelpful.",
    ]
    return "\n".join(lines)


def build_training_prompt(inp: TrainAndEvaluateModelsInput) -> str:
    model_lines = "\n".join(f"- {name}" for name in inp.models_to_train)
    return (
        "You are an expert in training and evaluating machine learning models for time series "
        "forecasting, specifically for electricity demand.\n\n"
        "You will receive historical electricity demand data and a list of models to train and evaluate.\n\n"
        "Your task is to train each of the specified models on the historical data, evaluate their "
        "performance, and return the evaluation metrics for each model.\n\n"
        "The historical data is provided as a CSV string:\n\n"
        f"{inp.historical_data}\n\n"
        "The models to train and evaluate are:\n\n"
        f"{model_lines}\n\n"
        "Present the results in JSON format. For each model, include the model name and a dictionary of "
        "evaluation metrics (e.g., MAE, RMSE). Add any helpful comments regarding the evaluation and "
        "training process.\n\n"
        "Ensure that the returned JSON is valid and can be parsed without errors. "
        "The keys for evaluationMetrics MUST be quoted strings.\n\n"
        "Example of the output format:\n\n"
        f"{TRAINING_REPLY_EXAMPLE}\n"
    )


def build_forecast_prompt(inp: GenerateDemandForecastsInput) -> str:
    return (
        f"{EXPERT_PREAMBLE} Based on the provided information about the trained machine learning model, "
        "historical data, and desired forecast horizon, generate an electricity demand forecast.\n\n"
        f"Model Type: {inp.model_type}\n"
        f"Historical Data Summary: {inp.historical_data_summary}\n"
        f"External Factors: {inp.external_factors}\n"
        f"Forecast Horizon: {inp.forecast_horizon}\n\n"
        "Provide a concise forecast and explain the influential external factors."
    )
