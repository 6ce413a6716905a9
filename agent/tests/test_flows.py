import json
from unittest.mock import MagicMock

import pytest

from agent.errors import ExternalCallFailure, InvalidInput, OutputSchemaMismatch
from agent.flows import generate_demand_forecasts, suggest_external_data_sources, train_and_evaluate_models
from agent.schemas import SUPPORTED_MODELS

CSV = "date,demand,temperature,humidity,is_holiday\n2023-01-01,2500,5,80,1\n"

TRAIN_REPLY = {
    "results": [
        {"modelName": "Linear Regression", "evaluationMetrics": {"MAE": 123.45, "RMSE": 67.89},
         "comments": "Adequate."},
        {"modelName": "Random Forest", "evaluationMetrics": {"MAE": 98.76, "RMSE": 54.32}},
    ]
}


def fake_service(reply):
    text = reply if isinstance(reply, str) else json.dumps(reply)
    return MagicMock(return_value=text)


def test_train_returns_one_entry_per_requested_model():
    gen = fake_service(TRAIN_REPLY)
    out = train_and_evaluate_models(
        {"historicalData": CSV, "modelsToTrain": ["Linear Regression", "Random Forest"]}, generate=gen)

    assert [r.model_name for r in out.results] == ["Linear Regression", "Random Forest"]
    assert all(r.evaluation_metrics for r in out.results)
    assert out.results[0].comments == "Adequate."
    assert out.results[1].comments is None


def test_train_prompt_lists_models_and_csv_and_sends_reply_schema():
    gen = fake_service(TRAIN_REPLY)
    train_and_evaluate_models({"historicalData": CSV, "modelsToTrain": ["ARIMA", "TCN"]}, generate=gen)

    prompt, schema = gen.call_args.args
    assert "- ARIMA\n- TCN" in prompt
    assert CSV.strip() in prompt
    assert "results" in schema["properties"]


@pytest.mark.parametrize("payload", [
    {"modelsToTrain": ["ARIMA"]},
    {"historicalData": CSV},
    {"historicalData": 42, "modelsToTrain": ["ARIMA"]},
    {"historicalData": CSV, "modelsToTrain": ["Prophet"]},
    {"historicalData": CSV, "modelsToTrain": "ARIMA"},
    "not an object",
])
def test_invalid_training_input_never_reaches_the_service(payload):
    gen = fake_service(TRAIN_REPLY)
    with pytest.raises(InvalidInput):
        train_and_evaluate_models(payload, generate=gen)
    gen.assert_not_called()


def test_every_supported_label_is_accepted():
    gen = fake_service({"results": []})
    out = train_and_evaluate_models({"historicalData": CSV, "modelsToTrain": SUPPORTED_MODELS}, generate=gen)
    assert out.results == []
    assert len(SUPPORTED_MODELS) == 9


def test_invalid_input_message_names_the_field():
    with pytest.raises(InvalidInput) as exc:
        suggest_external_data_sources({"historicalDataDescription": "hourly 2022"}, generate=fake_service({}))
    assert "city" in str(exc.value)
    assert exc.value.kind == "INVALID_INPUT"


@pytest.mark.parametrize("reply", [
    {"forecast": "Demand peaks Friday."},
    {"modelExplanation": "Temperature."},
    "I'm sorry, I cannot produce a forecast.",
    "",
])
def test_reply_missing_required_fields_is_a_schema_mismatch(reply):
    with pytest.raises(OutputSchemaMismatch):
        generate_demand_forecasts({
            "modelType": "Linear Regression",
            "historicalDataSummary": "Using previously imported data.",
            "externalFactors": "Weather",
            "forecastHorizon": "Daily for the next 7 days",
        }, generate=fake_service(reply))


def test_non_numeric_metric_is_a_schema_mismatch():
    reply = {"results": [{"modelName": "GRU", "evaluationMetrics": {"MAE": "low"}}]}
    with pytest.raises(OutputSchemaMismatch):
        train_and_evaluate_models({"historicalData": CSV, "modelsToTrain": ["GRU"]},
                                  generate=fake_service(reply))


@pytest.mark.parametrize("reply", [
    '{"results": [{"modelName": "GRU", "evaluationMetrics": {"MAE": true}}]}',
    '{"results": [{"modelName": "GRU", "evaluationMetrics": {"MAE": false, "RMSE": 1.5}}]}',
    '{"results": [{"modelName": "GRU", "evaluationMetrics": {"MAE": NaN}}]}',
    '{"results": [{"modelName": "GRU", "evaluationMetrics": {"RMSE": Infinity}}]}',
    '{"results": [{"modelName": "GRU", "evaluationMetrics": {"MAE": 1.0}, "comments": null}]}',
])
def test_boolean_nan_metrics_and_null_comments_are_schema_mismatches(reply):
    with pytest.raises(OutputSchemaMismatch):
        train_and_evaluate_models({"historicalData": CSV, "modelsToTrain": ["GRU"]},
                                  generate=fake_service(reply))


def test_numeric_string_metric_is_accepted():
    reply = {"results": [{"modelName": "GRU", "evaluationMetrics": {"MAE": "12.5", "RMSE": 7}}]}
    out = train_and_evaluate_models({"historicalData": CSV, "modelsToTrain": ["GRU"]},
                                    generate=fake_service(reply))
    assert out.results[0].evaluation_metrics == {"MAE": 12.5, "RMSE": 7.0}


def test_suggestion_reply_without_report_is_a_schema_mismatch():
    with pytest.raises(OutputSchemaMismatch):
        suggest_external_data_sources({"city": "Oslo", "historicalDataDescription": "Daily load 2019-2023"},
                                      generate=fake_service({"suggestedDataSources": "- NOAA"}))


@pytest.mark.parametrize("entry", [
    {"evaluationMetrics": {"MAE": 1.0}},
    {"modelName": "GRU"},
])
def test_training_entry_missing_required_field_is_a_schema_mismatch(entry):
    with pytest.raises(OutputSchemaMismatch):
        train_and_evaluate_models({"historicalData": CSV, "modelsToTrain": ["GRU"]},
                                  generate=fake_service({"results": [entry]}))


def test_forecast_reply_in_code_fence_is_parsed():
    reply = ('Here you go:\n```json\n{"forecast": "Demand rises to 3.2 GW.", '
             '"modelExplanation": "Cold snap and weekday load."}\n```')
    out = generate_demand_forecasts({
        "modelType": "LSTM",
        "historicalDataSummary": "s",
        "externalFactors": "f",
        "forecastHorizon": "h",
    }, generate=fake_service(reply))
    assert out.forecast == "Demand rises to 3.2 GW."
    assert out.model_explanation == "Cold snap and weekday load."


def test_suggestion_accepts_snake_case_and_omits_empty_accuracy_block():
    gen = fake_service({"suggestedDataSources": "- NOAA", "report": "Weather helped."})
    out = suggest_external_data_sources(
        {"city": "Oslo", "historical_data_description": "Daily load 2019-2023"}, generate=gen)

    assert out.suggested_data_sources == "- NOAA"
    prompt = gen.call_args.args[0]
    assert "Oslo" in prompt
    assert "what data has been tried" not in prompt


def test_service_failure_propagates_from_the_operation():
    gen = MagicMock(side_effect=ExternalCallFailure("connection refused"))
    with pytest.raises(ExternalCallFailure):
        train_and_evaluate_models({"historicalData": CSV, "modelsToTrain": ["ARIMA"]}, generate=gen)


def test_default_service_is_the_http_client(monkeypatch):
    calls = []

    def fake_generate(prompt, schema=None):
        calls.append(prompt)
        return json.dumps({"forecast": "x", "modelExplanation": "y"})

    monkeypatch.setattr("demandcast.llm_client.generate", fake_generate)
    out = generate_demand_forecasts({"modelType": "GRU", "historicalDataSummary": "s",
                                     "externalFactors": "f", "forecastHorizon": "h"})
    assert out.forecast == "x"
    assert len(calls) == 1
