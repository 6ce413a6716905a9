# agent/flows.py
"""
The three generative operations.

Every operation runs the same steps: validate the input, render its prompt,
make one call to the generative service, and parse the reply against the
declared output shape. Nothing is retried or cached.

`generate` is the service boundary, a callable (prompt, schema) -> reply text.
It defaults to the HTTP client in demandcast.llm_client; tests pass a fake.
"""
import logging
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from agent.errors import InvalidInput
from agent.prompts import build_forecast_prompt, build_suggestion_prompt, build_training_prompt
from agent.reply_parser import parse_reply
from agent.schemas import (
    GenerateDemandForecastsInput,
    GenerateDemandForecastsOutput,
    ModelEvaluationResults,
    SuggestExternalDataSourcesInput,
    SuggestExternalDataSourcesOutput,
    TrainAndEvaluateModelsInput,
    output_schema,
)
from demandcast import llm_client

logger = logging.getLogger(__name__)

Generate = Callable[[str, Optional[dict]], str]


def validate_input(model_cls, value: Union[Mapping[str, Any], Any]):
    """Return `value` as a `model_cls` instance, or raise InvalidInput."""
    if isinstance(value, model_cls):
        return value
    if not isinstance(value, Mapping):
        raise InvalidInput(f"Invalid input: expected an object, got {type(value).__name__}")
    try:
        return model_cls.model_validate(dict(value))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '(root)'}: {err['msg']}" for err in e.errors()
        )
        raise InvalidInput(f"Invalid input: {problems}") from e


def _call(name: str, prompt: str, output_cls, generate: Optional[Generate]):
    generate = generate or llm_client.generate
    logger.info("%s: sending %d-char prompt", name, len(prompt))
    reply = generate(prompt, output_schema(output_cls))
    return parse_reply(reply, output_cls)


def suggest_external_data_sources(payload, generate: Optional[Generate] = None) -> SuggestExternalDataSourcesOutput:
    inp = validate_input(SuggestExternalDataSourcesInput, payload)
    prompt = build_suggestion_prompt(inp)
    return _call("suggestExternalDataSources", prompt, SuggestExternalDataSourcesOutput, generate)


def train_and_evaluate_models(payload, generate: Optional[Generate] = None) -> ModelEvaluationResults:
    inp = validate_input(TrainAndEvaluateModelsInput, payload)
    prompt = build_training_prompt(inp)
    return _call("trainAndEvaluateModels", prompt, ModelEvaluationResults, generate)


def generate_demand_forecasts(payload, generate: Optional[Generate] = None) -> GenerateDemandForecastsOutput:
    inp = validate_input(GenerateDemandForecastsInput, payload)
    prompt = build_forecast_prompt(inp)
    return _call("generateDemandForecasts", prompt, GenerateDemandForecastsOutput, generate)
