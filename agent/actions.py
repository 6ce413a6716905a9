# agent/actions.py
"""
Action layer between the UI and the operations.

Every action returns an ActionResult and never raises: validation errors,
service failures and unparseable replies are all logged here and turned
into `success=False` with a readable message.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from agent.flows import generate_demand_forecasts, suggest_external_data_sources, train_and_evaluate_models

logger = logging.getLogger(__name__)

DEFAULT_ERROR = "An unexpected error occurred."


@dataclass(frozen=True)
class ActionResult:
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        if self.success:
            data = self.data.to_wire() if hasattr(self.data, "to_wire") else self.data
            return {"success": True, "data": data}
        return {"success": False, "error": self.error}


def handle_action(operation: Callable[..., Any], payload, **kwargs) -> ActionResult:
    try:
        data = operation(payload, **kwargs)
        return ActionResult(success=True, data=data)
    except Exception as e:
        name = getattr(operation, "__name__", "action")
        detail = getattr(e, "detail", "")
        logger.error(f"{name} failed ({getattr(e, 'kind', type(e).__name__)}): {e} {detail}".rstrip(),
                     exc_info=True)
        return ActionResult(success=False, error=str(e) or DEFAULT_ERROR)


def train_models_action(payload, **kwargs) -> ActionResult:
    return handle_action(train_and_evaluate_models, payload, **kwargs)


def generate_forecast_action(payload, **kwargs) -> ActionResult:
    return handle_action(generate_demand_forecasts, payload, **kwargs)


def suggest_data_sources_action(payload, **kwargs) -> ActionResult:
    return handle_action(suggest_external_data_sources, payload, **kwargs)
